#!/usr/bin/env python3
"""Sample discount codes for a fresh database"""
import sys
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "backend"))

from storefront.core.database import SessionLocal
from storefront.models.discount_code import DiscountCode

CODES = [
    {
        "code": "WELCOME10",
        "name": "Welcome 10%",
        "description": "10% off your first order",
        "discount_type": "percentage",
        "discount_value": Decimal("10"),
        "minimum_order_amount": Decimal("0"),
    },
    {
        "code": "SAVE20",
        "name": "20% off, max €50",
        "description": "20% off orders over €100, capped at €50",
        "discount_type": "percentage",
        "discount_value": Decimal("20"),
        "minimum_order_amount": Decimal("100"),
        "maximum_discount_amount": Decimal("50"),
    },
    {
        "code": "FLAT15",
        "name": "€15 off",
        "description": "€15 off orders over €60",
        "discount_type": "fixed_amount",
        "discount_value": Decimal("15"),
        "minimum_order_amount": Decimal("60"),
        "usage_limit": 100,
    },
]


def main():
    db = SessionLocal()
    try:
        for i, data in enumerate(CODES, 1):
            existing = db.query(DiscountCode).filter(DiscountCode.code == data["code"]).first()
            if existing:
                print(f"[{i}/{len(CODES)}] {data['code']} already exists, skipped")
                continue
            db.add(DiscountCode(used_count=0, is_active=True, **data))
            print(f"[{i}/{len(CODES)}] {data['code']} created")
        db.commit()
        print("Done")
    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
