"""Bootstrap the initial admin account from ADMIN_EMAIL / ADMIN_PASSWORD"""
from storefront.core.config import settings
from storefront.core.database import SessionLocal
from storefront.services.auth_service import get_user_by_email, create_user


def main():
    if not settings.ADMIN_PASSWORD:
        print("ADMIN_PASSWORD is not set; nothing created")
        return

    db = SessionLocal()
    try:
        existing = get_user_by_email(db, settings.ADMIN_EMAIL)
        if existing:
            print(f"Already exists: {settings.ADMIN_EMAIL}")
            return

        user = create_user(
            db,
            email=settings.ADMIN_EMAIL,
            password=settings.ADMIN_PASSWORD,
            name="Administrator",
            role="admin",
        )
        print(f"Admin created: id={user.id}, email={user.email}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
