"""Order confirmation and admin notification emails"""
from fastapi import APIRouter, HTTPException

from storefront.core.logging import get_logger
from storefront.schemas.email import SendOrderEmailsRequest
from storefront.services import mail_service
from storefront.services.mail_service import EmailConfigError

router = APIRouter(prefix="/api", tags=["emails"])
logger = get_logger(__name__)


@router.post("/send-order-emails")
async def send_order_emails(req: SendOrderEmailsRequest):
    details = req.order_details
    try:
        customer_result = mail_service.send_order_confirmation(details)
        admin_result = mail_service.send_admin_order_notification(details)
    except EmailConfigError as e:
        logger.error(f"Email configuration error: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.error(f"Order email failed: order={details.order_id} - {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to send order emails")

    return {
        "success": True,
        "customerEmailId": customer_result.get("id"),
        "adminEmailId": admin_result.get("id"),
    }
