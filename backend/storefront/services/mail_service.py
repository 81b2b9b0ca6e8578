"""Order emails via Resend"""
from pathlib import Path
import resend
from jinja2 import Environment, FileSystemLoader, select_autoescape

from storefront.core.config import settings
from storefront.schemas.email import OrderDetails
from storefront.services.pricing import D, format_money
from storefront.core.logging import get_logger

logger = get_logger(__name__)

template_dir = Path(__file__).parent.parent / "templates" / "email"
jinja_env = Environment(
    loader=FileSystemLoader(str(template_dir)),
    autoescape=select_autoescape(["html"]),
)
jinja_env.filters["money"] = format_money


class EmailConfigError(Exception):
    """Resend is not configured on this server"""


def _init_resend():
    if not settings.RESEND_API_KEY:
        raise EmailConfigError("Resend API key not configured")
    resend.api_key = settings.RESEND_API_KEY


def _from_address() -> str:
    return f"{settings.STORE_NAME} <{settings.RESEND_FROM_EMAIL}>"


def _context(details: OrderDetails) -> dict:
    return {
        "order": details,
        "lines": [
            {"name": i.name, "quantity": i.quantity, "line_total": D(i.price) * i.quantity}
            for i in details.items
        ],
        "store_name": settings.STORE_NAME,
        "support_email": settings.SUPPORT_EMAIL,
    }


def _send(to_email: str, subject: str, template_name: str, context: dict) -> dict:
    html = jinja_env.get_template(template_name).render(**context)
    return resend.Emails.send({
        "from": _from_address(),
        "to": [to_email],
        "subject": subject,
        "html": html,
    })


def send_order_confirmation(details: OrderDetails) -> dict:
    """Confirmation to the customer"""
    _init_resend()
    result = _send(
        details.customer_email,
        f"Order Confirmation - #{details.order_id}",
        "order_confirmation.html",
        _context(details),
    )
    logger.info(f"Order confirmation sent: order={details.order_id}, to={details.customer_email}")
    return result


def send_admin_order_notification(details: OrderDetails) -> dict:
    """New-order alert to the shop"""
    _init_resend()
    result = _send(
        settings.ADMIN_NOTIFICATION_EMAIL,
        f"New order #{details.order_id} - {format_money(details.total_amount)}",
        "admin_order_notification.html",
        _context(details),
    )
    logger.info(f"Admin order notification sent: order={details.order_id}")
    return result
