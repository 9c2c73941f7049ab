"""
Paid-order notification email.

Totals are recomputed from the provider's order lines. Discount lines carry no
type field; a line counts as a discount when its unit price is negative.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, NamedTuple, Optional, Protocol

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

from .models import OrderLine, ProviderOrder

logger = logging.getLogger(__name__)

DUTCH_WEEKDAYS = ["maandag", "dinsdag", "woensdag", "donderdag", "vrijdag", "zaterdag", "zondag"]
DUTCH_MONTHS = [
    "januari", "februari", "maart", "april", "mei", "juni",
    "juli", "augustus", "september", "oktober", "november", "december",
]
COUNTRY_NAMES = {"NL": "Nederland"}


@dataclass
class OrderTotals:
    subtotal: Decimal = Decimal("0")
    vat_total: Decimal = Decimal("0")
    discount_total: Decimal = Decimal("0")
    product_lines: List[OrderLine] = field(default_factory=list)


class RenderedEmail(NamedTuple):
    subject: str
    html: str


class EmailTransport(Protocol):
    def send(self, to: str, subject: str, html_body: str) -> bool:
        ...


class LoggingEmailTransport:
    """Stand-in transport: records the email in the log instead of sending it."""

    def send(self, to: str, subject: str, html_body: str) -> bool:
        logger.info("Email would be sent to %s: %s (%d bytes)", to, subject, len(html_body))
        return True


def compute_order_totals(lines: List[OrderLine]) -> OrderTotals:
    totals = OrderTotals()
    discount_sum = Decimal("0")
    for line in lines:
        if line.is_discount:
            discount_sum += line.total_amount.value
        else:
            totals.subtotal += line.total_amount.value
            totals.vat_total += line.vat_amount.value
            totals.product_lines.append(line)
    totals.discount_total = abs(discount_sum)
    return totals


def format_dutch_datetime(dt: Optional[datetime]) -> str:
    if dt is None:
        return "Onbekend"
    return (
        f"{DUTCH_WEEKDAYS[dt.weekday()]} {dt.day} {DUTCH_MONTHS[dt.month - 1]} {dt.year}"
        f" om {dt:%H:%M}"
    )


def country_label(code: Optional[str]) -> str:
    return COUNTRY_NAMES.get(code, code or "")


def method_label(method: Optional[str]) -> str:
    if not method:
        return "Onbekend"
    return method[0].upper() + method[1:]


def format_money(value) -> str:
    return f"{Decimal(value):.2f}"


_env = Environment(
    loader=PackageLoader("orderbridge", "templates"),
    autoescape=select_autoescape(["html"]),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)
_env.filters["money"] = format_money


def render_order_email(order: ProviderOrder) -> RenderedEmail:
    billing = order.billing_address
    shipping = order.shipping_address or billing
    company = billing.organization_name if billing else ""
    subject = f"🎉 BETALING ONTVANGEN - {order.order_number} - {company}"
    html = _env.get_template("order_paid.html").render(
        order=order,
        billing=billing,
        shipping=shipping,
        metadata=order.metadata,
        totals=compute_order_totals(order.lines),
        order_date=format_dutch_datetime(order.created_at),
        method=method_label(order.method),
        country=country_label(shipping.country if shipping else None),
    )
    return RenderedEmail(subject, html)


def send_order_email(order: ProviderOrder, email_to: str, transport: EmailTransport) -> bool:
    try:
        email = render_order_email(order)
        sent = transport.send(email_to, email.subject, email.html)
    except Exception:
        logger.exception("Failed to send order email for %s", order.order_number)
        return False

    logger.info(
        "Order email dispatched",
        extra={"to": email_to, "order_number": order.order_number, "amount": str(order.amount.value), "sent": sent},
    )
    return bool(sent)
