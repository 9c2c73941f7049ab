"""
Turn a checkout submission into a Mollie order-creation payload.

Amounts are taken from the submission as-is; the only arithmetic done here is
rounding and the VAT on the discount line.
"""
import json
import secrets
import string
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from pydantic import ValidationError

from .errors import SubmissionError
from .models import Address, CheckoutSubmission, Money, OrderLine, ProviderOrderRequest
from .settings import Settings

CURRENCY = "EUR"
VAT_RATE = Decimal("0.21")
VAT_RATE_LABEL = "21.00"
ORDER_PREFIX = "CP"
ORDER_SUFFIX_ALPHABET = string.digits + string.ascii_uppercase
ORDER_SUFFIX_LENGTH = 6

CENT = Decimal("0.01")

REQUIRED_GROUPS = ("customerInfo", "packageDetails", "amounts")


def money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def eur(value: Decimal) -> Money:
    return Money(currency=CURRENCY, value=money(value))


def generate_order_number(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    suffix = "".join(secrets.choice(ORDER_SUFFIX_ALPHABET) for _ in range(ORDER_SUFFIX_LENGTH))
    return f"{ORDER_PREFIX}-{now.astimezone(timezone.utc):%Y%m%d}-{suffix}"


def client_ip_from_forwarded(forwarded_for: Optional[str]) -> str:
    if not forwarded_for:
        return "unknown"
    return forwarded_for.split(",")[0].strip() or "unknown"


def build_address(submission: CheckoutSubmission) -> Address:
    c = submission.customer_info
    return Address(
        organization_name=c.company,
        given_name=c.first_name,
        family_name=c.last_name,
        email=c.email,
        phone=c.phone or None,
        street_and_number=c.address,
        postal_code=c.postal_code,
        city=c.city,
        country=c.country,
    )


def build_product_line(submission: CheckoutSubmission) -> OrderLine:
    pkg = submission.package_details
    amounts = submission.amounts
    return OrderLine(
        name=f"{pkg.name} - {pkg.description}",
        quantity=pkg.quantity,
        unit_price=eur(pkg.price_per_unit),
        total_amount=eur(amounts.subtotal),
        vat_rate=VAT_RATE_LABEL,
        vat_amount=eur(amounts.vat),
    )


def build_discount_line(submission: CheckoutSubmission) -> OrderLine:
    discount = money(submission.amounts.discount)
    return OrderLine(
        name=f"Kortingsactie: {submission.discount_code or 'Korting'}",
        quantity=1,
        unit_price=eur(-discount),
        total_amount=eur(-discount),
        vat_rate=VAT_RATE_LABEL,
        # computed here, independent of the caller's amounts.vat
        vat_amount=eur(-(submission.amounts.discount * VAT_RATE)),
    )


def build_order_request(
    submission: CheckoutSubmission,
    settings: Settings,
    order_number: str,
    client_ip: str = "unknown",
    now: Optional[datetime] = None,
) -> ProviderOrderRequest:
    now = now or datetime.now(timezone.utc)
    amounts = submission.amounts

    lines = [build_product_line(submission)]
    if amounts.discount > 0:
        lines.append(build_discount_line(submission))

    address = build_address(submission)
    metadata = {
        "order_source": settings.order_source,
        "order_number": order_number,
        "discount_code": submission.discount_code or None,
        "discount_percentage": submission.discount_percentage or 0,
        "discount_amount": str(money(amounts.discount)),
        "newsletter_signup": "yes" if submission.newsletter else "no",
        "kvk_number": submission.customer_info.kvk or None,
        "order_date": now.astimezone(timezone.utc).isoformat(),
        "customer_ip": client_ip,
    }

    return ProviderOrderRequest(
        amount=eur(amounts.total),
        order_number=order_number,
        lines=lines,
        billing_address=address,
        shipping_address=address.model_copy(),
        redirect_url=settings.redirect_url,
        webhook_url=settings.webhook_url,
        metadata=metadata,
    )


def parse_submission(raw: bytes) -> CheckoutSubmission:
    try:
        data = json.loads(raw or b"null")
    except ValueError as e:
        raise SubmissionError(f"Ongeldige JSON: {e}") from e
    if not isinstance(data, dict):
        raise SubmissionError("Verplichte velden ontbreken")

    missing = [k for k in REQUIRED_GROUPS if not data.get(k)]
    if missing:
        raise SubmissionError(f"Verplichte velden ontbreken: {', '.join(missing)}")

    try:
        return CheckoutSubmission.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise SubmissionError(f"Ongeldige invoer: {problems}") from e
