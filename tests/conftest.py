import pytest

from orderbridge.settings import Settings


@pytest.fixture
def settings():
    return Settings(
        provider_api_key="test_key",
        webhook_url="https://shop.example/webhook",
        email_to="orders@example.com",
        provider_base_url="https://api.mollie.test/v2",
    )


@pytest.fixture
def submission_data():
    return {
        "customerInfo": {
            "company": "Acme BV",
            "firstName": "Jan",
            "lastName": "Jansen",
            "email": "jan@acme.nl",
            "phone": "+31612345678",
            "address": "Keizersgracht 1",
            "postalCode": "1015 CJ",
            "city": "Amsterdam",
            "country": "NL",
            "kvk": "12345678",
        },
        "packageDetails": {
            "name": "Crystal Box",
            "description": "Luxe geschenkverpakking",
            "quantity": 2,
            "pricePerUnit": 45.0,
        },
        "amounts": {"subtotal": 90.0, "vat": 18.9, "discount": 0, "total": 108.9},
        "newsletter": True,
    }


@pytest.fixture
def provider_order_data():
    """A paid order as returned by GET /v2/orders/{id}."""
    address = {
        "organizationName": "Acme BV",
        "givenName": "Jan",
        "familyName": "Jansen",
        "email": "jan@acme.nl",
        "phone": "+31612345678",
        "streetAndNumber": "Keizersgracht 1",
        "postalCode": "1015 CJ",
        "city": "Amsterdam",
        "country": "NL",
    }
    return {
        "resource": "order",
        "id": "ord_kEn1PlbGa",
        "orderNumber": "CP-20261017-AB12CD",
        "status": "paid",
        "method": "ideal",
        "amount": {"currency": "EUR", "value": "108.90"},
        "createdAt": "2026-10-17T14:05:00+00:00",
        "lines": [
            {
                "name": "Crystal Box - Luxe geschenkverpakking",
                "quantity": 2,
                "unitPrice": {"currency": "EUR", "value": "45.00"},
                "totalAmount": {"currency": "EUR", "value": "90.00"},
                "vatRate": "21.00",
                "vatAmount": {"currency": "EUR", "value": "18.90"},
            }
        ],
        "billingAddress": address,
        "shippingAddress": dict(address),
        "metadata": {
            "order_source": "Crystal Purche Website",
            "discount_code": None,
            "discount_percentage": 0,
            "discount_amount": "0.00",
            "newsletter_signup": "yes",
            "kvk_number": "12345678",
        },
        "_links": {"checkout": {"href": "https://www.mollie.com/checkout/order/kEn1PlbGa"}},
    }
