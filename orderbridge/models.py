from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Checkout submission (frontend -> us)

class CustomerInfo(CamelModel):
    company: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    address: str
    postal_code: str
    city: str
    country: str
    kvk: Optional[str] = None


class PackageDetails(CamelModel):
    name: str
    description: str
    quantity: int = Field(ge=1)
    price_per_unit: Decimal = Field(ge=0)


class Amounts(CamelModel):
    subtotal: Decimal = Field(ge=0)
    vat: Decimal = Field(ge=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    total: Decimal = Field(ge=0)


class CheckoutSubmission(CamelModel):
    customer_info: CustomerInfo
    package_details: PackageDetails
    amounts: Amounts
    discount_code: Optional[str] = None
    discount_percentage: Optional[Union[int, float]] = None
    newsletter: bool = False


class CreateOrderResult(BaseModel):
    success: bool = True
    order_id: str
    order_number: str
    checkout_url: str
    amount: str


# Provider shapes (us <-> Mollie)

class Money(CamelModel):
    currency: str = "EUR"
    value: Decimal


class OrderLine(CamelModel):
    name: str
    quantity: int
    unit_price: Money
    total_amount: Money
    vat_rate: Optional[str] = None
    vat_amount: Money

    @property
    def is_discount(self) -> bool:
        return self.unit_price.value < 0


class Address(CamelModel):
    organization_name: Optional[str] = None
    given_name: str
    family_name: str
    email: str
    phone: Optional[str] = None
    street_and_number: str
    postal_code: str
    city: str
    country: str


class ProviderOrderRequest(CamelModel):
    amount: Money
    order_number: str
    lines: List[OrderLine]
    billing_address: Address
    shipping_address: Address
    redirect_url: str
    webhook_url: str
    metadata: Dict[str, Any]


class ProviderOrder(CamelModel):
    id: str
    order_number: Optional[str] = None
    status: str
    amount: Money
    lines: List[OrderLine] = Field(default_factory=list)
    billing_address: Optional[Address] = None
    shipping_address: Optional[Address] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    method: Optional[str] = None
    links: Dict[str, Any] = Field(default_factory=dict, alias="_links")

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, v):
        return v if v is not None else {}

    @property
    def checkout_url(self) -> Optional[str]:
        checkout = self.links.get("checkout") or {}
        return checkout.get("href")
