# storefront/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from storefront.domain.order_status import CheckoutState, OrderStatus


class CartLine(BaseModel):
    """Pozycja koszyka - jedna na produkt dla danego wlasciciela."""

    product_id: int = Field(..., gt=0)
    name: str = ""
    price: Decimal = Field(Decimal("0.00"), ge=0)
    image: str = ""
    quantity: int = Field(1, ge=1)

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


class CartOut(BaseModel):
    owner_ref: str | None = None
    items: List[CartLine]
    total: Decimal


class AddItemIn(BaseModel):
    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")


class SetQuantityIn(BaseModel):
    """Ilosc <= 0 usuwa pozycje."""

    quantity: int


class CategoryOut(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class ProductOut(BaseModel):
    id: int
    name: str
    description: str = ""
    price: Decimal
    image: str = ""
    category_id: int | None = None

    model_config = ConfigDict(from_attributes=True)


class ContactInfo(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ShippingAddress(BaseModel):
    address: str = ""
    city: str = ""
    state: str = ""
    lat: float | None = None
    lng: float | None = None


class CheckoutIn(BaseModel):
    contact: ContactInfo
    shipping_address: ShippingAddress


class OrderIntent(BaseModel):
    """Snapshot danych z checkoutu trzymany po stronie urzadzenia do powrotu z bramki."""

    checkout_token: str
    cart_lines: List[CartLine]
    contact: ContactInfo
    shipping_address: ShippingAddress
    total_price: Decimal
    owner_ref: str | None = None
    created_at: datetime


class CheckoutOut(BaseModel):
    payment_url: str
    checkout_token: str
    amount: Decimal


class OrderItem(BaseModel):
    product_id: int
    name: str
    quantity: int
    price: Decimal


class OrderOut(BaseModel):
    id: int
    order_number: str
    total_amount: Decimal
    status: OrderStatus
    order_date: datetime
    user_id: str | None = None
    items: List[OrderItem]
    customer_detail_id: int | None = None

    model_config = ConfigDict(from_attributes=True)


class OrderStatusIn(BaseModel):
    status: OrderStatus


class FinalizeOut(BaseModel):
    state: CheckoutState
    message: str
    order: OrderOut | None = None


class GuestSession(BaseModel):
    order_id: int
    order_number: str
    customer_email: str
    customer_name: str
    order_data: dict


class GuestOrdersOut(BaseModel):
    pending: List[GuestSession]
    delivered: List[GuestSession]


class InitiatePaymentIn(BaseModel):
    amount: Decimal = Field(..., gt=0)
    product_id: str = Field(..., alias="productId", min_length=1)
    success_url: str = Field(..., alias="successUrl")
    failure_url: str = Field(..., alias="failureUrl")

    model_config = ConfigDict(populate_by_name=True)


class InitiatePaymentOut(BaseModel):
    payment_url: str


class PaymentCallback(BaseModel):
    """Zdekodowany payload z bramki (base64 JSON)."""

    transaction_code: str
    status: str
    total_amount: str
    transaction_uuid: str
    product_code: str
    signature: str

    model_config = ConfigDict(coerce_numbers_to_str=True)
