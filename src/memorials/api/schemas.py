"""Pydantic request/response schemas for the memorials API.

Request bodies accept both snake_case and the camelCase keys browser
clients send (``cartId``, ``billingDetails``...). Responses are snake_case.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Checkout Request Schemas ---


class AddressSchema(RequestModel):
    line1: str | None = None
    line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None


class ContactSchema(RequestModel):
    name: str | None = Field(None, max_length=150)
    email: str | None = Field(None, max_length=254)
    phone: str | None = Field(None, max_length=50)
    address: AddressSchema | None = None


class RequestedProduct(RequestModel):
    product_id: str | None = None
    product: str | None = None
    quantity: int = Field(1, ge=1)
    variant_name: str | None = None
    variant: str | None = None
    price: float | None = Field(None, ge=0)


class CreateIntentRequest(RequestModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "products": [{"product_id": "prod-tree-001", "quantity": 1, "variant_name": "Single Tree"}],
                    "obituary_id": "obit-001",
                    "dedication_message": "In loving memory of a dear friend.",
                    "billing_details": {"name": "Jane Doe", "email": "jane@example.com"},
                }
            ]
        },
    )

    cart_id: str | None = None
    products: list[RequestedProduct] | None = None
    currency: str | None = Field(None, max_length=3)
    billing_details: ContactSchema | None = None
    shipping_details: ContactSchema | None = None
    order_id: str | None = None
    obituary_id: str | None = None
    obituary_name: str | None = Field(None, max_length=255)
    dedication_message: str | None = None
    order_notes: str | None = None
    payment_method: str | None = None


class ConfirmPaymentRequest(RequestModel):
    payment_intent_id: str
    order_id: str | None = None
    cart_id: str | None = None


class CancelPaymentRequest(RequestModel):
    payment_intent_id: str | None = None
    order_id: str | None = None


class RefundRequest(RequestModel):
    order_id: str
    amount: float | None = Field(None, gt=0)
    reason: str | None = None


class ConfigureGatewayRequest(RequestModel):
    should_succeed: bool = True
    failure_reason: str | None = None


# --- Obituary Request Schemas ---


class ObituaryFields(RequestModel):
    middle_name: str | None = Field(None, max_length=100)
    birth_date: date | None = None
    death_date: date | None = None
    age: int | None = Field(None, ge=0)
    photo: str | None = None
    location: str | None = None
    biography: str | None = None
    video_url: str | None = None
    external_video: str | None = None
    embedded_video: str | None = None
    service_type: str | None = None
    service_date: datetime | None = None
    service_location: str | None = None
    floral_store_link: str | None = None
    tree_planting_link: str | None = None
    background_image: str | None = None
    slug: str | None = Field(None, max_length=255)


class CreateObituaryRequest(ObituaryFields):
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    is_published: bool = True


class UpdateObituaryRequest(ObituaryFields):
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    is_published: bool | None = None


# --- Condolence / Tribute Request Schemas ---


class SubmitCondolenceRequest(RequestModel):
    obituary_id: str
    name: str = Field(..., max_length=150)
    email: str | None = Field(None, max_length=254)
    message: str
    is_private: bool = False
    has_candle: bool = False
    gesture_id: str | None = None
    gesture_description: str | None = None


class UpdateCondolenceRequest(RequestModel):
    name: str | None = Field(None, max_length=150)
    email: str | None = Field(None, max_length=254)
    message: str | None = None
    is_private: bool | None = None
    has_candle: bool | None = None
    is_approved: bool | None = None


class CreateTributeRequest(RequestModel):
    obituary_id: str
    name: str = Field(..., max_length=150)
    email: str | None = Field(None, max_length=254)
    message: str
    photos: list[str] | None = None
    videos: list[str] | None = None


class UpdateTributeRequest(RequestModel):
    name: str | None = Field(None, max_length=150)
    email: str | None = Field(None, max_length=254)
    message: str | None = None
    photos: list[str] | None = None
    videos: list[str] | None = None


# --- Product Request Schemas ---


class VariantSchema(RequestModel):
    name: str = Field(..., max_length=100)
    price: float = Field(..., ge=0)
    quantity: str | None = None
    compare_at_price: float | None = Field(None, ge=0)
    sku: str | None = Field(None, max_length=50)
    is_default: bool = False
    is_active: bool = True


class CreateProductRequest(RequestModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "sku": "TREE-MEMORIAL",
                    "name": "Memorial Tree",
                    "product_type": "tree",
                    "variants": [{"name": "Single Tree", "price": 39.95, "is_default": True}],
                    "stock_quantity": 100,
                }
            ]
        },
    )

    sku: str = Field(..., max_length=50)
    name: str = Field(..., max_length=255)
    product_type: str = "tree"
    slug: str | None = Field(None, max_length=255)
    description: str | None = None
    highlights: list[str] | None = None
    images: list[str] | None = None
    variants: list[VariantSchema] | None = None
    taxable: bool = False
    brand_id: str | None = None
    stock_quantity: int = 0


class UpdateProductRequest(RequestModel):
    name: str | None = Field(None, max_length=255)
    description: str | None = None
    highlights: list[str] | None = None
    images: list[str] | None = None
    taxable: bool | None = None
    brand_id: str | None = None


class AdjustStockRequest(RequestModel):
    delta: int
    reason: str | None = Field(None, max_length=100)


# --- Cart / Order Request Schemas ---


class CreateCartRequest(RequestModel):
    products: list[RequestedProduct] = Field(..., min_length=1)


class AddCartItemRequest(RequestModel):
    product_id: str
    quantity: int = Field(1, ge=1)
    variant_name: str | None = None
    price: float | None = Field(None, ge=0)


class OrderStatusRequest(RequestModel):
    status: str


# --- Response Schemas ---


class StatusResponse(BaseModel):
    status: str = "ok"


class IdResponse(BaseModel):
    id: str


class IntentResponse(BaseModel):
    client_secret: str | None = None
    payment_intent_id: str
    order_id: str
    cart_id: str
    amount: int
    tax: float
    total_with_tax: float


class PaymentStatusResponse(BaseModel):
    status: str
    amount: float
    currency: str
