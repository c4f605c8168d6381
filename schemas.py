"""
Document Schemas for the FoodExpress store

Each Pydantic model describes one JSON document kept by the store. Four
records are persisted (products, categories, orders, config); cart items only
live in the customer's own cart record and, once checked out, inside orders.

Cart items and order items are value copies of product data taken when the
customer picked them, so later product edits never rewrite order history.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


def new_id() -> str:
    """Fresh short identifier for products, categories, cart lines and orders."""
    return uuid.uuid4().hex[:9]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)

# -----
# Enums
# -----

class Role(str, Enum):
    CUSTOMER = "CUSTOMER"
    STAFF = "STAFF"
    ADMIN = "ADMIN"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ContactMethod(str, Enum):
    PHONE = "Điện thoại"
    TELEGRAM = "Telegram"
    FACEBOOK = "Facebook"
    WECHAT = "WeChat"

# -------
# Catalog
# -------

class Topping(BaseModel):
    id: str = Field(default_factory=new_id, description="Unique within the owning product")
    name: str = Field(..., description="Topping display name")
    price: float = Field(..., ge=0, description="Extra price in USD")


class Product(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str = Field(..., description="Product name")
    description: str = Field("", description="Menu description")
    price: float = Field(..., ge=0, description="Unit price in USD")
    category: str = Field(..., description="Category name (soft reference, not an id)")
    image_url: str = Field("", description="Product image URL")
    is_available: bool = Field(True, description="Shown to customers when true")
    toppings: List[Topping] = Field(default_factory=list)

    @field_validator("toppings")
    @classmethod
    def topping_ids_unique(cls, toppings: List[Topping]) -> List[Topping]:
        ids = [t.id for t in toppings]
        if len(ids) != len(set(ids)):
            raise ValueError("topping ids must be unique within a product")
        return toppings

    def find_topping(self, topping_id: str) -> Optional[Topping]:
        for topping in self.toppings:
            if topping.id == topping_id:
                return topping
        return None


class Category(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str = Field(..., min_length=1, description="Display label, also the join key from Product.category")

# ------------
# Order Models
# ------------

class CartItem(BaseModel):
    cart_id: str = Field(default_factory=new_id, description="Unique cart line id")
    product_id: str = Field(..., description="Product the snapshot was taken from")
    name: str = Field(..., description="Product name snapshot")
    description: str = ""
    price: float = Field(..., ge=0, description="Unit price snapshot in USD")
    image_url: str = ""
    category: str = ""
    quantity: int = Field(..., ge=1)
    selected_toppings: List[Topping] = Field(default_factory=list)
    note: Optional[str] = None

    @classmethod
    def from_product(cls, product: Product, quantity: int = 1,
                     toppings: Optional[List[Topping]] = None, note: Optional[str] = None) -> "CartItem":
        return cls(
            product_id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            image_url=product.image_url,
            category=product.category,
            quantity=quantity,
            selected_toppings=[t.model_copy() for t in (toppings or [])],
            note=note or None,
        )

    @property
    def toppings_price(self) -> float:
        return sum(t.price for t in self.selected_toppings)

    @property
    def line_total(self) -> float:
        return (self.price + self.toppings_price) * self.quantity


class Order(BaseModel):
    id: str = Field(default_factory=new_id)
    items: List[CartItem]
    total_amount: float = Field(..., ge=0, description="Total in USD")
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = Field(default_factory=utc_now)
    customer_name: str = ""
    contact_method: ContactMethod = ContactMethod.PHONE
    contact_value: str = ""
    delivery_address: Optional[str] = None
    table_number: Optional[str] = None
    cancel_reason: Optional[str] = None

    @model_validator(mode="after")
    def cancel_reason_matches_status(self) -> "Order":
        if self.status == OrderStatus.CANCELLED and not self.cancel_reason:
            raise ValueError("a cancelled order needs a cancel reason")
        if self.status != OrderStatus.CANCELLED and self.cancel_reason:
            raise ValueError("only cancelled orders carry a cancel reason")
        return self

    @property
    def display_code(self) -> str:
        return "#" + self.id[-4:].upper()

# ------
# Config
# ------

class ContactLink(BaseModel):
    id: str = Field(default_factory=new_id)
    platform: str = Field(..., description="Facebook, Zalo, Telegram, Hotline...")
    label: str
    value: str = Field(..., description="URL or phone number")
    is_active: bool = True


class SystemConfig(BaseModel):
    store_name: str
    store_address: str
    store_phone: str
    telegram_username: str
    exchange_rate_khr: float = Field(..., gt=0, description="1 USD = ? KHR")
    exchange_rate_vnd: float = Field(..., gt=0, description="1 USD = ? VND")
    banner_url: str
    notification_text: str
    kitchen_notification_text: str
    contact_links: List[ContactLink]

    @field_validator("telegram_username")
    @classmethod
    def strip_at(cls, value: str) -> str:
        return value.strip().lstrip("@")

    @property
    def active_contact_links(self) -> List[ContactLink]:
        return [link for link in self.contact_links if link.is_active]
