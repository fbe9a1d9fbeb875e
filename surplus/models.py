"""
models.py – Pydantic schemas for request/response, plus role and status enums.

JSON keys are camelCase (quantityAvailable, insertedId, ...); Python
attributes stay snake_case.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Roles & statuses ───────────────────────────────────────────────────────────

class Role(str, Enum):
    STUDENT    = "student"
    RESTAURANT = "restaurant"

    @property
    def can_publish_listings(self) -> bool:
        return self is Role.RESTAURANT

    @property
    def can_place_orders(self) -> bool:
        return self is Role.STUDENT

    @property
    def can_manage_orders(self) -> bool:
        return self is Role.RESTAURANT


class OrderStatus(str, Enum):
    PLACED    = "placed"
    ACCEPTED  = "accepted"
    PREPARING = "preparing"
    READY     = "ready"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID    = "paid"


class Principal(BaseModel):
    """Authenticated caller resolved by the identity provider."""
    user_id: str
    role: Role


# ── Request Models ─────────────────────────────────────────────────────────────

class RegisterRequest(BaseModel):
    name: str = Field(default="", max_length=200)
    email: str = Field(default="", max_length=320)
    password: str = Field(default="", max_length=200)
    role: str = Field(default=Role.STUDENT.value, description="student | restaurant")


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class ListingCreate(CamelModel):
    """Form/JSON fields as sent; coercion to numbers happens in CatalogStore."""
    title: Optional[str] = ""
    description: Optional[str] = ""
    price: Optional[float | str] = 0
    quantity_available: Optional[int | float | str] = 0
    image_url: Optional[str] = ""


class PlaceOrderRequest(CamelModel):
    listing_id: str
    quantity: int = 1


class StatusUpdateRequest(BaseModel):
    status: str = ""


# ── Response Models ────────────────────────────────────────────────────────────

class UserOut(CamelModel):
    id: str
    name: str
    email: str
    role: Role


class AuthResponse(BaseModel):
    user: UserOut
    token: str


class ListingOut(CamelModel):
    id: str
    restaurant_id: str
    title: str
    description: str
    price: float
    quantity_available: int
    image_url: str
    created_at: datetime


class ListingCreated(CamelModel):
    success: bool = True
    inserted_id: str


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class ListingPage(BaseModel):
    meta: PageMeta
    data: List[ListingOut]


class OrderOut(CamelModel):
    id: str
    student_id: str
    restaurant_id: Optional[str] = None
    listing_id: str
    quantity: int
    total_amount: float
    payment_status: PaymentStatus
    status: OrderStatus
    created_at: datetime


class PlacedOrder(CamelModel):
    """Result of a successful decrement + order write."""
    order_id: str
    order: OrderOut
    listing_after: ListingOut

    @property
    def quantity_available(self) -> int:
        return self.listing_after.quantity_available


class StatusUpdated(CamelModel):
    modified_count: int


class UploadResult(BaseModel):
    url: str
    public_id: str
