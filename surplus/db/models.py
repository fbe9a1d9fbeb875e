"""
surplus/db/models.py – SQLAlchemy ORM models for `users`, `listings`, `orders`.

Tables are created at startup by Database.create_all().
"""
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase


def new_id() -> str:
    return uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id            = Column(String(32),  primary_key=True, default=new_id)
    name          = Column(String(200), nullable=False)
    email         = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(100), nullable=False)
    role          = Column(String(20),  nullable=False, default="student")
    created_at    = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role}>"


class Listing(Base):
    __tablename__ = "listings"
    __table_args__ = (
        CheckConstraint("quantity_available >= 0", name="ck_listing_quantity_non_negative"),
        CheckConstraint("price >= 0", name="ck_listing_price_non_negative"),
    )

    id                 = Column(String(32),  primary_key=True, default=new_id)
    restaurant_id      = Column(String(32),  ForeignKey("users.id"), nullable=False, index=True)
    title              = Column(String(200), nullable=False)
    description        = Column(Text,        nullable=False, default="")
    price              = Column(Float,       nullable=False, default=0)
    quantity_available = Column(Integer,     nullable=False, default=0)
    image_url          = Column(String(500), nullable=False, default="")
    created_at         = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def __repr__(self) -> str:
        return f"<Listing id={self.id} title={self.title!r} qty={self.quantity_available}>"


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_quantity_positive"),
    )

    id             = Column(String(32), primary_key=True, default=new_id)
    student_id     = Column(String(32), ForeignKey("users.id"),    nullable=False, index=True)
    restaurant_id  = Column(String(32), ForeignKey("users.id"),    nullable=True,  index=True)
    listing_id     = Column(String(32), ForeignKey("listings.id"), nullable=False)
    quantity       = Column(Integer,    nullable=False)
    total_amount   = Column(Float,      nullable=False)
    payment_status = Column(String(20), nullable=False, default="pending")
    status         = Column(String(20), nullable=False, default="placed")
    created_at     = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def __repr__(self) -> str:
        return f"<Order id={self.id} listing={self.listing_id} qty={self.quantity} status={self.status}>"
