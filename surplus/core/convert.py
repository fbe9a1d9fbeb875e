"""core/convert.py – ORM row → response model converters."""
from ..db.models import Listing, Order, User
from ..models import ListingOut, OrderOut, UserOut


def listing_out(row: Listing) -> ListingOut:
    return ListingOut(
        id=row.id,
        restaurant_id=row.restaurant_id,
        title=row.title or "",
        description=row.description or "",
        price=row.price or 0,
        quantity_available=row.quantity_available or 0,
        image_url=row.image_url or "",
        created_at=row.created_at,
    )


def order_out(row: Order) -> OrderOut:
    return OrderOut(
        id=row.id,
        student_id=row.student_id,
        restaurant_id=row.restaurant_id,
        listing_id=row.listing_id,
        quantity=row.quantity,
        total_amount=row.total_amount,
        payment_status=row.payment_status,
        status=row.status,
        created_at=row.created_at,
    )


def user_out(row: User) -> UserOut:
    return UserOut(id=row.id, name=row.name, email=row.email, role=row.role)
