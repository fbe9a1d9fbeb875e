"""
core/ledger.py – InventoryLedger class.
Responsibility: turn a purchase (listing, student, quantity) into an atomic
state transition. Either quantity_available drops by `quantity` AND one order
row exists, or nothing changes and the caller learns why.

The decrement is one conditional UPDATE:

    UPDATE listings SET quantity_available = quantity_available - :q
    WHERE id = :id AND quantity_available >= :q

No application lock is held. Two concurrent buyers racing for the last units
are serialised by the store's row write lock; the loser's WHERE clause no
longer matches and it gets InsufficientQuantity.
"""
import asyncio
import logging

from sqlalchemy import update
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..db.models import Listing
from ..db.session import Database
from ..models import OrderOut, OrderStatus, PlacedOrder, Role
from .convert import listing_out, order_out
from .errors import (
    Forbidden,
    InsufficientQuantity,
    InvalidStatus,
    NotFound,
    OrderRecordingFailed,
    StoreUnavailable,
    ValidationError,
    require_id,
)
from .orders import OrderHistoryStore

logger = logging.getLogger(__name__)


class InventoryLedger:
    """Single owner of (listing.quantity_available, order) consistency."""

    def __init__(self, db: Database, orders: OrderHistoryStore) -> None:
        self._db = db
        self._orders = orders

    # ── Public API ─────────────────────────────────────────────────────────────

    async def place_order(self, listing_id: str, student_id: str, quantity: int) -> PlacedOrder:
        """
        Decrement + record. Not idempotent: two calls place two orders.

        Raises ValidationError (bad id / quantity), NotFound, InsufficientQuantity,
        OrderRecordingFailed, StoreUnavailable.
        """
        require_id(listing_id, "listing")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError("Quantity must be a positive integer")
        return await asyncio.get_event_loop().run_in_executor(
            None, self._do_place_order, listing_id, student_id, quantity
        )

    async def update_order_status(self, order_id: str, caller_restaurant_id: str, new_status: str) -> int:
        """Owner-only status change. Returns modified row count (0 or 1)."""
        require_id(order_id, "order")
        order = await self._orders.get(order_id)
        if order.restaurant_id != caller_restaurant_id:
            raise Forbidden("Not your order")
        return await self._orders.set_status(order_id, self._parse_status(new_status))

    async def list_orders_for(self, user_id: str, role: Role) -> list[OrderOut]:
        return await self._orders.find_for(user_id, role)

    # ── Private ────────────────────────────────────────────────────────────────

    def _do_place_order(self, listing_id: str, student_id: str, quantity: int) -> PlacedOrder:
        with self._db.session() as session:
            listing = self._decrement(session, listing_id, quantity)
            try:
                order = self._orders.add(session, listing, student_id, quantity)
                session.commit()
            except SQLAlchemyError as e:
                # Same transaction: the rollback on exit also undoes the decrement.
                logger.error(
                    f"Order recording failed after decrement: listing={listing_id} "
                    f"student={student_id} quantity={quantity}: {e}"
                )
                raise OrderRecordingFailed(listing_id, quantity) from e
            placed = PlacedOrder(order_id=order.id, order=order_out(order), listing_after=listing_out(listing))
        logger.info(
            f"Order {placed.order_id} placed: listing={listing_id} qty={quantity} "
            f"remaining={placed.quantity_available}"
        )
        return placed

    def _decrement(self, session: Session, listing_id: str, quantity: int) -> Listing:
        """Conditional UPDATE; returns the post-update row or raises."""
        try:
            result = session.execute(
                update(Listing)
                .where(Listing.id == listing_id, Listing.quantity_available >= quantity)
                .values(quantity_available=Listing.quantity_available - quantity)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                if session.get(Listing, listing_id) is None:
                    raise NotFound("Listing not found")
                logger.info(f"Insufficient quantity: listing={listing_id} requested={quantity}")
                raise InsufficientQuantity(listing_id, quantity)
            return session.get(Listing, listing_id, populate_existing=True)
        except OperationalError as e:
            logger.error(f"Decrement failed, store unavailable: listing={listing_id}: {e}")
            raise StoreUnavailable() from e

    @staticmethod
    def _parse_status(value: str) -> OrderStatus:
        try:
            return OrderStatus((value or "").strip().lower())
        except ValueError:
            raise InvalidStatus(f"Invalid status: {value!r}" if value else "Status required")
