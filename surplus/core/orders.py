"""
core/orders.py – OrderHistoryStore class.
Responsibility: persist orders and answer "orders for user X".

Orders are only ever created through InventoryLedger, which hands its open
session to `add` so the order row commits together with the decrement.
"""
import asyncio
import logging

from sqlalchemy import update
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from ..db.models import Listing, Order
from ..db.session import Database
from ..models import OrderOut, OrderStatus, PaymentStatus, Role
from .convert import order_out
from .errors import NotFound, StoreUnavailable

logger = logging.getLogger(__name__)


class OrderHistoryStore:

    def __init__(self, db: Database) -> None:
        self._db = db

    # ── Called inside the ledger transaction ───────────────────────────────────

    def add(self, session: Session, listing: Listing, student_id: str, quantity: int) -> Order:
        """Stage an order priced from the post-decrement listing row."""
        order = Order(
            student_id=student_id,
            restaurant_id=listing.restaurant_id,
            listing_id=listing.id,
            quantity=quantity,
            total_amount=(listing.price or 0) * quantity,
            payment_status=PaymentStatus.PENDING.value,
            status=OrderStatus.PLACED.value,
        )
        session.add(order)
        session.flush()
        return order

    # ── Public API ─────────────────────────────────────────────────────────────

    async def get(self, order_id: str) -> OrderOut:
        return await self._run(self._fetch_one, order_id)

    async def find_for(self, user_id: str, role: Role) -> list[OrderOut]:
        """Restaurant → orders it received; anyone else → orders they placed. Newest first."""
        return await self._run(self._fetch_for, user_id, role)

    async def set_status(self, order_id: str, status: OrderStatus) -> int:
        return await self._run(self._do_set_status, order_id, status)

    # ── Private: ORM helpers ───────────────────────────────────────────────────

    async def _run(self, fn, *args):
        try:
            return await asyncio.get_event_loop().run_in_executor(None, fn, *args)
        except OperationalError as e:
            logger.error(f"Order store error: {e}")
            raise StoreUnavailable() from e

    def _fetch_one(self, order_id: str) -> OrderOut:
        with self._db.session() as session:
            order = session.get(Order, order_id)
            if order is None:
                raise NotFound("Order not found")
            return order_out(order)

    def _fetch_for(self, user_id: str, role: Role) -> list[OrderOut]:
        column = Order.restaurant_id if role is Role.RESTAURANT else Order.student_id
        with self._db.session() as session:
            rows = (
                session.query(Order)
                .filter(column == user_id)
                .order_by(Order.created_at.desc(), Order.id.desc())
                .all()
            )
            return [order_out(r) for r in rows]

    def _do_set_status(self, order_id: str, status: OrderStatus) -> int:
        """Returns modified rows: 0 when the order already has `status`."""
        with self._db.session() as session:
            result = session.execute(
                update(Order)
                .where(Order.id == order_id, Order.status != status.value)
                .values(status=status.value)
                .execution_options(synchronize_session=False)
            )
            modified = result.rowcount
        logger.info(f"Order {order_id} status → {status.value} (modified={modified})")
        return modified
