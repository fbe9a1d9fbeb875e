"""
core/catalog.py – CatalogStore class.
Responsibility: create, search and fetch listings.

All I/O goes through SQLAlchemy sessions; blocking calls are wrapped in
run_in_executor so they don't block the event loop.
"""
import asyncio
import logging
import math

from sqlalchemy.exc import OperationalError

from ..db.models import Listing
from ..db.session import Database
from ..models import ListingCreate, ListingOut, ListingPage, PageMeta
from .convert import listing_out
from .errors import NotFound, StoreUnavailable, ValidationError, require_id

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 12
MAX_LIMIT     = 100


class CatalogStore:
    """Listings persistence. Never touches quantity after creation (see InventoryLedger)."""

    def __init__(self, db: Database) -> None:
        self._db = db

    # ── Public API ─────────────────────────────────────────────────────────────

    async def create(self, restaurant_id: str, payload: ListingCreate) -> ListingOut:
        fields = self._coerce(payload)
        return await self._run(self._do_create, restaurant_id, fields)

    def validate(self, payload: ListingCreate) -> None:
        """Raise the ValidationError create() would, without touching the store."""
        self._coerce(payload)

    async def search(
        self,
        q: str = "",
        page: int = 1,
        limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
    ) -> ListingPage:
        """Case-insensitive substring search over title/description, newest first."""
        page  = max(1, page)
        limit = max(1, min(max_limit, limit))
        return await self._run(self._fetch_page, q.strip(), page, limit)

    async def get(self, listing_id: str) -> ListingOut:
        require_id(listing_id, "listing")
        return await self._run(self._fetch_one, listing_id)

    async def list_for_restaurant(self, restaurant_id: str) -> list[ListingOut]:
        return await self._run(self._fetch_owned, restaurant_id)

    # ── Private: ORM helpers ───────────────────────────────────────────────────

    async def _run(self, fn, *args):
        try:
            return await asyncio.get_event_loop().run_in_executor(None, fn, *args)
        except OperationalError as e:
            logger.error(f"Catalog store error: {e}")
            raise StoreUnavailable() from e

    def _do_create(self, restaurant_id: str, fields: dict) -> ListingOut:
        with self._db.session() as session:
            listing = Listing(restaurant_id=restaurant_id, **fields)
            session.add(listing)
            session.flush()
            item = listing_out(listing)
        logger.info(f"Listing created: {item.id} by {restaurant_id} ({item.title!r} x{item.quantity_available})")
        return item

    def _fetch_page(self, q: str, page: int, limit: int) -> ListingPage:
        with self._db.session() as session:
            query = session.query(Listing)
            if q:
                like = f"%{_escape_like(q)}%"
                query = query.filter(
                    Listing.title.ilike(like, escape="\\") | Listing.description.ilike(like, escape="\\")
                )
            total = query.count()
            rows = (
                query.order_by(Listing.created_at.desc(), Listing.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )
            data = [listing_out(r) for r in rows]
        meta = PageMeta(total=total, page=page, limit=limit, pages=math.ceil(total / limit))
        return ListingPage(meta=meta, data=data)

    def _fetch_one(self, listing_id: str) -> ListingOut:
        with self._db.session() as session:
            listing = session.get(Listing, listing_id)
            if listing is None:
                raise NotFound("Listing not found")
            return listing_out(listing)

    def _fetch_owned(self, restaurant_id: str) -> list[ListingOut]:
        with self._db.session() as session:
            rows = (
                session.query(Listing)
                .filter(Listing.restaurant_id == restaurant_id)
                .order_by(Listing.created_at.desc(), Listing.id.desc())
                .all()
            )
            return [listing_out(r) for r in rows]

    # ── Private: Coercion ──────────────────────────────────────────────────────

    @staticmethod
    def _coerce(payload: ListingCreate) -> dict:
        """Missing/non-numeric numbers become 0; negatives and blank title are rejected."""
        title = (payload.title or "").strip()
        if not title:
            raise ValidationError("Title is required")
        price    = _number(payload.price)
        quantity = _number(payload.quantity_available)
        if price < 0:
            raise ValidationError("Price must be >= 0")
        if quantity < 0 or quantity != int(quantity):
            raise ValidationError("quantityAvailable must be a whole number >= 0")
        return {
            "title":              title,
            "description":        payload.description or "",
            "price":              price,
            "quantity_available": int(quantity),
            "image_url":          payload.image_url or "",
        }


def _number(value) -> float:
    try:
        n = float(value)
    except (TypeError, ValueError):
        return 0.0
    return n if math.isfinite(n) else 0.0


def _escape_like(q: str) -> str:
    return q.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
