"""
deps.py – Dependency Injection: singleton service instances.

wire() builds every component from one Database; it runs once at import with
the environment settings and again in tests with a throwaway database.
"""
from datetime import timedelta

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import Settings
from .core.blobs import BlobStore, LocalBlobStore
from .core.catalog import CatalogStore
from .core.identity import IdentityProvider
from .core.ledger import InventoryLedger
from .core.orders import OrderHistoryStore
from .db.session import Database
from .models import Principal

bearer_scheme = HTTPBearer(auto_error=False)


def wire(settings: Settings, db: Database | None = None) -> None:
    global _settings, _db, _catalog, _orders, _ledger, _identity, _blobs
    _settings = settings
    _db       = db or Database(settings.database_url)
    _catalog  = CatalogStore(_db)
    _orders   = OrderHistoryStore(_db)
    _ledger   = InventoryLedger(_db, _orders)
    _identity = IdentityProvider(
        _db,
        secret=settings.jwt_secret,
        token_ttl=timedelta(days=settings.token_ttl_days),
        bcrypt_rounds=settings.bcrypt_rounds,
    )
    _blobs    = LocalBlobStore(settings.media_dir, settings.media_url)


# ── Core singletons ────────────────────────────────────────────────────────────

_settings: Settings
_db:       Database
_catalog:  CatalogStore
_orders:   OrderHistoryStore
_ledger:   InventoryLedger
_identity: IdentityProvider
_blobs:    BlobStore

wire(Settings.from_env())


# ── Getters (used in routes) ───────────────────────────────────────────────────

def get_settings() -> Settings:          return _settings
def get_database() -> Database:          return _db
def get_catalog()  -> CatalogStore:      return _catalog
def get_orders()   -> OrderHistoryStore: return _orders
def get_ledger()   -> InventoryLedger:   return _ledger
def get_identity() -> IdentityProvider:  return _identity
def get_blobs()    -> BlobStore:         return _blobs


# ── Auth dependencies ──────────────────────────────────────────────────────────

def current_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Principal:
    """Bearer token → Principal. Raises Unauthorized (401)."""
    return get_identity().authenticate(creds.credentials if creds else None)


def session_principal(request: Request) -> Principal | None:
    """Web session cookie → Principal, or None when logged out."""
    user = request.session.get("user")
    if not user:
        return None
    return Principal(user_id=user["userId"], role=user["role"])
