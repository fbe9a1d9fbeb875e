"""routes/listings.py – /api/listings (create, search, mine, by id)"""
from fastapi import APIRouter, Depends, Query

from ..core.catalog import DEFAULT_LIMIT
from ..core.errors import Forbidden
from ..deps import current_principal, get_catalog
from ..models import ListingCreate, ListingCreated, ListingOut, ListingPage, Principal

router = APIRouter(prefix="/api/listings", tags=["Listings"])


@router.post("", response_model=ListingCreated, status_code=201)
async def create_listing(body: ListingCreate, principal: Principal = Depends(current_principal)):
    if not principal.role.can_publish_listings:
        raise Forbidden("Only restaurants can create listings")
    listing = await get_catalog().create(principal.user_id, body)
    return ListingCreated(inserted_id=listing.id)


@router.get("", response_model=ListingPage)
async def search_listings(
    q:     str = Query(default="", description="Substring of title or description"),
    page:  int = Query(default=1),
    limit: int = Query(default=DEFAULT_LIMIT),
):
    """Paginated search. Out-of-range page/limit are clamped, not rejected."""
    return await get_catalog().search(q, page, limit)


# Declared before /{listing_id} so "mine" is never parsed as an id.
@router.get("/mine", response_model=list[ListingOut])
async def my_listings(principal: Principal = Depends(current_principal)):
    if not principal.role.can_publish_listings:
        raise Forbidden("Only restaurants")
    return await get_catalog().list_for_restaurant(principal.user_id)


@router.get("/{listing_id}", response_model=ListingOut)
async def get_listing(listing_id: str):
    return await get_catalog().get(listing_id)
