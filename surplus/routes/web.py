"""
routes/web.py – Server-rendered UI (Jinja2 templates + session cookie).

Same core calls as the JSON API; only the request/response shape differs:
HTML forms in, rendered pages or 303 redirects out.
"""
import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from ..core.errors import Forbidden, InsufficientQuantity, NotFound, ValidationError
from ..deps import get_blobs, get_catalog, get_identity, get_ledger, session_principal
from ..models import ListingCreate, OrderStatus, Principal, Role, UserOut

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

router = APIRouter(tags=["Web"], include_in_schema=False)

WEB_MAX_LIMIT = 24


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def _login(request: Request, user: UserOut) -> None:
    request.session["user"] = {
        "userId": user.id,
        "name":   user.name,
        "email":  user.email,
        "role":   user.role.value,
    }


def _render(request: Request, name: str, status_code: int = 200, **context):
    context.setdefault("user", request.session.get("user"))
    return templates.TemplateResponse(request, name, context, status_code=status_code)


# ── Home (listings) ────────────────────────────────────────────────────────────

@router.get("/")
async def index(
    request: Request,
    q:     str = Query(default=""),
    page:  int = Query(default=1),
    limit: int = Query(default=12),
):
    result = await get_catalog().search(q, page, limit, max_limit=WEB_MAX_LIMIT)
    return _render(request, "index.html", listings=result.data, meta=result.meta, q=q)


# ── Register / Login / Logout ──────────────────────────────────────────────────

@router.get("/register")
async def register_form(request: Request):
    return _render(request, "register.html", error=None)


@router.post("/register")
async def register(
    request: Request,
    name:     str = Form(default=""),
    email:    str = Form(default=""),
    password: str = Form(default=""),
    role:     str = Form(default=Role.STUDENT.value),
):
    try:
        user, _ = await get_identity().register(name, email, password, role)
    except ValidationError as e:
        return _render(request, "register.html", status_code=400, error=e.message)
    _login(request, user)
    return _redirect("/")


@router.get("/login")
async def login_form(request: Request):
    return _render(request, "login.html", error=None)


@router.post("/login")
async def login(
    request: Request,
    email:    str = Form(default=""),
    password: str = Form(default=""),
):
    try:
        user, _ = await get_identity().login(email, password)
    except ValidationError as e:
        return _render(request, "login.html", status_code=400, error=e.message)
    _login(request, user)
    return _redirect("/")


@router.get("/logout")
async def logout(request: Request):
    request.session.clear()
    return _redirect("/")


# ── Create listing (restaurant) ────────────────────────────────────────────────

@router.get("/create-listing")
async def create_listing_form(request: Request, principal: Optional[Principal] = Depends(session_principal)):
    if principal is None:
        return _redirect("/login")
    if not principal.role.can_publish_listings:
        raise Forbidden("Forbidden: restaurant only")
    return _render(request, "create_listing.html", error=None)


@router.post("/create-listing")
async def create_listing(
    request: Request,
    principal: Optional[Principal] = Depends(session_principal),
    title:             str = Form(default=""),
    description:       str = Form(default=""),
    price:             str = Form(default="0"),
    quantityAvailable: str = Form(default="0"),
    image: Optional[UploadFile] = File(default=None),
):
    if principal is None:
        return _redirect("/login")
    if not principal.role.can_publish_listings:
        raise Forbidden("Forbidden: restaurant only")

    payload = ListingCreate(
        title=title, description=description, price=price, quantity_available=quantityAvailable,
    )
    try:
        get_catalog().validate(payload)
        if image is not None and image.filename:
            uploaded = await get_blobs().put(await image.read(), image.filename, image.content_type or "")
            payload.image_url = uploaded.url
        await get_catalog().create(principal.user_id, payload)
    except ValidationError as e:
        return _render(request, "create_listing.html", status_code=400, error=e.message)
    return _redirect("/")


# ── Listing detail + order ─────────────────────────────────────────────────────

@router.get("/listing/{listing_id}")
async def listing_detail(request: Request, listing_id: str):
    listing = await get_catalog().get(listing_id)
    return _render(request, "listing.html", listing=listing, error=None)


@router.post("/listing/{listing_id}/order")
async def order_listing(
    request: Request,
    listing_id: str,
    principal: Optional[Principal] = Depends(session_principal),
    quantity: str = Form(default="1"),
):
    if principal is None:
        return _redirect("/login")
    try:
        user = await get_identity().get_user(principal.user_id)
    except NotFound:
        raise Forbidden("Only students can order")
    if not user.role.can_place_orders:
        raise Forbidden("Only students can order")

    try:
        await get_ledger().place_order(listing_id, user.id, _parse_quantity(quantity))
    except InsufficientQuantity:
        listing = await get_catalog().get(listing_id)
        return _render(request, "listing.html", status_code=400, listing=listing, error="Insufficient quantity")
    return _redirect("/orders")


# ── Orders ─────────────────────────────────────────────────────────────────────

@router.get("/orders")
async def orders_page(request: Request, principal: Optional[Principal] = Depends(session_principal)):
    if principal is None:
        return _redirect("/login")
    try:
        user = await get_identity().get_user(principal.user_id)
    except NotFound:
        request.session.clear()
        return _redirect("/login")
    orders = await get_ledger().list_orders_for(user.id, user.role)
    return _render(request, "orders.html", orders=orders, statuses=[s.value for s in OrderStatus])


@router.post("/orders/{order_id}/status")
async def order_status(
    order_id: str,
    principal: Optional[Principal] = Depends(session_principal),
    status: str = Form(default=""),
):
    if principal is None:
        return _redirect("/login")
    if not principal.role.can_manage_orders:
        raise Forbidden("Only restaurants can update status")
    await get_ledger().update_order_status(order_id, principal.user_id, status)
    return _redirect("/orders")


def _parse_quantity(raw: str) -> int:
    """Form quantity → int ≥ 1; garbage counts as 1."""
    try:
        return max(1, int(raw))
    except (TypeError, ValueError):
        return 1
