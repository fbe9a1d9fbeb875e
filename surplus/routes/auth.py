"""routes/auth.py – POST /api/auth/register, POST /api/auth/login"""
from fastapi import APIRouter

from ..deps import get_identity
from ..models import AuthResponse, LoginRequest, RegisterRequest

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/register", response_model=AuthResponse)
async def register(req: RegisterRequest):
    user, token = await get_identity().register(req.name, req.email, req.password, req.role)
    return AuthResponse(user=user, token=token)


@router.post("/login", response_model=AuthResponse)
async def login(req: LoginRequest):
    user, token = await get_identity().login(req.email, req.password)
    return AuthResponse(user=user, token=token)
