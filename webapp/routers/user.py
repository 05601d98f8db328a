"""Account endpoints. Passing `guest_id` merges that guest session into the account."""

from fastapi import APIRouter, Depends, Request, Response, status

from middlewares.rate_limit import limiter
from middlewares.rate_limit_config import RateLimitConfig
from schemas.user import AuthResponse, UserLogin, UserRegister, UserResponse
from webapp.dependencies import Services, get_services

router = APIRouter(prefix="/api/user", tags=["user"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RateLimitConfig.REGISTER)
async def register(
    request: Request, response: Response, data: UserRegister, services: Services = Depends(get_services)
):
    return await services.users.register(data)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(RateLimitConfig.LOGIN)
async def login(
    request: Request, response: Response, data: UserLogin, services: Services = Depends(get_services)
):
    """Login never fails because of the guest merge; `merge_result` is null if it could not run."""
    return await services.users.login(data)


@router.get("/{user_id}", response_model=UserResponse)
@limiter.limit(RateLimitConfig.CATALOG_READ)
async def get_user(
    request: Request, response: Response, user_id: int, services: Services = Depends(get_services)
):
    return await services.users.get_user(user_id)
