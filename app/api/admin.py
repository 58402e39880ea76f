import logging

from fastapi import APIRouter, status

from app.schemas.response import SuccessResponse
from app.schemas.users import (
    LoginRequest,
    UserCreate,
    UserGroupCreate,
    UserGroupResponse,
    UserGroupUpdate,
    UserResponse,
    UserUpdate,
)
from app.services import user_service
from app.services.inventory_service import get_dashboard_stats

admin_router = APIRouter()
auth_router = APIRouter()
dashboard_router = APIRouter()
log = logging.getLogger("uvicorn")


@admin_router.get("/users", response_model=SuccessResponse)
async def list_users():
    users = await user_service.list_users()
    return SuccessResponse(data=[UserResponse.model_validate(u).dump() for u in users])


@admin_router.post("/users", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_user(payload: UserCreate):
    user = await user_service.create_user(payload.model_dump())
    return SuccessResponse(data=UserResponse.model_validate(user).dump())


@admin_router.put("/users/{user_id}", response_model=SuccessResponse)
async def update_user(user_id: int, payload: UserUpdate):
    user = await user_service.update_user(user_id, payload.model_dump(exclude_unset=True))
    return SuccessResponse(data=UserResponse.model_validate(user).dump())


@admin_router.delete("/users/{user_id}", response_model=SuccessResponse)
async def deactivate_user(user_id: int):
    user = await user_service.deactivate_user(user_id)
    log.info(f"User {user.username} deactivated")
    return SuccessResponse(data=UserResponse.model_validate(user).dump())


@admin_router.get("/groups", response_model=SuccessResponse)
async def list_groups():
    groups = await user_service.list_groups()
    return SuccessResponse(data=[UserGroupResponse.model_validate(g).dump() for g in groups])


@admin_router.post("/groups", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_group(payload: UserGroupCreate):
    group = await user_service.create_group(payload.model_dump())
    return SuccessResponse(data=UserGroupResponse.model_validate(group).dump())


@admin_router.put("/groups/{group_id}", response_model=SuccessResponse)
async def update_group(group_id: int, payload: UserGroupUpdate):
    group = await user_service.update_group(group_id, payload.model_dump(exclude_unset=True))
    return SuccessResponse(data=UserGroupResponse.model_validate(group).dump())


@auth_router.post("/login", response_model=SuccessResponse)
async def login(payload: LoginRequest):
    """Checks credentials and returns the user; session handling belongs to the client layer."""
    user = await user_service.authenticate(payload.username, payload.password)
    log.info(f"User {user.username} logged in")
    return SuccessResponse(data=UserResponse.model_validate(user).dump())


@dashboard_router.get("/stats", response_model=SuccessResponse)
async def dashboard_stats():
    return SuccessResponse(data=await get_dashboard_stats())
