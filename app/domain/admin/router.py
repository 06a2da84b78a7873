"""Admin router - FastAPI endpoints for account approval, agents, clients, categories and health"""

import logging

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...auth import Principal, get_current_principal, require_roles
from ...database import get_db
from ...models import ClientProfile, ServiceCategory, User
from ..lifecycle.dependencies import get_notifier
from ..lifecycle.states import Role
from .schemas import (
    AdminClientResponse,
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    UserResponse,
    UserStatusResponse,
    UserStatusUpdate,
)
from .service import AdminService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

require_admin = require_roles(Role.ADMIN)


def get_admin_service(
    db: Session = Depends(get_db), notifier=Depends(get_notifier)
) -> AdminService:
    """Dependency injection for AdminService"""
    return AdminService(db, notifier=notifier)


def to_user_response(u: User) -> UserResponse:
    return UserResponse(
        id=u.id,
        fullName=u.full_name,
        email=u.email,
        mobile=u.mobile,
        role=u.role,
        status=u.status,
        isEmailVerified=bool(u.is_email_verified),
        createdAt=u.created_at,
    )


def to_category_response(c: ServiceCategory) -> CategoryResponse:
    return CategoryResponse(id=c.id, name=c.name, description=c.description, createdAt=c.created_at)


def to_client_response(profile: ClientProfile, total_projects, active_projects, total_requests) -> AdminClientResponse:
    user = profile.user
    return AdminClientResponse(
        id=user.id,
        clientId=profile.id,
        name=user.full_name,
        email=user.email,
        company=profile.company_name or "No Company",
        phone=user.mobile,
        status=user.status,
        joinedDate=user.created_at,
        totalProjects=int(total_projects),
        activeProjects=int(active_projects),
        totalRequests=int(total_requests),
    )


# ============================================================================
# ACCOUNTS
# ============================================================================


@router.get("/users/pending", response_model=list[UserResponse])
async def get_pending_users(
    principal: Principal = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Accounts that verified their email and await approval"""
    return [to_user_response(u) for u in service.get_pending_users()]


@router.patch("/users/{user_id}/status", response_model=UserStatusResponse)
async def update_user_status(
    user_id: int,
    data: UserStatusUpdate,
    principal: Principal = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Approve, suspend or send an account back to review"""
    user, notification_sent = await service.update_user_status(user_id, data.status)
    return UserStatusResponse(
        message=f"User status updated to {user.status}",
        user=to_user_response(user),
        notificationSent=notification_sent,
    )


@router.get("/agents", response_model=list[UserResponse])
async def get_agents(
    principal: Principal = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return [to_user_response(u) for u in service.get_agents()]


@router.patch("/agents/{agent_id}/status", response_model=UserStatusResponse)
async def update_agent_status(
    agent_id: int,
    data: UserStatusUpdate,
    principal: Principal = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Suspend or reinstate an agent; other accounts are NotFound here"""
    agent, notification_sent = await service.update_agent_status(agent_id, data.status)
    return UserStatusResponse(
        message=f"Agent status updated to {agent.status}",
        user=to_user_response(agent),
        notificationSent=notification_sent,
    )


@router.get("/clients", response_model=list[AdminClientResponse])
async def get_clients(
    principal: Principal = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    """Every client account with project and request counts, newest first"""
    return [to_client_response(*row) for row in service.get_clients()]


# ============================================================================
# SERVICE CATEGORIES
# ============================================================================


@router.get("/categories", response_model=list[CategoryResponse])
async def get_categories(
    principal: Principal = Depends(get_current_principal),
    service: AdminService = Depends(get_admin_service),
):
    """Category list is readable by every signed-in role (clients pick one when requesting)"""
    return [to_category_response(c) for c in service.get_categories()]


@router.post("/categories", response_model=CategoryResponse, status_code=201)
async def create_category(
    data: CategoryCreate,
    principal: Principal = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return to_category_response(service.create_category(data))


@router.put("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    principal: Principal = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    return to_category_response(service.update_category(category_id, data))


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: int,
    principal: Principal = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    service.delete_category(category_id)
    return {"message": "Category deleted"}


# ============================================================================
# HEALTH
# ============================================================================


@router.get("/health")
async def get_system_health(
    principal: Principal = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
):
    healthy, payload = service.get_system_health()
    return JSONResponse(status_code=200 if healthy else 500, content=jsonable_encoder(payload))
