"""Client router - FastAPI endpoints for client profiles"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import Principal, require_roles
from ...database import get_db
from ...models import ClientProfile
from ..lifecycle.states import Role
from .schemas import AgentClientResponse, ClientProfileResponse, ClientProfileUpdate
from .service import ClientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"])


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


def to_profile_response(profile: ClientProfile, service: ClientService) -> ClientProfileResponse:
    return ClientProfileResponse(
        id=profile.id,
        userId=profile.user_id,
        fullName=profile.user.full_name if profile.user else None,
        email=profile.user.email if profile.user else None,
        companyName=profile.company_name,
        industry=profile.industry,
        websiteUrl=profile.website_url,
        technicalVault=service.read_vault(profile),
        createdAt=profile.created_at,
    )


@router.get("/me", response_model=ClientProfileResponse)
async def get_my_profile(
    principal: Principal = Depends(require_roles(Role.CLIENT)),
    service: ClientService = Depends(get_client_service),
):
    """Get the caller's profile with the technical vault decrypted"""
    return to_profile_response(service.get_my_profile(principal), service)


@router.put("/me", response_model=ClientProfileResponse)
async def update_my_profile(
    data: ClientProfileUpdate,
    principal: Principal = Depends(require_roles(Role.CLIENT)),
    service: ClientService = Depends(get_client_service),
):
    return to_profile_response(service.update_my_profile(data, principal), service)


@router.get("/agent-list", response_model=list[AgentClientResponse])
async def get_agent_clients(
    principal: Principal = Depends(require_roles(Role.AGENT)),
    service: ClientService = Depends(get_client_service),
):
    """Clients that have projects assigned to the calling agent"""
    return service.get_agent_clients(principal)
