"""Service request router - FastAPI endpoints for requests, assignment and the client timeline"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import Principal, get_current_principal, require_roles
from ...database import get_db
from ...models import ServiceRequest
from ..lifecycle.dependencies import get_orchestrator, get_timeline_projector
from ..lifecycle.orchestrator import LifecycleOrchestrator
from ..lifecycle.states import Role
from ..lifecycle.timeline import TimelineProjector
from .schemas import AssignAgentRequest, RequestCreate, RequestResponse, TimelineEntry
from .service import RequestService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/requests", tags=["Requests"])


def get_request_service(db: Session = Depends(get_db)) -> RequestService:
    """Dependency injection for RequestService"""
    return RequestService(db)


def to_request_response(r: ServiceRequest) -> RequestResponse:
    return RequestResponse(
        id=r.id,
        clientId=r.client_id,
        categoryId=r.category_id,
        category=r.category.name if r.category else None,
        details=r.details,
        priority=r.priority,
        agentId=r.agent_id,
        agentName=r.assigned_agent.full_name if r.assigned_agent else None,
        status=r.status,
        proposalId=r.proposal.id if r.proposal else None,
        createdAt=r.created_at,
        updatedAt=r.updated_at,
    )


@router.post("", response_model=RequestResponse, status_code=201)
async def create_request(
    data: RequestCreate,
    principal: Principal = Depends(require_roles(Role.CLIENT)),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """Submit a new service request (status Pending)"""
    request = orchestrator.create_request(principal, data.categoryId, data.details, data.priority)
    return to_request_response(request)


@router.get("", response_model=list[RequestResponse])
async def list_requests(
    status: Optional[str] = Query(None),
    principal: Principal = Depends(get_current_principal),
    service: RequestService = Depends(get_request_service),
):
    """Requests visible to the caller, newest first"""
    return [to_request_response(r) for r in service.list_requests(principal, status)]


@router.get("/timeline/{client_id}", response_model=list[TimelineEntry])
async def get_client_timeline(
    client_id: int,
    principal: Principal = Depends(require_roles(Role.ADMIN)),
    projector: TimelineProjector = Depends(get_timeline_projector),
):
    """Every request of a client with its proposal and project"""
    return projector.for_client(client_id)


@router.get("/{request_id}", response_model=RequestResponse)
async def get_request(
    request_id: int,
    principal: Principal = Depends(get_current_principal),
    service: RequestService = Depends(get_request_service),
):
    return to_request_response(service.get_request(request_id, principal))


@router.patch("/{request_id}/assign", response_model=RequestResponse)
async def assign_agent(
    request_id: int,
    data: AssignAgentRequest,
    principal: Principal = Depends(require_roles(Role.ADMIN)),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """Assign (or re-assign) an agent to a request"""
    logger.info(f"📥 Admin {principal.id} assigning request {request_id} to agent {data.agentId}")
    return to_request_response(orchestrator.assign_agent(request_id, data.agentId))
