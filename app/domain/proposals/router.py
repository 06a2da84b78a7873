"""Proposal router - FastAPI endpoints for drafting, sending and accepting proposals"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import Principal, get_current_principal, require_roles
from ...database import get_db
from ...models import Proposal
from ..lifecycle.dependencies import get_orchestrator
from ..lifecycle.orchestrator import LifecycleOrchestrator
from ..lifecycle.states import Role
from .schemas import (
    AcceptProposalResponse,
    LineItemResponse,
    ProposalCreate,
    ProposalResponse,
    SendProposalResponse,
)
from .service import ProposalService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/proposals", tags=["Proposals"])


def get_proposal_service(db: Session = Depends(get_db)) -> ProposalService:
    """Dependency injection for ProposalService"""
    return ProposalService(db)


def to_proposal_response(p: Proposal) -> ProposalResponse:
    return ProposalResponse(
        id=p.id,
        requestId=p.request_id,
        agentId=p.agent_id,
        totalAmount=p.total_amount,
        status=p.status,
        pdfPath=p.pdf_path,
        documentStatus=p.document_status,
        sentAt=p.sent_at,
        acceptedAt=p.accepted_at,
        createdAt=p.created_at,
        lineItems=[LineItemResponse.model_validate(li) for li in p.line_items],
    )


@router.post("", response_model=ProposalResponse, status_code=201)
async def create_proposal(
    data: ProposalCreate,
    principal: Principal = Depends(require_roles(Role.AGENT, Role.ADMIN)),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """
    Draft the proposal for a request, replacing any previous one.
    The request status is left as is until the proposal is sent.
    """
    logger.info(f"📥 Creating proposal for request {data.requestId} by user {principal.id}")
    proposal = await orchestrator.create_proposal(
        data.requestId, [item.model_dump() for item in data.items], principal
    )
    return to_proposal_response(proposal)


@router.get("", response_model=list[ProposalResponse])
async def list_proposals(
    status: Optional[str] = Query(None),
    principal: Principal = Depends(get_current_principal),
    service: ProposalService = Depends(get_proposal_service),
):
    return [to_proposal_response(p) for p in service.list_proposals(principal, status)]


@router.get("/{proposal_id}", response_model=ProposalResponse)
async def get_proposal(
    proposal_id: int,
    principal: Principal = Depends(get_current_principal),
    service: ProposalService = Depends(get_proposal_service),
):
    return to_proposal_response(service.get_proposal(proposal_id, principal))


@router.post("/{proposal_id}/document", response_model=ProposalResponse)
async def regenerate_document(
    proposal_id: int,
    principal: Principal = Depends(require_roles(Role.AGENT, Role.ADMIN)),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """Retry PDF generation for a Draft whose document is still pending"""
    proposal = await orchestrator.regenerate_document(proposal_id, principal)
    return to_proposal_response(proposal)


@router.post("/{proposal_id}/send", response_model=SendProposalResponse)
async def send_proposal(
    proposal_id: int,
    principal: Principal = Depends(require_roles(Role.AGENT, Role.ADMIN)),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """Email the proposal to the client, then mark it Sent and the request Quoted"""
    proposal = await orchestrator.send_proposal(proposal_id, principal)
    return SendProposalResponse(
        message="Proposal sent to client and dashboard updated.",
        proposal=to_proposal_response(proposal),
    )


@router.patch("/{proposal_id}/accept", response_model=AcceptProposalResponse)
async def accept_proposal(
    proposal_id: int,
    principal: Principal = Depends(require_roles(Role.CLIENT)),
    orchestrator: LifecycleOrchestrator = Depends(get_orchestrator),
):
    """Accept a sent proposal; converts the request and starts the project"""
    project = orchestrator.accept_proposal(proposal_id, principal)
    return AcceptProposalResponse(message="Proposal Accepted & Project Started", projectId=project.id)
