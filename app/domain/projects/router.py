"""Project router - FastAPI endpoints for projects, notes, assets and the client vault"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import Principal, get_current_principal, require_roles
from ...database import get_db
from ...models import Project, ProjectAsset, ProjectNote
from ..lifecycle.states import Role
from .schemas import (
    AssetResponse,
    NoteCreate,
    NoteResponse,
    ProjectResponse,
    ProjectUpdate,
    VaultResponse,
)
from .service import ProjectService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["Projects"])


def get_project_service(db: Session = Depends(get_db)) -> ProjectService:
    """Dependency injection for ProjectService"""
    return ProjectService(db)


def to_asset_response(a: ProjectAsset) -> AssetResponse:
    return AssetResponse(
        id=a.id, fileName=a.file_name, filePath=a.file_path, type=a.type, createdAt=a.created_at
    )


def to_project_response(p: Project, include_assets: bool = False) -> ProjectResponse:
    return ProjectResponse(
        id=p.id,
        requestId=p.request_id,
        clientId=p.client_id,
        companyName=p.client.company_name if p.client else None,
        agentId=p.agent_id,
        agentName=p.agent.full_name if p.agent else None,
        globalStatus=p.global_status,
        progressPercent=p.progress_percent,
        ecd=p.ecd,
        createdAt=p.created_at,
        updatedAt=p.updated_at,
        assets=[to_asset_response(a) for a in p.assets] if include_assets else [],
    )


def to_note_response(n: ProjectNote) -> NoteResponse:
    return NoteResponse(
        id=n.id,
        projectId=n.project_id,
        userId=n.user_id,
        authorName=n.author.full_name if n.author else None,
        content=n.content,
        createdAt=n.created_at,
    )


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    principal: Principal = Depends(get_current_principal),
    service: ProjectService = Depends(get_project_service),
):
    return [to_project_response(p) for p in service.list_projects(principal)]


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: int,
    principal: Principal = Depends(get_current_principal),
    service: ProjectService = Depends(get_project_service),
):
    return to_project_response(service.get_project(project_id, principal), include_assets=True)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    data: ProjectUpdate,
    principal: Principal = Depends(require_roles(Role.AGENT, Role.ADMIN)),
    service: ProjectService = Depends(get_project_service),
):
    """Update delivery status, progress and estimated completion date"""
    return to_project_response(service.update_project(project_id, data, principal))


@router.get("/{project_id}/vault", response_model=VaultResponse)
async def get_project_vault(
    project_id: int,
    principal: Principal = Depends(get_current_principal),
    service: ProjectService = Depends(get_project_service),
):
    return VaultResponse(projectId=project_id, vault=service.get_vault(project_id, principal))


@router.get("/{project_id}/assets", response_model=list[AssetResponse])
async def list_project_assets(
    project_id: int,
    principal: Principal = Depends(get_current_principal),
    service: ProjectService = Depends(get_project_service),
):
    return [to_asset_response(a) for a in service.list_assets(project_id, principal)]


@router.get("/{project_id}/notes", response_model=list[NoteResponse])
async def list_project_notes(
    project_id: int,
    principal: Principal = Depends(get_current_principal),
    service: ProjectService = Depends(get_project_service),
):
    return [to_note_response(n) for n in service.list_notes(project_id, principal)]


@router.post("/{project_id}/notes", response_model=NoteResponse, status_code=201)
async def add_project_note(
    project_id: int,
    data: NoteCreate,
    principal: Principal = Depends(get_current_principal),
    service: ProjectService = Depends(get_project_service),
):
    return to_note_response(service.add_note(project_id, data.content, principal))
