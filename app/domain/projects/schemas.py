"""Project schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_progress
from ..lifecycle.states import ProjectStatus


class ProjectUpdate(BaseModel):
    """Schema for an agent or admin updating delivery progress"""

    globalStatus: Optional[str] = None
    progressPercent: Optional[int] = None
    ecd: Optional[date] = None

    @field_validator("globalStatus")
    @classmethod
    def validate_global_status(cls, v):
        if v is None:
            return v
        allowed = [s.value for s in ProjectStatus]
        if v not in allowed:
            raise ValueError(f"globalStatus must be one of: {', '.join(allowed)}")
        return v

    @field_validator("progressPercent")
    @classmethod
    def validate_progress_percent(cls, v):
        return validate_progress(v)


class AssetResponse(BaseModel):
    id: int
    fileName: str
    filePath: str
    type: str
    createdAt: Optional[datetime] = None


class ProjectResponse(BaseModel):
    """Schema for project response"""

    id: int
    requestId: int
    clientId: int
    companyName: Optional[str] = None
    agentId: Optional[int] = None
    agentName: Optional[str] = None
    globalStatus: str
    progressPercent: int
    ecd: Optional[date] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    assets: list[AssetResponse] = []


class NoteCreate(BaseModel):
    content: str


class NoteResponse(BaseModel):
    id: int
    projectId: int
    userId: int
    authorName: Optional[str] = None
    content: str
    createdAt: Optional[datetime] = None


class VaultResponse(BaseModel):
    projectId: int
    vault: str
