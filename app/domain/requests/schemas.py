"""Service request schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_priority


class RequestCreate(BaseModel):
    """Schema for a client submitting a service request"""

    categoryId: Optional[int] = None
    details: Optional[str] = None
    priority: Optional[str] = None

    @field_validator("priority")
    @classmethod
    def validate_priority_value(cls, v):
        return validate_priority(v)


class AssignAgentRequest(BaseModel):
    agentId: int


class RequestResponse(BaseModel):
    """Schema for service request response"""

    id: int
    clientId: int
    categoryId: Optional[int] = None
    category: Optional[str] = None
    details: Optional[str] = None
    priority: str
    agentId: Optional[int] = None
    agentName: Optional[str] = None
    status: str
    proposalId: Optional[int] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class TimelineProposal(BaseModel):
    id: int
    status: str
    amount: float
    date: Optional[datetime] = None
    pdf: Optional[str] = None


class TimelineProject(BaseModel):
    id: int
    status: str
    progress: int
    startDate: Optional[datetime] = None
    completionDate: Optional[date] = None


class TimelineEntry(BaseModel):
    """One request with its proposal and project, as shown on the client timeline"""

    requestId: int
    category: str
    details: Optional[str] = None
    priority: Optional[str] = None
    requestDate: Optional[datetime] = None
    requestStatus: str
    agentName: Optional[str] = None
    proposal: Optional[TimelineProposal] = None
    project: Optional[TimelineProject] = None
