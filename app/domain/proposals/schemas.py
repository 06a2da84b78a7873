"""Proposal schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_price


class LineItemInput(BaseModel):
    description: str
    price: float

    @field_validator("price")
    @classmethod
    def validate_price_value(cls, v):
        return validate_price(v)


class ProposalCreate(BaseModel):
    """Schema for an agent drafting (or replacing) the proposal of a request"""

    requestId: int
    items: list[LineItemInput]


class LineItemResponse(BaseModel):
    id: int
    position: int
    description: str
    price: float

    class Config:
        from_attributes = True


class ProposalResponse(BaseModel):
    """Schema for proposal response"""

    id: int
    requestId: int
    agentId: Optional[int] = None
    totalAmount: float
    status: str
    pdfPath: str
    documentStatus: str
    sentAt: Optional[datetime] = None
    acceptedAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None
    lineItems: list[LineItemResponse] = []


class SendProposalResponse(BaseModel):
    message: str
    proposal: ProposalResponse


class AcceptProposalResponse(BaseModel):
    message: str
    projectId: int
