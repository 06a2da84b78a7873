"""
Role-scoped visibility for requests, proposals and projects.

One predicate drives both list filtering and single-row rechecks:
  Client -> rows whose client_id is the caller's ClientProfile
  Agent  -> rows whose agent_id is the caller
  Admin  -> everything

Rows fetched by primary key bypass list filters, so every by-key read must go
through ensure_access.
"""

from typing import Union

from sqlalchemy import false, or_, true

from ...models import Project, Proposal, ServiceRequest
from ...shared.errors import Forbidden

ScopedRow = Union[ServiceRequest, Proposal, Project]


def ownership_clause(model, principal):
    """SQLAlchemy filter restricting a query on model to rows the principal may see"""
    if principal.is_admin:
        return true()

    if model is Proposal:
        if principal.is_client:
            if principal.client_id is None:
                return false()
            return Proposal.request.has(ServiceRequest.client_id == principal.client_id)
        return or_(
            Proposal.agent_id == principal.id,
            Proposal.request.has(ServiceRequest.agent_id == principal.id),
        )

    if principal.is_client:
        if principal.client_id is None:
            return false()
        return model.client_id == principal.client_id

    return model.agent_id == principal.id


def can_access(principal, row: ScopedRow) -> bool:
    """Same rule as ownership_clause, evaluated on a loaded row"""
    if principal.is_admin:
        return True

    if isinstance(row, Proposal):
        request = row.request
        if principal.is_client:
            return (
                principal.client_id is not None
                and request is not None
                and request.client_id == principal.client_id
            )
        return row.agent_id == principal.id or (
            request is not None and request.agent_id == principal.id
        )

    if principal.is_client:
        return principal.client_id is not None and row.client_id == principal.client_id

    return row.agent_id == principal.id


def ensure_access(principal, row: ScopedRow) -> ScopedRow:
    if not can_access(principal, row):
        raise Forbidden("Access denied")
    return row
