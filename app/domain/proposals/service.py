"""Proposal service - scoped reads of proposals"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Proposal
from ...shared.errors import NotFound
from ..lifecycle.visibility import ensure_access
from .repository import ProposalRepository


class ProposalService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ProposalRepository()

    def list_proposals(self, principal, status: Optional[str] = None) -> list[Proposal]:
        return self.repo.list_proposals(self.db, principal, status)

    def get_proposal(self, proposal_id: int, principal) -> Proposal:
        proposal = self.repo.get_proposal_by_id(self.db, proposal_id)
        if not proposal:
            raise NotFound("Proposal not found")
        return ensure_access(principal, proposal)
