"""Proposal repository - Database operations for proposals and line items"""

from typing import Iterable, Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Proposal, ProposalLineItem
from ..lifecycle.states import (
    PLACEHOLDER_DOCUMENT,
    DocumentStatus,
    ProposalStatus,
)
from ..lifecycle.visibility import ownership_clause


class ProposalRepository:
    """Repository for proposal database operations. Writes only flush."""

    @staticmethod
    def get_proposal_by_id(
        db: Session, proposal_id: int, for_update: bool = False
    ) -> Optional[Proposal]:
        query = (
            db.query(Proposal)
            .options(joinedload(Proposal.line_items))
            .filter(Proposal.id == proposal_id)
        )
        if for_update:
            # Row lock only; eager-loaded children are not part of a FOR UPDATE
            query = (
                db.query(Proposal)
                .filter(Proposal.id == proposal_id)
                .with_for_update()
                .populate_existing()
            )
        return query.first()

    @staticmethod
    def list_proposals(db: Session, principal, status: Optional[str] = None) -> list[Proposal]:
        query = (
            db.query(Proposal)
            .options(joinedload(Proposal.line_items))
            .filter(ownership_clause(Proposal, principal))
        )
        if status:
            query = query.filter(Proposal.status == status)
        return query.order_by(Proposal.created_at.desc(), Proposal.id.desc()).all()

    @staticmethod
    def replace_for_request(
        db: Session,
        request_id: int,
        agent_id: Optional[int],
        items: list[dict],
        total_amount: float,
    ) -> Proposal:
        """
        Destructive replace: delete every proposal of the request (line items go
        with them), then insert a new Draft with its line items.
        Nothing is versioned; the previous quote is gone after commit.
        """
        for old in db.query(Proposal).filter(Proposal.request_id == request_id).all():
            db.delete(old)
        # Deletes must reach the database before the insert hits the unique request_id
        db.flush()

        proposal = Proposal(
            request_id=request_id,
            agent_id=agent_id,
            total_amount=total_amount,
            status=ProposalStatus.DRAFT.value,
            pdf_path=PLACEHOLDER_DOCUMENT,
            document_status=DocumentStatus.PENDING_DOCUMENT.value,
        )
        proposal.line_items = [
            ProposalLineItem(position=position, description=item["description"], price=item["price"])
            for position, item in enumerate(items)
        ]
        db.add(proposal)
        db.flush()
        return proposal

    @staticmethod
    def set_document(db: Session, proposal_id: int, artifact_reference: str) -> int:
        """Store the generated document reference; only Draft proposals are touched"""
        return (
            db.query(Proposal)
            .filter(Proposal.id == proposal_id, Proposal.status == ProposalStatus.DRAFT.value)
            .update(
                {
                    "pdf_path": artifact_reference,
                    "document_status": DocumentStatus.DOCUMENT_READY.value,
                },
                synchronize_session=False,
            )
        )

    @staticmethod
    def get_status(db: Session, proposal_id: int) -> Optional[str]:
        """Current committed status, read past the session's identity map"""
        return db.query(Proposal.status).filter(Proposal.id == proposal_id).scalar()

    @staticmethod
    def transition_status(
        db: Session,
        proposal_id: int,
        from_statuses: Iterable[ProposalStatus],
        to_status: ProposalStatus,
        **updates,
    ) -> int:
        """Conditional status update; returns the number of rows changed"""
        values = {"status": to_status.value, **updates}
        return (
            db.query(Proposal)
            .filter(
                Proposal.id == proposal_id,
                Proposal.status.in_([s.value for s in from_statuses]),
            )
            .update(values, synchronize_session=False)
        )
