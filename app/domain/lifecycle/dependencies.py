"""FastAPI dependencies wiring the orchestrator to its collaborators"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...email_service import EmailNotificationGateway
from ...services.proposal_pdf_generator import ProposalDocumentGenerator
from .orchestrator import LifecycleOrchestrator
from .timeline import TimelineProjector


def get_document_generator() -> ProposalDocumentGenerator:
    return ProposalDocumentGenerator()


def get_notifier() -> EmailNotificationGateway:
    return EmailNotificationGateway()


def get_orchestrator(
    db: Session = Depends(get_db),
    document_generator=Depends(get_document_generator),
    notifier=Depends(get_notifier),
) -> LifecycleOrchestrator:
    """Dependency injection for LifecycleOrchestrator"""
    return LifecycleOrchestrator(db, document_generator=document_generator, notifier=notifier)


def get_timeline_projector(db: Session = Depends(get_db)) -> TimelineProjector:
    return TimelineProjector(db)
