"""
Lifecycle orchestrator - every status change of the Request -> Proposal -> Project chain.

Ordering rules:
  * validation and ownership checks run before any write
  * multi-row writes run in one transaction (atomic) and roll back together
  * external calls (document generator, mail) run with no transaction open,
    under a timeout, and strictly before the writes that depend on them
"""

import asyncio
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import DOCUMENT_TIMEOUT_SECONDS, NOTIFICATION_TIMEOUT_SECONDS
from ...database import atomic
from ...email_service import EmailNotificationGateway
from ...models import Project, Proposal, ServiceRequest
from ...services.proposal_pdf_generator import ProposalDocumentGenerator
from ...shared.errors import (
    AlreadyAccepted,
    DocumentGenerationFailed,
    DocumentNotReady,
    Forbidden,
    InvalidTransition,
    LifecycleError,
    NotFound,
    NotificationFailed,
    TransactionFailed,
    ValidationError,
)
from ...shared.validators import validate_price, validate_priority
from ...utils.sanitization import validate_and_sanitize_input
from ..projects.repository import ProjectRepository
from ..proposals.repository import ProposalRepository
from ..requests.repository import RequestRepository
from .states import (
    ASSIGNABLE_REQUEST_STATUSES,
    QUOTABLE_REQUEST_STATUSES,
    ProposalStatus,
    RequestStatus,
    can_transition_proposal,
    can_transition_request,
)
from .visibility import ensure_access

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_LABEL = "Valued Client"


class LifecycleOrchestrator:
    """Owns the status fields of requests, proposals and projects"""

    def __init__(
        self,
        db: Session,
        document_generator=None,
        notifier=None,
        document_timeout: float = DOCUMENT_TIMEOUT_SECONDS,
        notification_timeout: float = NOTIFICATION_TIMEOUT_SECONDS,
    ):
        self.db = db
        self.document_generator = document_generator or ProposalDocumentGenerator()
        self.notifier = notifier or EmailNotificationGateway()
        self.document_timeout = document_timeout
        self.notification_timeout = notification_timeout
        self.requests = RequestRepository()
        self.proposals = ProposalRepository()
        self.projects = ProjectRepository()

    @contextmanager
    def _transaction(self, operation: str, on_conflict: Optional[type] = None):
        """atomic() plus translation of store errors into the lifecycle taxonomy"""
        try:
            with atomic(self.db):
                yield
        except LifecycleError:
            raise
        except IntegrityError as e:
            if on_conflict is not None:
                logger.warning(f"⚠️ {operation}: constraint conflict, rolled back: {e.orig}")
                raise on_conflict() from e
            logger.error(f"❌ {operation} transaction rolled back: {e}")
            raise TransactionFailed() from e
        except SQLAlchemyError as e:
            logger.error(f"❌ {operation} transaction rolled back: {e}")
            raise TransactionFailed() from e

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def create_request(
        self,
        principal,
        category_id: Optional[int],
        details: Optional[str],
        priority: Optional[str] = None,
    ) -> ServiceRequest:
        if not principal.is_client:
            raise Forbidden("Only clients can submit service requests")
        if principal.client_id is None:
            raise NotFound("Client profile missing")

        try:
            priority = validate_priority(priority)
            details = validate_and_sanitize_input(details, max_length=5000)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        if category_id is not None and not self.requests.get_category(self.db, category_id):
            raise NotFound("Service category not found")

        with self._transaction("create request"):
            request = self.requests.create_request(
                self.db,
                principal.client_id,
                category_id=category_id,
                details=details,
                priority=priority,
            )
            request_id = request.id

        logger.info(f"✅ Request {request_id} created by client {principal.client_id}")
        return self.requests.get_request_by_id(self.db, request_id)

    def assign_agent(self, request_id: int, agent_id: int) -> ServiceRequest:
        """Set the agent and status Assigned; re-assigning overwrites the agent"""
        request = self.requests.get_request_by_id(self.db, request_id)
        if not request:
            raise NotFound("Service request not found")

        if not self.requests.get_active_agent(self.db, agent_id):
            raise ValidationError("agentId must reference an active Agent")

        if not can_transition_request(request.status, RequestStatus.ASSIGNED):
            raise InvalidTransition(f"Cannot assign an agent to a {request.status} request")

        with self._transaction("assign agent"):
            changed = self.requests.transition_status(
                self.db,
                request_id,
                ASSIGNABLE_REQUEST_STATUSES,
                RequestStatus.ASSIGNED,
                agent_id=agent_id,
            )
            if not changed:
                raise InvalidTransition("Request moved past assignment")

        logger.info(f"👤 Request {request_id} assigned to agent {agent_id}")
        return self.requests.get_request_by_id(self.db, request_id)

    # ------------------------------------------------------------------
    # Proposals
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_items(items) -> list[dict]:
        if not items:
            raise ValidationError("A proposal needs at least one line item")

        validated = []
        for index, item in enumerate(items, start=1):
            description = item.get("description") if isinstance(item, dict) else None
            try:
                description = validate_and_sanitize_input(description, max_length=1000)
                price = validate_price(item.get("price") if isinstance(item, dict) else None)
            except ValueError as e:
                raise ValidationError(f"Line item {index}: {e}") from e
            if not description:
                raise ValidationError(f"Line item {index}: description is required")
            validated.append({"description": description, "price": price})
        return validated

    @staticmethod
    def _client_label(request: ServiceRequest) -> str:
        client = request.client if request else None
        if client and client.company_name:
            return client.company_name
        return DEFAULT_CLIENT_LABEL

    async def _generate_document(
        self, proposal_id: int, client_label: str, items: list[dict], total_amount: float
    ) -> str:
        return await asyncio.wait_for(
            self.document_generator.generate(proposal_id, client_label, items, total_amount),
            timeout=self.document_timeout,
        )

    def _store_document(self, proposal_id: int, reference: str) -> bool:
        with self._transaction("store proposal document"):
            changed = self.proposals.set_document(self.db, proposal_id, reference)
        if changed:
            logger.info(f"📄 Proposal {proposal_id} document ready: {reference}")
        else:
            logger.warning(f"⚠️ Proposal {proposal_id} left Draft before its document was stored")
        return bool(changed)

    async def create_proposal(self, request_id: int, items, principal) -> Proposal:
        """
        Replace the request's proposal with a new Draft, then generate its document.

        The replace commits first. Document generation happens afterwards and is
        best effort: on failure the Draft keeps the placeholder reference and can
        be completed through regenerate_document. The request status is untouched.
        """
        validated = self._validate_items(items)

        request = self.requests.get_request_by_id(self.db, request_id)
        if not request:
            raise NotFound("Service request not found")
        if principal.is_agent and request.agent_id != principal.id:
            raise Forbidden("This request is not assigned to you")
        if RequestStatus(request.status) not in QUOTABLE_REQUEST_STATUSES:
            raise InvalidTransition(f"Cannot quote a request in status {request.status}")

        total_amount = round(sum(item["price"] for item in validated), 2)
        client_label = self._client_label(request)

        with self._transaction("create proposal"):
            locked = self.requests.get_request_by_id(self.db, request_id, for_update=True)
            if RequestStatus(locked.status) not in QUOTABLE_REQUEST_STATUSES:
                raise InvalidTransition(f"Cannot quote a request in status {locked.status}")
            proposal = self.proposals.replace_for_request(
                self.db, request_id, principal.id, validated, total_amount
            )
            proposal_id = proposal.id

        logger.info(
            f"📝 Draft proposal {proposal_id} created for request {request_id} (total {total_amount})"
        )

        try:
            reference = await self._generate_document(
                proposal_id, client_label, validated, total_amount
            )
            self._store_document(proposal_id, reference)
        except TransactionFailed:
            logger.warning(f"⚠️ Proposal {proposal_id} document reference could not be saved")
        except Exception as e:
            logger.warning(f"⚠️ Document generation failed for proposal {proposal_id}: {e!r}")

        return self.proposals.get_proposal_by_id(self.db, proposal_id)

    async def regenerate_document(self, proposal_id: int, principal) -> Proposal:
        """Re-run document generation for a Draft from its stored line items"""
        proposal = self.proposals.get_proposal_by_id(self.db, proposal_id)
        if not proposal:
            raise NotFound("Proposal not found")
        ensure_access(principal, proposal)
        if proposal.status != ProposalStatus.DRAFT.value:
            raise InvalidTransition("Only Draft proposals can have their document regenerated")

        items = [{"description": li.description, "price": li.price} for li in proposal.line_items]
        client_label = self._client_label(proposal.request)
        total_amount = proposal.total_amount

        # No transaction stays open while the generator runs
        self.db.rollback()

        try:
            reference = await self._generate_document(proposal_id, client_label, items, total_amount)
        except Exception as e:
            logger.error(f"❌ Document regeneration failed for proposal {proposal_id}: {e!r}")
            raise DocumentGenerationFailed() from e

        if not self._store_document(proposal_id, reference):
            raise InvalidTransition("Proposal is no longer a Draft")

        return self.proposals.get_proposal_by_id(self.db, proposal_id)

    async def send_proposal(self, proposal_id: int, principal) -> Proposal:
        """
        Notify the client, then mark the proposal Sent and the request Quoted.

        The notification is a hard precondition: if it fails or times out nothing
        is written and the call can simply be repeated.
        """
        proposal = self.proposals.get_proposal_by_id(self.db, proposal_id)
        if not proposal:
            raise NotFound("Proposal not found")
        ensure_access(principal, proposal)

        if proposal.status == ProposalStatus.ACCEPTED.value:
            raise AlreadyAccepted()
        if not proposal.document_ready:
            raise DocumentNotReady()

        request = proposal.request
        client_user = request.client.user if request and request.client else None
        if not client_user:
            raise NotFound("Client account for this proposal not found")
        agent = proposal.agent or request.assigned_agent

        request_id = request.id
        client_email = client_user.email
        client_name = client_user.full_name
        agent_email = agent.email if agent else None
        agent_name = agent.full_name if agent else ""
        reference = proposal.pdf_path
        total_amount = proposal.total_amount

        # End the read transaction before waiting on the mail transport
        self.db.rollback()

        try:
            await asyncio.wait_for(
                self.notifier.send_proposal_notification(
                    client_email,
                    client_name,
                    agent_email,
                    agent_name,
                    reference,
                    proposal_id,
                    total_amount,
                ),
                timeout=self.notification_timeout,
            )
        except Exception as e:
            logger.warning(f"⚠️ Proposal {proposal_id} notification failed, status unchanged: {e!r}")
            raise NotificationFailed() from e

        logger.info(f"📧 Proposal {proposal_id} delivered to {client_email}")

        with self._transaction("send proposal"):
            changed = self.proposals.transition_status(
                self.db,
                proposal_id,
                {ProposalStatus.DRAFT, ProposalStatus.SENT},
                ProposalStatus.SENT,
                sent_at=datetime.utcnow(),
            )
            if not changed:
                current = self.proposals.get_status(self.db, proposal_id)
                if current is None:
                    logger.warning(
                        f"⚠️ Proposal {proposal_id} was replaced after its notification went out "
                        f"to {client_email}; request {request_id} keeps the newer proposal"
                    )
                    raise NotFound("Proposal not found")
                raise AlreadyAccepted()

            self.requests.transition_status(
                self.db, request_id, QUOTABLE_REQUEST_STATUSES, RequestStatus.QUOTED
            )

        logger.info(f"✅ Proposal {proposal_id} Sent, request {request_id} Quoted")
        return self.proposals.get_proposal_by_id(self.db, proposal_id)

    # ------------------------------------------------------------------
    # Acceptance
    # ------------------------------------------------------------------

    def _build_project(self, request_id: int, client_id: int, agent_id: Optional[int]) -> Project:
        return self.projects.create_project(self.db, request_id, client_id, agent_id)

    def accept_proposal(self, proposal_id: int, principal) -> Project:
        """
        Accept a Sent proposal: Proposal Accepted, Request Converted and a new
        Project, all in one transaction.

        A second accept, concurrent or not, fails with AlreadyAccepted through the
        conditional update or the unique project per request.
        """
        if principal.is_agent:
            raise Forbidden("Only the client can accept a proposal")

        proposal = self.proposals.get_proposal_by_id(self.db, proposal_id)
        if not proposal:
            raise NotFound("Proposal not found")
        ensure_access(principal, proposal)

        if proposal.status == ProposalStatus.ACCEPTED.value:
            raise AlreadyAccepted()
        if not can_transition_proposal(proposal.status, ProposalStatus.ACCEPTED):
            raise InvalidTransition("Proposal has not been sent yet")

        request_id = proposal.request_id

        with self._transaction("accept proposal", on_conflict=AlreadyAccepted):
            locked = self.proposals.get_proposal_by_id(self.db, proposal_id, for_update=True)
            if locked is None:
                raise NotFound("Proposal not found")

            accepted = self.proposals.transition_status(
                self.db,
                proposal_id,
                {ProposalStatus.SENT},
                ProposalStatus.ACCEPTED,
                accepted_at=datetime.utcnow(),
            )
            if not accepted:
                # locked may predate a competing commit when the backend has no row locks
                current = self.proposals.get_status(self.db, proposal_id)
                if current is None:
                    raise NotFound("Proposal not found")
                if current == ProposalStatus.ACCEPTED.value:
                    logger.warning(f"⚠️ Proposal {proposal_id} accepted concurrently by another request")
                    raise AlreadyAccepted()
                raise InvalidTransition(f"Proposal is {current}")

            request = self.requests.get_request_by_id(self.db, request_id, for_update=True)
            converted = self.requests.transition_status(
                self.db, request_id, {RequestStatus.QUOTED}, RequestStatus.CONVERTED
            )
            if not converted:
                raise InvalidTransition(f"Request is {request.status}, expected Quoted")

            project = self._build_project(
                request_id, request.client_id, request.agent_id or locked.agent_id
            )
            project_id = project.id

        logger.info(
            f"🎉 Proposal {proposal_id} accepted: request {request_id} Converted, project {project_id} created"
        )
        return self.projects.get_project_by_id(self.db, project_id)
