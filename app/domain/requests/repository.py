"""Service request repository - Database operations for requests"""

from typing import Iterable, Optional

from sqlalchemy.orm import Session, joinedload

from ...models import ServiceCategory, ServiceRequest, User
from ..lifecycle.states import AccountStatus, RequestStatus, Role
from ..lifecycle.visibility import ownership_clause


class RequestRepository:
    """
    Repository for service request database operations.
    Writes only flush; the caller owns the transaction boundary.
    """

    @staticmethod
    def get_request_by_id(
        db: Session, request_id: int, for_update: bool = False
    ) -> Optional[ServiceRequest]:
        query = db.query(ServiceRequest).filter(ServiceRequest.id == request_id)
        if for_update:
            # Reload under the lock so a row already in the session is not served stale
            query = query.with_for_update().populate_existing()
        return query.first()

    @staticmethod
    def list_requests(db: Session, principal, status: Optional[str] = None) -> list[ServiceRequest]:
        """Requests visible to the principal, newest first"""
        query = (
            db.query(ServiceRequest)
            .options(
                joinedload(ServiceRequest.category),
                joinedload(ServiceRequest.assigned_agent),
                joinedload(ServiceRequest.proposal),
            )
            .filter(ownership_clause(ServiceRequest, principal))
        )

        # Only admins may narrow by status, matching the legacy dashboard
        if status and principal.is_admin:
            query = query.filter(ServiceRequest.status == status)

        return query.order_by(ServiceRequest.created_at.desc(), ServiceRequest.id.desc()).all()

    @staticmethod
    def get_requests_for_client(db: Session, client_id: int) -> list[ServiceRequest]:
        return (
            db.query(ServiceRequest)
            .options(
                joinedload(ServiceRequest.category),
                joinedload(ServiceRequest.assigned_agent),
                joinedload(ServiceRequest.proposal),
            )
            .filter(ServiceRequest.client_id == client_id)
            .order_by(ServiceRequest.created_at.desc(), ServiceRequest.id.desc())
            .all()
        )

    @staticmethod
    def create_request(db: Session, client_id: int, **request_data) -> ServiceRequest:
        request = ServiceRequest(
            client_id=client_id, status=RequestStatus.PENDING.value, **request_data
        )
        db.add(request)
        db.flush()
        return request

    @staticmethod
    def transition_status(
        db: Session,
        request_id: int,
        from_statuses: Iterable[RequestStatus],
        to_status: RequestStatus,
        **updates,
    ) -> int:
        """
        Conditional status update. Returns the number of rows changed, which is 0
        when the request is no longer in one of from_statuses.
        """
        values = {"status": to_status.value, **updates}
        return (
            db.query(ServiceRequest)
            .filter(
                ServiceRequest.id == request_id,
                ServiceRequest.status.in_([s.value for s in from_statuses]),
            )
            .update(values, synchronize_session=False)
        )

    @staticmethod
    def get_category(db: Session, category_id: int) -> Optional[ServiceCategory]:
        return db.query(ServiceCategory).filter(ServiceCategory.id == category_id).first()

    @staticmethod
    def get_active_agent(db: Session, agent_id: int) -> Optional[User]:
        return (
            db.query(User)
            .filter(
                User.id == agent_id,
                User.role == Role.AGENT.value,
                User.status == AccountStatus.ACTIVE.value,
            )
            .first()
        )
