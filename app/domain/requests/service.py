"""Service request service - scoped reads of service requests"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import ServiceRequest
from ...shared.errors import NotFound
from ..lifecycle.visibility import ensure_access
from .repository import RequestRepository

logger = logging.getLogger(__name__)


class RequestService:
    """Service layer for request reads; writes go through the lifecycle orchestrator"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = RequestRepository()

    def list_requests(self, principal, status: Optional[str] = None) -> list[ServiceRequest]:
        """Client: own requests. Agent: assigned requests. Admin: all, optionally by status"""
        return self.repo.list_requests(self.db, principal, status)

    def get_request(self, request_id: int, principal) -> ServiceRequest:
        request = self.repo.get_request_by_id(self.db, request_id)
        if not request:
            raise NotFound("Service request not found")
        return ensure_access(principal, request)
