"""Timeline projector - per-client read model joining requests with their proposal and project"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Project, ServiceRequest
from ..projects.repository import ProjectRepository
from ..requests.repository import RequestRepository


class TimelineProjector:
    """Pure read of committed state; no writes"""

    def __init__(self, db: Session):
        self.db = db

    def for_client(self, client_id: int) -> list[dict]:
        """One record per request of the client, newest first"""
        requests = RequestRepository.get_requests_for_client(self.db, client_id)
        projects = {
            project.request_id: project
            for project in ProjectRepository.get_projects_for_client(self.db, client_id)
        }
        return [self._entry(request, projects.get(request.id)) for request in requests]

    @staticmethod
    def _entry(request: ServiceRequest, project: Optional[Project]) -> dict:
        proposal = request.proposal
        return {
            "requestId": request.id,
            "category": request.category.name if request.category else "General",
            "details": request.details,
            "priority": request.priority,
            "requestDate": request.created_at,
            "requestStatus": request.status,
            "agentName": request.assigned_agent.full_name if request.assigned_agent else None,
            "proposal": {
                "id": proposal.id,
                "status": proposal.status,
                "amount": proposal.total_amount,
                "date": proposal.created_at,
                "pdf": proposal.pdf_path,
            }
            if proposal
            else None,
            "project": {
                "id": project.id,
                "status": project.global_status,
                "progress": project.progress_percent,
                "startDate": project.created_at,
                "completionDate": project.ecd,
            }
            if project
            else None,
        }
