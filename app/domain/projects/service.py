"""Project service - Business logic for delivery projects, notes and the client vault"""

import logging

from sqlalchemy.orm import Session

from ...models import Project, ProjectAsset, ProjectNote
from ...shared.errors import LifecycleError, NotFound, ValidationError
from ...utils.sanitization import validate_and_sanitize_input
from ...utils.vault import VaultError, decrypt_vault
from ..lifecycle.visibility import ensure_access
from .repository import ProjectRepository
from .schemas import ProjectUpdate

logger = logging.getLogger(__name__)

EMPTY_VAULT_MESSAGE = "No credentials stored."


class ProjectService:
    """Service layer for project business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProjectRepository()

    def list_projects(self, principal) -> list[Project]:
        return self.repo.list_projects(self.db, principal)

    def get_project(self, project_id: int, principal) -> Project:
        """Fetch by key, then re-check ownership"""
        project = self.repo.get_project_by_id(self.db, project_id)
        if not project:
            raise NotFound("Project not found")
        return ensure_access(principal, project)

    def update_project(self, project_id: int, data: ProjectUpdate, principal) -> Project:
        project = self.get_project(project_id, principal)

        updates = {}
        if data.globalStatus is not None:
            updates["global_status"] = data.globalStatus
        if data.progressPercent is not None:
            updates["progress_percent"] = data.progressPercent
        if data.ecd is not None:
            updates["ecd"] = data.ecd

        if not updates:
            raise ValidationError("Nothing to update")

        project = self.repo.update_project(self.db, project, **updates)
        logger.info(
            f"🔄 Project {project.id} updated by user {principal.id}: "
            f"{project.global_status} {project.progress_percent}%"
        )
        return project

    def list_assets(self, project_id: int, principal) -> list[ProjectAsset]:
        self.get_project(project_id, principal)
        return self.repo.list_assets(self.db, project_id)

    def list_notes(self, project_id: int, principal) -> list[ProjectNote]:
        self.get_project(project_id, principal)
        return self.repo.list_notes(self.db, project_id)

    def add_note(self, project_id: int, content: str, principal) -> ProjectNote:
        self.get_project(project_id, principal)
        try:
            content = validate_and_sanitize_input(content, max_length=5000)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if not content:
            raise ValidationError("Note content is required")
        return self.repo.add_note(self.db, project_id, principal.id, content)

    def get_vault(self, project_id: int, principal) -> str:
        """Decrypted technical vault of the project's client"""
        project = self.get_project(project_id, principal)
        client = project.client
        if not client or not client.technical_vault:
            return EMPTY_VAULT_MESSAGE
        try:
            return decrypt_vault(client.technical_vault)
        except VaultError as e:
            logger.error(f"❌ Vault for client {client.id} unreadable: {e}")
            raise LifecycleError("Vault could not be decrypted") from e
