"""Client service - Business logic for client profiles"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import ClientProfile
from ...shared.errors import LifecycleError, NotFound, ValidationError
from ...utils.sanitization import validate_and_sanitize_input
from ...utils.vault import VaultError, decrypt_vault, encrypt_vault
from ..lifecycle.states import ProjectStatus
from .repository import ClientRepository
from .schemas import AgentClientResponse, ClientProfileUpdate

logger = logging.getLogger(__name__)


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def get_my_profile(self, principal) -> ClientProfile:
        profile = self.repo.get_profile_for_user(self.db, principal.id)
        if not profile:
            raise NotFound("Profile not found")
        return profile

    def read_vault(self, profile: ClientProfile) -> Optional[str]:
        if not profile.technical_vault:
            return None
        try:
            return decrypt_vault(profile.technical_vault)
        except VaultError as e:
            logger.error(f"❌ Vault for client {profile.id} unreadable: {e}")
            raise LifecycleError("Vault could not be decrypted") from e

    def update_my_profile(self, data: ClientProfileUpdate, principal) -> ClientProfile:
        """Update profile fields; the vault is encrypted before it is stored"""
        profile = self.get_my_profile(principal)

        updates = {}
        try:
            if data.companyName is not None:
                updates["company_name"] = validate_and_sanitize_input(data.companyName, max_length=255)
            if data.industry is not None:
                updates["industry"] = validate_and_sanitize_input(data.industry, max_length=255)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if data.websiteUrl is not None:
            updates["website_url"] = data.websiteUrl
        if data.technicalVault:
            try:
                updates["technical_vault"] = encrypt_vault(data.technicalVault)
            except VaultError as e:
                logger.error(f"❌ Cannot store vault for client {profile.id}: {e}")
                raise ValidationError("Technical vault cannot be stored: encryption is not configured") from e

        profile = self.repo.update_profile(self.db, profile, **updates)
        logger.info(f"✅ Client profile {profile.id} updated")
        return profile

    def get_agent_clients(self, principal) -> list[AgentClientResponse]:
        """Clients with projects assigned to the calling agent"""
        clients = self.repo.get_clients_for_agent(self.db, principal.id)
        result = []
        for c in clients:
            projects = [p for p in c.projects if p.agent_id == principal.id]
            result.append(
                AgentClientResponse(
                    id=c.id,
                    name=c.user.full_name if c.user else None,
                    email=c.user.email if c.user else None,
                    company=c.company_name,
                    industry=c.industry,
                    projectsCount=len(projects),
                    activeProjects=len(
                        [p for p in projects if p.global_status == ProjectStatus.IN_PROGRESS.value]
                    ),
                    joinedDate=c.created_at,
                )
            )
        return result
