"""Admin service - account approval, agents and service categories"""

import asyncio
import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import NOTIFICATION_TIMEOUT_SECONDS
from ...email_service import EmailNotificationGateway
from ...models import ServiceCategory, User
from ...shared.errors import InvalidTransition, NotFound, ValidationError
from ...utils.sanitization import validate_and_sanitize_input
from ..lifecycle.states import (
    ADMIN_SETTABLE_ACCOUNT_STATUSES,
    AccountStatus,
    Role,
    can_transition_account,
)
from .repository import AdminRepository
from .schemas import CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)


class AdminService:
    """Service layer for admin operations"""

    def __init__(self, db: Session, notifier=None, notification_timeout: float = NOTIFICATION_TIMEOUT_SECONDS):
        self.db = db
        self.repo = AdminRepository()
        self.notifier = notifier or EmailNotificationGateway()
        self.notification_timeout = notification_timeout

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def get_pending_users(self) -> list[User]:
        return self.repo.get_pending_users(self.db)

    def get_agents(self) -> list[User]:
        return self.repo.get_agents(self.db)

    def get_clients(self) -> list[tuple]:
        return self.repo.get_clients_overview(self.db)

    async def update_agent_status(self, agent_id: int, status: str) -> tuple[User, bool]:
        """Same gate as update_user_status, restricted to Agent accounts"""
        agent = self.repo.get_user_by_id(self.db, agent_id)
        if not agent or agent.role != Role.AGENT.value:
            raise NotFound("Agent not found")
        return await self.update_user_status(agent_id, status)

    async def update_user_status(self, user_id: int, status: str) -> tuple[User, bool]:
        """
        Move an account through the approval gate.

        Returns the user and whether the approval email went out. An email
        failure is logged and reported but does not undo the status change.
        """
        try:
            target = AccountStatus.parse(status)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if target not in ADMIN_SETTABLE_ACCOUNT_STATUSES:
            allowed = ", ".join(s.value for s in ADMIN_SETTABLE_ACCOUNT_STATUSES)
            raise ValidationError(f"Status must be one of: {allowed}")

        user = self.repo.get_user_by_id(self.db, user_id)
        if not user:
            raise NotFound("User not found")

        previous = user.status
        if not can_transition_account(previous, target.value):
            raise InvalidTransition(f"Cannot move account from {previous} to {target.value}")

        user = self.repo.set_user_status(self.db, user, target)
        logger.info(f"👤 User {user.id} status {previous} -> {user.status}")

        notification_sent = False
        if target == AccountStatus.ACTIVE and AccountStatus.parse(previous) != AccountStatus.ACTIVE:
            email, name = user.email, user.full_name
            try:
                await asyncio.wait_for(
                    self.notifier.send_account_approval_notification(email, name),
                    timeout=self.notification_timeout,
                )
                notification_sent = True
                logger.info(f"📧 Approval email sent to {email}")
            except Exception as e:
                logger.warning(f"⚠️ Approval email to {email} failed: {e!r}")

        return user, notification_sent

    # ------------------------------------------------------------------
    # Service categories
    # ------------------------------------------------------------------

    def get_categories(self) -> list[ServiceCategory]:
        return self.repo.get_categories(self.db)

    def _clean_description(self, description):
        try:
            return validate_and_sanitize_input(description, max_length=1000) or None
        except ValueError as e:
            raise ValidationError(str(e)) from e

    def create_category(self, data: CategoryCreate) -> ServiceCategory:
        name = self._clean_name(data.name)
        if self.repo.get_category_by_name(self.db, name):
            raise ValidationError("A category with this name already exists")
        category = self.repo.create_category(
            self.db,
            name=name,
            description=self._clean_description(data.description),
        )
        logger.info(f"✅ Category {category.id} created: {category.name}")
        return category

    def _clean_name(self, name: str) -> str:
        try:
            cleaned = validate_and_sanitize_input(name, max_length=255)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if not cleaned:
            raise ValidationError("Category name is required")
        return cleaned

    def update_category(self, category_id: int, data: CategoryUpdate) -> ServiceCategory:
        category = self.repo.get_category_by_id(self.db, category_id)
        if not category:
            raise NotFound("Category not found")

        updates = {}
        if data.name is not None:
            name = self._clean_name(data.name)
            existing = self.repo.get_category_by_name(self.db, name)
            if existing and existing.id != category.id:
                raise ValidationError("A category with this name already exists")
            updates["name"] = name
        if data.description is not None:
            updates["description"] = self._clean_description(data.description)

        return self.repo.update_category(self.db, category, **updates)

    def delete_category(self, category_id: int) -> None:
        category = self.repo.get_category_by_id(self.db, category_id)
        if not category:
            raise NotFound("Category not found")

        in_use = self.repo.count_requests_in_category(self.db, category_id)
        if in_use:
            raise InvalidTransition(f"Category is used by {in_use} request(s) and cannot be deleted")

        self.repo.delete_category(self.db, category)
        logger.info(f"🗑️ Category {category_id} deleted")

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    def get_system_health(self) -> tuple[bool, dict]:
        try:
            self.repo.ping(self.db)
            return True, {"server": "Online", "database": "Connected", "timestamp": datetime.utcnow()}
        except SQLAlchemyError as e:
            logger.error(f"❌ Database health check failed: {e}")
            return False, {
                "server": "Online",
                "database": "Disconnected",
                "timestamp": datetime.utcnow(),
            }
