"""Admin repository - Database operations for accounts and service categories"""

from typing import Optional

from sqlalchemy import case, func, text
from sqlalchemy.orm import Session, contains_eager

from ...models import ClientProfile, Project, ServiceCategory, ServiceRequest, User
from ..lifecycle.states import AccountStatus, ProjectStatus, Role

# Rows written before the two-stage gate used this literal for Pending Approval
LEGACY_PENDING_STATUS = "PENDING"


class AdminRepository:
    """Repository for admin database operations"""

    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_pending_users(db: Session) -> list[User]:
        return (
            db.query(User)
            .filter(User.status.in_([AccountStatus.PENDING_APPROVAL.value, LEGACY_PENDING_STATUS]))
            .order_by(User.created_at.asc(), User.id.asc())
            .all()
        )

    @staticmethod
    def get_agents(db: Session) -> list[User]:
        return db.query(User).filter(User.role == Role.AGENT.value).order_by(User.full_name.asc()).all()

    @staticmethod
    def get_clients_overview(db: Session) -> list[tuple[ClientProfile, int, int, int]]:
        """Client profiles with (total projects, In Progress projects, total requests)"""
        project_counts = (
            db.query(
                Project.client_id.label("client_id"),
                func.count(Project.id).label("total"),
                func.sum(
                    case((Project.global_status == ProjectStatus.IN_PROGRESS.value, 1), else_=0)
                ).label("active"),
            )
            .group_by(Project.client_id)
            .subquery()
        )
        request_counts = (
            db.query(
                ServiceRequest.client_id.label("client_id"),
                func.count(ServiceRequest.id).label("total"),
            )
            .group_by(ServiceRequest.client_id)
            .subquery()
        )
        return (
            db.query(
                ClientProfile,
                func.coalesce(project_counts.c.total, 0),
                func.coalesce(project_counts.c.active, 0),
                func.coalesce(request_counts.c.total, 0),
            )
            .join(User, ClientProfile.user_id == User.id)
            .outerjoin(project_counts, project_counts.c.client_id == ClientProfile.id)
            .outerjoin(request_counts, request_counts.c.client_id == ClientProfile.id)
            .options(contains_eager(ClientProfile.user))
            .filter(User.role == Role.CLIENT.value)
            .order_by(User.created_at.desc(), ClientProfile.id.desc())
            .all()
        )

    @staticmethod
    def set_user_status(db: Session, user: User, status: AccountStatus) -> User:
        user.status = status.value
        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def get_categories(db: Session) -> list[ServiceCategory]:
        return db.query(ServiceCategory).order_by(ServiceCategory.name.asc()).all()

    @staticmethod
    def get_category_by_id(db: Session, category_id: int) -> Optional[ServiceCategory]:
        return db.query(ServiceCategory).filter(ServiceCategory.id == category_id).first()

    @staticmethod
    def get_category_by_name(db: Session, name: str) -> Optional[ServiceCategory]:
        return db.query(ServiceCategory).filter(func.lower(ServiceCategory.name) == name.lower()).first()

    @staticmethod
    def create_category(db: Session, **category_data) -> ServiceCategory:
        category = ServiceCategory(**category_data)
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    @staticmethod
    def update_category(db: Session, category: ServiceCategory, **updates) -> ServiceCategory:
        for key, value in updates.items():
            if value is not None and hasattr(category, key):
                setattr(category, key, value)
        db.commit()
        db.refresh(category)
        return category

    @staticmethod
    def count_requests_in_category(db: Session, category_id: int) -> int:
        return db.query(ServiceRequest).filter(ServiceRequest.category_id == category_id).count()

    @staticmethod
    def delete_category(db: Session, category: ServiceCategory) -> None:
        db.delete(category)
        db.commit()

    @staticmethod
    def ping(db: Session) -> None:
        db.execute(text("SELECT 1"))
