"""Client repository - Database operations for client profiles"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import ClientProfile, Project


class ClientRepository:
    """Repository for client profile database operations"""

    @staticmethod
    def get_profile_for_user(db: Session, user_id: int) -> Optional[ClientProfile]:
        return (
            db.query(ClientProfile)
            .options(joinedload(ClientProfile.user))
            .filter(ClientProfile.user_id == user_id)
            .first()
        )

    @staticmethod
    def update_profile(db: Session, profile: ClientProfile, **updates) -> ClientProfile:
        """Update a profile with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(profile, key):
                setattr(profile, key, value)

        db.commit()
        db.refresh(profile)
        return profile

    @staticmethod
    def get_clients_for_agent(db: Session, agent_id: int) -> list[ClientProfile]:
        """Clients that have at least one project assigned to the agent"""
        return (
            db.query(ClientProfile)
            .options(joinedload(ClientProfile.user), joinedload(ClientProfile.projects))
            .filter(ClientProfile.projects.any(Project.agent_id == agent_id))
            .order_by(ClientProfile.created_at.desc(), ClientProfile.id.desc())
            .all()
        )
