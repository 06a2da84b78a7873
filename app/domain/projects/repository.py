"""Project repository - Database operations for projects, assets and notes"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Project, ProjectAsset, ProjectNote
from ..lifecycle.states import ProjectStatus
from ..lifecycle.visibility import ownership_clause


class ProjectRepository:
    """Repository for project database operations"""

    @staticmethod
    def get_project_by_id(db: Session, project_id: int) -> Optional[Project]:
        return (
            db.query(Project)
            .options(
                joinedload(Project.client),
                joinedload(Project.agent),
                joinedload(Project.request),
                joinedload(Project.assets),
            )
            .filter(Project.id == project_id)
            .first()
        )

    @staticmethod
    def list_projects(db: Session, principal) -> list[Project]:
        return (
            db.query(Project)
            .options(joinedload(Project.client), joinedload(Project.agent))
            .filter(ownership_clause(Project, principal))
            .order_by(Project.created_at.desc(), Project.id.desc())
            .all()
        )

    @staticmethod
    def get_projects_for_client(db: Session, client_id: int) -> list[Project]:
        return db.query(Project).filter(Project.client_id == client_id).all()

    @staticmethod
    def create_project(
        db: Session, request_id: int, client_id: int, agent_id: Optional[int]
    ) -> Project:
        """Insert the project for a converted request; flushes so the unique request_id is checked now"""
        project = Project(
            request_id=request_id,
            client_id=client_id,
            agent_id=agent_id,
            global_status=ProjectStatus.PENDING.value,
            progress_percent=0,
        )
        db.add(project)
        db.flush()
        return project

    @staticmethod
    def update_project(db: Session, project: Project, **updates) -> Project:
        """Update a project with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(project, key):
                setattr(project, key, value)

        db.commit()
        db.refresh(project)
        return project

    @staticmethod
    def list_assets(db: Session, project_id: int) -> list[ProjectAsset]:
        return (
            db.query(ProjectAsset)
            .filter(ProjectAsset.project_id == project_id)
            .order_by(ProjectAsset.created_at.asc(), ProjectAsset.id.asc())
            .all()
        )

    @staticmethod
    def list_notes(db: Session, project_id: int) -> list[ProjectNote]:
        return (
            db.query(ProjectNote)
            .options(joinedload(ProjectNote.author))
            .filter(ProjectNote.project_id == project_id)
            .order_by(ProjectNote.created_at.asc(), ProjectNote.id.asc())
            .all()
        )

    @staticmethod
    def add_note(db: Session, project_id: int, user_id: int, content: str) -> ProjectNote:
        note = ProjectNote(project_id=project_id, user_id=user_id, content=content)
        db.add(note)
        db.commit()
        db.refresh(note)
        return note
