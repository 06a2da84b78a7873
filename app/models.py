from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base
from .domain.lifecycle.states import (
    PLACEHOLDER_DOCUMENT,
    AccountStatus,
    DocumentStatus,
    ProjectAssetType,
    ProjectStatus,
    ProposalStatus,
    RequestStatus,
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    mobile = Column(String(50), nullable=True)
    role = Column(String(20), nullable=False, index=True)  # Client, Agent, Admin
    # Unverified -> Pending Approval -> Active <-> Suspended
    status = Column(String(50), default=AccountStatus.UNVERIFIED.value, nullable=False, index=True)
    is_email_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client_profile = relationship("ClientProfile", back_populates="user", uselist=False)


class ClientProfile(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    company_name = Column(String(255), nullable=True)
    industry = Column(String(255), nullable=True)
    website_url = Column(String(500), nullable=True)
    technical_vault = Column(Text, nullable=True)  # Fernet token, never plaintext
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="client_profile")
    requests = relationship("ServiceRequest", back_populates="client")
    projects = relationship("Project", back_populates="client")


class ServiceCategory(Base):
    __tablename__ = "service_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(String(1000), nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class ServiceRequest(Base):
    __tablename__ = "service_requests"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("service_categories.id"), nullable=True)
    details = Column(Text, nullable=True)
    priority = Column(String(20), default="Medium", nullable=False)  # Low, Medium, High, Urgent
    agent_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    status = Column(String(20), default=RequestStatus.PENDING.value, nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("ClientProfile", back_populates="requests")
    category = relationship("ServiceCategory")
    assigned_agent = relationship("User", foreign_keys=[agent_id])
    proposal = relationship("Proposal", back_populates="request", uselist=False)
    project = relationship("Project", back_populates="request", uselist=False)


class Proposal(Base):
    __tablename__ = "proposals"
    # One live proposal per request; a re-quote destroys the previous row first
    __table_args__ = (UniqueConstraint("request_id", name="uq_proposals_request_id"),)

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(Integer, ForeignKey("service_requests.id"), nullable=False, index=True)
    agent_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    total_amount = Column(Float, nullable=False, default=0)
    status = Column(String(20), default=ProposalStatus.DRAFT.value, nullable=False)
    pdf_path = Column(String(500), default=PLACEHOLDER_DOCUMENT, nullable=False)
    document_status = Column(
        String(30), default=DocumentStatus.PENDING_DOCUMENT.value, nullable=False
    )
    sent_at = Column(DateTime, nullable=True)
    accepted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    request = relationship("ServiceRequest", back_populates="proposal")
    agent = relationship("User", foreign_keys=[agent_id])
    line_items = relationship(
        "ProposalLineItem",
        back_populates="proposal",
        cascade="all, delete-orphan",
        order_by="ProposalLineItem.position",
    )

    @property
    def document_ready(self) -> bool:
        return (
            self.document_status == DocumentStatus.DOCUMENT_READY.value
            and bool(self.pdf_path)
            and self.pdf_path != PLACEHOLDER_DOCUMENT
        )


class ProposalLineItem(Base):
    __tablename__ = "proposal_line_items"

    id = Column(Integer, primary_key=True, index=True)
    proposal_id = Column(
        Integer, ForeignKey("proposals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position = Column(Integer, nullable=False, default=0)
    description = Column(String(1000), nullable=False)
    price = Column(Float, nullable=False)

    proposal = relationship("Proposal", back_populates="line_items")


class Project(Base):
    __tablename__ = "projects"
    # Exactly one project per converted request
    __table_args__ = (UniqueConstraint("request_id", name="uq_projects_request_id"),)

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(Integer, ForeignKey("service_requests.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    agent_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    global_status = Column(String(20), default=ProjectStatus.PENDING.value, nullable=False)
    progress_percent = Column(Integer, default=0, nullable=False)
    ecd = Column(Date, nullable=True)  # Estimated completion date
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    request = relationship("ServiceRequest", back_populates="project")
    client = relationship("ClientProfile", back_populates="projects")
    agent = relationship("User", foreign_keys=[agent_id])
    assets = relationship(
        "ProjectAsset",
        back_populates="project",
        order_by="[ProjectAsset.created_at, ProjectAsset.id]",
    )
    notes = relationship("ProjectNote", back_populates="project", order_by="ProjectNote.id")


class ProjectAsset(Base):
    __tablename__ = "project_assets"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    file_path = Column(String(500), nullable=False)
    file_name = Column(String(255), nullable=False)
    type = Column(String(30), default=ProjectAssetType.CLIENT_ASSET.value, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    project = relationship("Project", back_populates="assets")


class ProjectNote(Base):
    __tablename__ = "project_notes"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    project = relationship("Project", back_populates="notes")
    author = relationship("User")
