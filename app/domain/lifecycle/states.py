"""
Status vocabulary for the Request -> Proposal -> Project lifecycle.

Request:  Pending -> Assigned -> Quoted -> Converted
Proposal: Draft -> Sent -> Accepted
Project:  Pending / In Progress / Testing / Delivered (free-form after creation)
Account:  Unverified -> Pending Approval -> Active <-> Suspended
"""

from enum import Enum


class Role(str, Enum):
    CLIENT = "Client"
    AGENT = "Agent"
    ADMIN = "Admin"

    @classmethod
    def parse(cls, value: str) -> "Role":
        """Accept the legacy lowercase 'admin' literal alongside the canonical names"""
        for role in cls:
            if role.value.lower() == (value or "").strip().lower():
                return role
        raise ValueError(f"Unknown role: {value}")


class RequestStatus(str, Enum):
    PENDING = "Pending"
    ASSIGNED = "Assigned"
    QUOTED = "Quoted"
    CONVERTED = "Converted"


class ProposalStatus(str, Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    ACCEPTED = "Accepted"


class DocumentStatus(str, Enum):
    PENDING_DOCUMENT = "pending-document"
    DOCUMENT_READY = "document-ready"


class ProjectStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    TESTING = "Testing"
    DELIVERED = "Delivered"


class AccountStatus(str, Enum):
    UNVERIFIED = "Unverified"
    PENDING_APPROVAL = "Pending Approval"
    ACTIVE = "Active"
    SUSPENDED = "Suspended"

    @classmethod
    def parse(cls, value: str) -> "AccountStatus":
        """Normalize legacy literals; 'PENDING' meant verified-but-not-approved"""
        normalized = (value or "").strip()
        if normalized.upper() == "PENDING":
            return cls.PENDING_APPROVAL
        for status in cls:
            if status.value.lower() == normalized.lower():
                return status
        raise ValueError(f"Unknown account status: {value}")


class ProjectAssetType(str, Enum):
    CLIENT_ASSET = "ClientAsset"
    DELIVERABLE = "Deliverable"


# Sentinel stored in Proposal.pdf_path until a document has been generated
PLACEHOLDER_DOCUMENT = "pending..."

# Forward-only request lifecycle; each status maps to the ones it may move to
REQUEST_TRANSITIONS: dict[RequestStatus, set[RequestStatus]] = {
    RequestStatus.PENDING: {RequestStatus.ASSIGNED},
    RequestStatus.ASSIGNED: {RequestStatus.ASSIGNED, RequestStatus.QUOTED},
    RequestStatus.QUOTED: {RequestStatus.QUOTED, RequestStatus.CONVERTED},
    RequestStatus.CONVERTED: set(),
}

PROPOSAL_TRANSITIONS: dict[ProposalStatus, set[ProposalStatus]] = {
    ProposalStatus.DRAFT: {ProposalStatus.SENT},
    ProposalStatus.SENT: {ProposalStatus.SENT, ProposalStatus.ACCEPTED},
    ProposalStatus.ACCEPTED: set(),
}

ACCOUNT_TRANSITIONS: dict[AccountStatus, set[AccountStatus]] = {
    AccountStatus.UNVERIFIED: {AccountStatus.PENDING_APPROVAL},
    AccountStatus.PENDING_APPROVAL: {AccountStatus.ACTIVE, AccountStatus.SUSPENDED},
    AccountStatus.ACTIVE: {AccountStatus.SUSPENDED},
    AccountStatus.SUSPENDED: {AccountStatus.ACTIVE, AccountStatus.PENDING_APPROVAL},
}

# Statuses an admin may set through the approval endpoint
ADMIN_SETTABLE_ACCOUNT_STATUSES = {
    AccountStatus.ACTIVE,
    AccountStatus.SUSPENDED,
    AccountStatus.PENDING_APPROVAL,
}

# Requests in these statuses may receive a new (replacement) proposal
QUOTABLE_REQUEST_STATUSES = {RequestStatus.ASSIGNED, RequestStatus.QUOTED}

# Requests in these statuses may be (re)assigned without regressing
ASSIGNABLE_REQUEST_STATUSES = {RequestStatus.PENDING, RequestStatus.ASSIGNED}


def can_transition_request(current: str, target: str) -> bool:
    return RequestStatus(target) in REQUEST_TRANSITIONS[RequestStatus(current)]


def can_transition_proposal(current: str, target: str) -> bool:
    return ProposalStatus(target) in PROPOSAL_TRANSITIONS[ProposalStatus(current)]


def can_transition_account(current: str, target: str) -> bool:
    current_status = AccountStatus.parse(current)
    target_status = AccountStatus.parse(target)
    if current_status == target_status:
        return True
    return target_status in ACCOUNT_TRANSITIONS[current_status]
