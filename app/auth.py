import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError
from jose import jwt as jose_jwt
from sqlalchemy.orm import Session

from .config import ACCESS_TOKEN_TTL_DAYS, SECRET_KEY
from .database import get_db
from .domain.lifecycle.states import AccountStatus, Role
from .models import ClientProfile, User
from .shared.errors import Forbidden, Unauthorized

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """The authenticated actor for one API call"""

    id: int
    role: Role
    email: str
    full_name: str
    client_id: Optional[int] = None  # ClientProfile id, resolved for Client principals

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_agent(self) -> bool:
        return self.role == Role.AGENT

    @property
    def is_client(self) -> bool:
        return self.role == Role.CLIENT


def create_access_token(user_id: int, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Issue an HS256 bearer token carrying the user id and role

    Args:
        user_id: Subject of the token
        role: Account role, stored in canonical form
        expires_delta: Token lifetime (default ACCESS_TOKEN_TTL_DAYS)
    """
    now = datetime.utcnow()
    expire = now + (expires_delta if expires_delta is not None else timedelta(days=ACCESS_TOKEN_TTL_DAYS))
    to_encode = {"sub": str(user_id), "role": Role.parse(role).value, "iat": now, "exp": expire}
    return jose_jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_access_token(token: str) -> dict[str, Any]:
    """
    Verify and decode a bearer token.
    Raises Unauthorized for malformed, tampered or expired tokens.
    """
    if token.count(".") != 2:
        logger.warning("⚠️ Malformed token received")
        raise Unauthorized("Invalid token format. Expected a valid JWT token.")

    try:
        claims = jose_jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError as e:
        raise Unauthorized("Token has expired. Please sign in again.") from e
    except JWTError as e:
        logger.warning(f"⚠️ JWT verification failed: {e}")
        raise Unauthorized("Invalid token") from e

    if not claims.get("sub"):
        raise Unauthorized("Invalid token claims")

    return claims


async def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Principal:
    """Resolve the calling principal from the bearer token"""
    if not credentials:
        raise Unauthorized(
            "Not authenticated. Please provide a valid Bearer token in the Authorization header."
        )

    claims = verify_access_token(credentials.credentials)

    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError) as e:
        raise Unauthorized("Invalid token claims") from e

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise Unauthorized("User no longer exists")

    if user.status != AccountStatus.ACTIVE.value:
        logger.warning(f"⚠️ Inactive account {user.id} ({user.status}) attempted access")
        raise Forbidden(f"Account is {user.status}. Contact Admin.")

    # The stored role is authoritative; the token role only has to agree with it
    role = Role.parse(user.role)
    try:
        token_role = Role.parse(claims.get("role", ""))
    except ValueError as e:
        raise Unauthorized("Invalid token claims") from e
    if token_role != role:
        raise Unauthorized("Token role does not match account")

    client_id = None
    if role == Role.CLIENT:
        profile = db.query(ClientProfile).filter(ClientProfile.user_id == user.id).first()
        client_id = profile.id if profile else None

    logger.debug(f"✅ Principal resolved: user={user.id} role={role.value}")
    return Principal(
        id=user.id,
        role=role,
        email=user.email,
        full_name=user.full_name,
        client_id=client_id,
    )


def require_roles(*roles: Role) -> Callable:
    """Dependency factory restricting an endpoint to the given roles"""

    async def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in roles:
            allowed = ", ".join(r.value for r in roles)
            raise Forbidden(f"This action requires role: {allowed}")
        return principal

    return dependency
