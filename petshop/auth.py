import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from . import config
from .shared.errors import ForbiddenError

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

ROLE_ADMIN = "ADMIN"
ROLE_EMPLOYEE = "EMPLOYEE"
ROLE_CLIENT = "CLIENT"
ROLES = {ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_CLIENT}
STAFF_ROLES = {ROLE_ADMIN, ROLE_EMPLOYEE}


@dataclass(frozen=True)
class CurrentUser:
    """Identity taken from a verified access token. For clients, id is the client id."""

    id: str
    role: str
    email: Optional[str] = None

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def can_access_client(self, client_id: str) -> bool:
        return self.is_staff or self.id == client_id


def create_access_token(
    user_id: str,
    role: str,
    email: Optional[str] = None,
    expires_in: Optional[timedelta] = None,
) -> str:
    """Issue a signed access token for the session layer"""
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role}")
    now = datetime.now(timezone.utc)
    expires = now + (expires_in or timedelta(minutes=config.ACCESS_TOKEN_TTL_MINUTES))
    claims = {"sub": user_id, "role": role, "iat": int(now.timestamp()), "exp": int(expires.timestamp())}
    if email:
        claims["email"] = email
    return jwt.encode(claims, config.SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def verify_access_token(token: str) -> dict:
    """Verify signature and expiry of an access token and return its claims"""
    try:
        return jwt.decode(token, config.SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except ExpiredSignatureError as e:
        logger.info("ℹ️ Expired access token presented")
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please sign in again.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except JWTError as e:
        logger.warning(f"⚠️ Token verification failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid token") from e


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    """Get the current user from the bearer token"""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    claims = verify_access_token(credentials.credentials)
    user_id = claims.get("sub")
    role = claims.get("role")
    if not user_id or role not in ROLES:
        logger.warning(f"⚠️ Token missing required claims. Available claims: {list(claims.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    return CurrentUser(id=user_id, role=role, email=claims.get("email"))


async def get_current_staff(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_staff:
        logger.warning(f"⚠️ User {user.id} with role {user.role} attempted a staff-only action")
        raise HTTPException(status_code=403, detail="Staff access required")
    return user


async def get_current_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_admin:
        logger.warning(f"⚠️ User {user.id} with role {user.role} attempted an admin-only action")
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def ensure_client_access(user: CurrentUser, client_id: str) -> None:
    """Clients may only act on their own records; staff may act on any"""
    if not user.can_access_client(client_id):
        logger.warning(f"⚠️ User {user.id} attempted to access client {client_id}")
        raise ForbiddenError("Not allowed to access this client", clientId=client_id)
