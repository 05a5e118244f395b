"""Access guard for protected views.

A view opens only for a signed-in session (one holding a token) whose role
is among the view's allowed roles, when the view restricts roles at all.
"""

from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from adsmith.models.config import Config
from adsmith.utils.logging import get_logger


logger = get_logger(__name__)


class AccessDecision(str, Enum):
    ALLOWED = "allowed"
    LOGIN_REQUIRED = "login_required"
    FORBIDDEN = "forbidden"


class Session(BaseModel):
    """Authentication state of the current user."""

    token: Optional[str] = Field(default=None, description="Bearer token, None when signed out")
    role: Optional[str] = Field(default=None, description="Role of the signed-in user")

    model_config = {"frozen": True}

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @classmethod
    def from_config(cls, config: Config) -> "Session":
        return cls(token=config.api.token, role=config.session.role)


def check_access(session: Session, allowed_roles: Optional[Iterable[str]] = None) -> AccessDecision:
    """
    Decide whether a session may open a protected view.

    Args:
        session: Current session
        allowed_roles: Roles allowed in; None allows any signed-in role

    Returns:
        ALLOWED, LOGIN_REQUIRED (no token), or FORBIDDEN (role not allowed)
    """
    if not session.is_authenticated:
        decision = AccessDecision.LOGIN_REQUIRED
    elif allowed_roles is not None and session.role not in set(allowed_roles):
        decision = AccessDecision.FORBIDDEN
    else:
        decision = AccessDecision.ALLOWED

    logger.info("access_checked", role=session.role, decision=decision.value)
    return decision
