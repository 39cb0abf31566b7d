# yoda_events/utils/security.py
import logging
from typing import Dict, Iterable, List, Optional, Set

from yoda_events.config import settings
from yoda_events.models.event import Event
from yoda_events.models.users import User

logger = logging.getLogger(__name__)


class AccessDeniedError(Exception):
    """Acting user may not perform the operation. Rendered as HTTP 403."""

    def __init__(self, message: str = "Access Denied"):
        super().__init__(message)
        self.message = message


def reachable_roles(roles: Iterable[str], hierarchy: Optional[Dict[str, List[str]]] = None) -> Set[str]:
    # Expand roles through the hierarchy, e.g. ROLE_ADMIN -> ROLE_EVENT_CREATE
    hierarchy = settings.ROLE_HIERARCHY if hierarchy is None else hierarchy
    result: Set[str] = set()
    pending = list(roles)
    while pending:
        role = pending.pop()
        if role in result:
            continue
        result.add(role)
        pending.extend(hierarchy.get(role, []))
    return result


def is_granted(user: Optional[User], role: str) -> bool:
    if user is None:
        return False
    return role in reachable_roles(user.get_roles())


def enforce_user_security(user: Optional[User], role: str = "ROLE_USER") -> None:
    if not is_granted(user, role):
        logger.info("Access denied for %s: missing %s", getattr(user, "username", None), role)
        raise AccessDeniedError(f"Need {role}")


def enforce_owner_security(user: Optional[User], event: Event) -> None:
    # Identity check: a different User object with the same data is not the owner
    if user is None or user is not event.owner:
        logger.info("Access denied for %s: not the owner of event %s", getattr(user, "username", None), event.id)
        raise AccessDeniedError("You are not the owner!!!")
