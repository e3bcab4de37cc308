"""
Request identity helpers.

Authentication happens upstream: a gateway validates the caller's
token and forwards the resolved identity in request headers.

* ``X-Tenant-Id`` – tenant the request is scoped to (required).
* ``X-User-Id`` – the authenticated user (required).
* ``X-User-Roles`` – optional comma‑separated role names.  Any role
  listed in ``settings.admin_roles`` grants the admin capability.

This service trusts those headers.  ``get_request_context`` turns them
into an explicit ``RequestContext`` which route handlers pass to the
service layer; services never read request state on their own.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

from fastapi import Depends, Header

from .config import settings
from .exceptions import ForbiddenError, UnauthenticatedError


class Capability(str, Enum):
    """What the requester may do beyond their own addresses."""

    OWNER = "owner"
    ADMIN = "admin"


@dataclass(frozen=True)
class RequestContext:
    """Identity of the caller for a single request."""

    tenant_id: str
    user_id: str
    capability: Capability = Capability.OWNER

    @property
    def is_admin(self) -> bool:
        return self.capability is Capability.ADMIN


def resolve_capability(roles: Optional[Iterable[str]]) -> Capability:
    """Map role names to a capability using ``settings.admin_roles``."""
    if not roles:
        return Capability.OWNER
    normalised = {r.strip().lower() for r in roles if r and r.strip()}
    if normalised & settings.admin_role_set:
        return Capability.ADMIN
    return Capability.OWNER


def get_request_context(
    x_tenant_id: Optional[str] = Header(None, alias="X-Tenant-Id"),
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    x_user_roles: Optional[str] = Header(None, alias="X-User-Roles"),
) -> RequestContext:
    """Dependency that builds the ``RequestContext`` from identity headers.

    Raises ``UnauthenticatedError`` (HTTP 401) if the tenant or user
    header is missing or blank.
    """
    tenant_id = (x_tenant_id or "").strip()
    user_id = (x_user_id or "").strip()
    if not tenant_id or not user_id:
        raise UnauthenticatedError("Missing X-Tenant-Id or X-User-Id header")
    roles = x_user_roles.split(",") if x_user_roles else None
    return RequestContext(
        tenant_id=tenant_id,
        user_id=user_id,
        capability=resolve_capability(roles),
    )


def require_admin() -> Callable[[RequestContext], RequestContext]:
    """Dependency factory that only lets admin requests through.

    Use in endpoints via ``Depends(require_admin())``.  Non‑admin
    callers get HTTP 403.
    """

    def _admin_dependency(context: RequestContext = Depends(get_request_context)) -> RequestContext:
        if not context.is_admin:
            raise ForbiddenError("Insufficient permissions")
        return context

    return _admin_dependency
