"""
Audit log endpoints for API v1.

Provides administrators with the trail of address changes in their
own tenant.  Logs capture create, update and delete actions and
support filtering by acting user, object type and action.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from address_book_api.app.core.security import RequestContext, require_admin
from address_book_api.app.services.audit_service import AuditService

router = APIRouter()


@router.get("/logs")
async def list_audit_logs(
    user_id: Optional[str] = Query(None, alias="userId", description="Filter by acting user ID"),
    object_type: Optional[str] = Query(None, alias="objectType", description="Filter by object type"),
    action: Optional[str] = Query(None, description="Filter by action (create, update, delete)"),
    limit: int = Query(100, ge=1, le=500, description="Maximum number of logs to return"),
    offset: int = Query(0, ge=0, description="Number of logs to skip"),
    context: RequestContext = Depends(require_admin()),
) -> List[dict]:
    """Retrieve audit logs of the caller's tenant, newest first (admin only)."""
    return await AuditService.list_logs(
        tenant_id=context.tenant_id,
        user_id=user_id,
        object_type=object_type,
        action=action,
        limit=limit,
        offset=offset,
    )
