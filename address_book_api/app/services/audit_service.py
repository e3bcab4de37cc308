"""
Audit service for recording and querying address book actions.

This module provides a centralized API for writing audit events to the
``audit_logs`` table and retrieving them with filters and pagination.
Every create, update and delete of an address is recorded together
with the acting user.  Audit records are partitioned by tenant like
everything else; only administrators may read them.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Dict, List, Optional

from address_book_api.app.core.db import get_connection


class AuditService:
    """Service class for writing and retrieving audit logs."""

    @classmethod
    async def log(
        cls,
        tenant_id: str,
        user_id: Optional[str],
        action: str,
        object_type: str,
        object_id: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Insert a new audit record.

        Parameters
        ----------
        tenant_id : str
            Tenant the action belongs to.
        user_id : Optional[str]
            ID of the user performing the action.
        action : str
            Short description of the action (e.g. "create", "update", "delete").
        object_type : str
            Type of object affected (e.g. "address").
        object_id : Optional[str]
            Identifier of the affected object, if applicable.
        details : Optional[dict]
            Additional structured data about the action, stored as JSON.

        The audit trail is secondary to the action itself: a database
        error here is logged and does not propagate to the caller.
        """
        logger = logging.getLogger(__name__)
        conn = None
        try:
            conn = get_connection()
            cursor = conn.cursor()
            details_json = json.dumps(details) if details else None
            cursor.execute(
                """
                INSERT INTO audit_logs (tenant_id, user_id, action, object_type, object_id, details)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (tenant_id, user_id, action, object_type, object_id, details_json),
            )
            conn.commit()
        except sqlite3.Error as e:
            logger.warning("Failed to write audit log for %s %s %s: %s", action, object_type, object_id, e)
        finally:
            if conn is not None:
                conn.close()

    @classmethod
    async def list_logs(
        cls,
        tenant_id: str,
        user_id: Optional[str] = None,
        object_type: Optional[str] = None,
        action: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Retrieve audit records of one tenant, newest first.

        Filtering by ``user_id``, ``object_type`` or ``action`` reduces
        the result set.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            where_clauses: List[str] = ["tenant_id = ?"]
            params: List[Any] = [tenant_id]
            if user_id is not None:
                where_clauses.append("user_id = ?")
                params.append(user_id)
            if object_type:
                where_clauses.append("object_type = ?")
                params.append(object_type)
            if action:
                where_clauses.append("action = ?")
                params.append(action)
            query = (
                "SELECT id, tenant_id, user_id, action, object_type, object_id, timestamp, details "
                "FROM audit_logs WHERE " + " AND ".join(where_clauses)
                + " ORDER BY id DESC LIMIT ? OFFSET ?"
            )
            params.extend([limit, offset])
            rows = cursor.execute(query, tuple(params)).fetchall()
            logs = []
            for row in rows:
                details_data = None
                if row["details"]:
                    try:
                        details_data = json.loads(row["details"])
                    except json.JSONDecodeError:
                        details_data = row["details"]
                logs.append(
                    {
                        "id": row["id"],
                        "tenant_id": row["tenant_id"],
                        "user_id": row["user_id"],
                        "action": row["action"],
                        "object_type": row["object_type"],
                        "object_id": row["object_id"],
                        "timestamp": row["timestamp"],
                        "details": details_data,
                    }
                )
            return logs
        finally:
            conn.close()
