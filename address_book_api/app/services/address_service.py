"""
Service layer for the address book.

This module implements the five address operations: create, get,
list, update and delete.  Every operation receives the caller's
``RequestContext`` explicitly; addresses are partitioned by tenant
and owned by a single user.

Visibility rules:

* Addresses of another tenant are never visible and are reported as
  not found.
* Within a tenant, only the owner may read or modify an address.
  Callers with the admin capability may additionally *read* (get and
  list) other users' addresses; update and delete remain owner only.
* Deleted addresses behave exactly like addresses that never existed.

Duplicate prevention compares all content fields exactly against the
owner's other live addresses.  The lookup here rejects duplicates
early; the partial unique index created by ``core.db`` is what
guarantees the invariant under concurrent writes, and its violation is
reported as the same ``DuplicateAddressError``.

All queries use parameterized statements.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Type, Union

from pydantic import ValidationError as SchemaValidationError

from address_book_api.app.core.config import settings
from address_book_api.app.core.db import get_connection, is_unique_violation
from address_book_api.app.core.exceptions import (
    DuplicateAddressError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from address_book_api.app.core.security import RequestContext
from address_book_api.app.schemas.address import (
    CONTENT_FIELDS,
    AddressCreate,
    AddressRead,
    AddressUpdate,
)
from address_book_api.app.services.audit_service import AuditService


AddressFields = Union[AddressCreate, Mapping[str, Any]]


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class AddressService:
    """Service class for managing shipping addresses."""

    @classmethod
    async def create_address(cls, context: RequestContext, fields: AddressFields) -> AddressRead:
        """Validate and store a new address for the requesting user.

        Raises ``ValidationError`` for invalid fields and
        ``DuplicateAddressError`` if the user already has a live address
        with identical content.
        """
        logger = logging.getLogger(__name__)
        data = cls._validate(fields, AddressCreate)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            if cls._find_duplicate(cursor, context.tenant_id, context.user_id, data) is not None:
                logger.warning(
                    "Rejected duplicate address for user %s in tenant %s",
                    context.user_id,
                    context.tenant_id,
                )
                raise DuplicateAddressError("An identical address already exists for this user")
            address_id = str(uuid.uuid4())
            now = _utcnow()
            try:
                cursor.execute(
                    """
                    INSERT INTO addresses (
                        address_id, tenant_id, user_id,
                        line1, line2, city, state, postcode, country,
                        deleted, created_at, updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 0, ?, ?)
                    """,
                    (address_id, context.tenant_id, context.user_id, *data.content_key(), now, now),
                )
                conn.commit()
            except sqlite3.IntegrityError as e:
                conn.rollback()
                if is_unique_violation(e):
                    logger.warning("Concurrent duplicate insert rejected for user %s", context.user_id)
                    raise DuplicateAddressError("An identical address already exists for this user") from e
                raise
            logger.info("User %s created address %s in tenant %s", context.user_id, address_id, context.tenant_id)
            row = cls._find_live(cursor, context.tenant_id, address_id)
        finally:
            conn.close()
        await AuditService.log(
            tenant_id=context.tenant_id,
            user_id=context.user_id,
            action="create",
            object_type="address",
            object_id=address_id,
            details={"city": data.city, "country": data.country},
        )
        return cls._row_to_address_read(row)

    @classmethod
    async def get_address(cls, context: RequestContext, address_id: Union[str, uuid.UUID]) -> AddressRead:
        """Return a live address visible to the caller.

        Raises ``NotFoundError`` if the address does not exist in the
        caller's tenant (or was deleted) and ``ForbiddenError`` if it
        belongs to another user and the caller is not an admin.
        """
        conn = get_connection()
        try:
            cursor = conn.cursor()
            row = cls._get_accessible(cursor, context, str(address_id), allow_admin=True)
            return cls._row_to_address_read(row)
        finally:
            conn.close()

    @classmethod
    async def list_addresses(
        cls,
        context: RequestContext,
        query_user_id: Optional[str] = None,
    ) -> List[AddressRead]:
        """Return the live addresses of one user in creation order.

        Without ``query_user_id`` the caller's own addresses are listed.
        Listing another user's addresses requires the admin
        capability.  An empty list is a normal result.
        """
        logger = logging.getLogger(__name__)
        # A blank filter means no filter; ids are compared like the identity headers.
        query_user_id = (query_user_id or "").strip() or None
        target_user_id = context.user_id
        if query_user_id is not None and query_user_id != context.user_id:
            if not context.is_admin:
                logger.warning(
                    "User %s attempted to list addresses of user %s",
                    context.user_id,
                    query_user_id,
                )
                raise ForbiddenError("Only administrators may list other users' addresses")
            target_user_id = query_user_id
        conn = get_connection()
        try:
            cursor = conn.cursor()
            rows = cursor.execute(
                """
                SELECT * FROM addresses
                WHERE tenant_id = ? AND user_id = ? AND deleted = 0
                ORDER BY created_at ASC, rowid ASC
                """,
                (context.tenant_id, target_user_id),
            ).fetchall()
            return [cls._row_to_address_read(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def update_address(
        cls,
        context: RequestContext,
        address_id: Union[str, uuid.UUID],
        fields: AddressFields,
    ) -> AddressRead:
        """Replace the content fields of an address owned by the caller.

        Identity and scoping fields never change.  Raises
        ``NotFoundError``, ``ForbiddenError``, ``ValidationError`` or
        ``DuplicateAddressError`` if the new content matches another
        live address of the same user.
        """
        logger = logging.getLogger(__name__)
        address_id = str(address_id)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            current = cls._get_accessible(cursor, context, address_id, allow_admin=False)
            data = cls._validate(fields, AddressUpdate)
            if cls._find_duplicate(
                cursor, current["tenant_id"], current["user_id"], data, exclude_id=address_id
            ) is not None:
                logger.warning("Rejected update of address %s: duplicate content", address_id)
                raise DuplicateAddressError("An identical address already exists for this user")
            try:
                cursor.execute(
                    """
                    UPDATE addresses
                    SET line1 = ?, line2 = ?, city = ?, state = ?, postcode = ?, country = ?, updated_at = ?
                    WHERE address_id = ? AND deleted = 0
                    """,
                    (*data.content_key(), _utcnow(), address_id),
                )
                if cursor.rowcount == 0:
                    # Deleted since the access check.
                    conn.rollback()
                    raise NotFoundError(f"Address {address_id} not found")
                conn.commit()
            except sqlite3.IntegrityError as e:
                conn.rollback()
                if is_unique_violation(e):
                    raise DuplicateAddressError("An identical address already exists for this user") from e
                raise
            logger.info("User %s updated address %s", context.user_id, address_id)
            row = cls._find_live(cursor, context.tenant_id, address_id)
        finally:
            conn.close()
        changed = [name for name in CONTENT_FIELDS if (current[name] or None) != getattr(data, name)]
        await AuditService.log(
            tenant_id=context.tenant_id,
            user_id=context.user_id,
            action="update",
            object_type="address",
            object_id=address_id,
            details={"changed": changed},
        )
        return cls._row_to_address_read(row)

    @classmethod
    async def delete_address(cls, context: RequestContext, address_id: Union[str, uuid.UUID]) -> None:
        """Delete an address owned by the caller.

        Soft delete by default; the row is removed entirely when
        ``settings.hard_delete`` is enabled.  Either way the address is
        gone from the API's point of view and a second delete raises
        ``NotFoundError``.
        """
        logger = logging.getLogger(__name__)
        address_id = str(address_id)
        conn = get_connection()
        try:
            cursor = conn.cursor()
            cls._get_accessible(cursor, context, address_id, allow_admin=False)
            if settings.hard_delete:
                cursor.execute("DELETE FROM addresses WHERE address_id = ?", (address_id,))
            else:
                now = _utcnow()
                cursor.execute(
                    """
                    UPDATE addresses SET deleted = 1, deleted_at = ?, updated_at = ?
                    WHERE address_id = ? AND deleted = 0
                    """,
                    (now, now, address_id),
                )
            if cursor.rowcount == 0:
                # A concurrent delete won the race.
                raise NotFoundError(f"Address {address_id} not found")
            conn.commit()
            logger.info("User %s deleted address %s", context.user_id, address_id)
        finally:
            conn.close()
        await AuditService.log(
            tenant_id=context.tenant_id,
            user_id=context.user_id,
            action="delete",
            object_type="address",
            object_id=address_id,
            details={"hard": settings.hard_delete},
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(fields: AddressFields, schema: Type[AddressCreate]) -> AddressCreate:
        """Return ``fields`` as a validated schema instance.

        Mappings are validated against ``schema``; pydantic errors are
        reported as a single ``ValidationError`` listing every failing
        field.
        """
        if isinstance(fields, AddressCreate):
            return fields
        if not isinstance(fields, Mapping):
            raise ValidationError("Address fields must be an object")
        try:
            return schema.model_validate(dict(fields))
        except SchemaValidationError as e:
            problems = []
            for err in e.errors():
                location = ".".join(str(part) for part in err.get("loc", ())) or "body"
                problems.append(f"{location}: {err.get('msg')}")
            raise ValidationError("; ".join(problems)) from e

    @staticmethod
    def _find_live(cursor: sqlite3.Cursor, tenant_id: str, address_id: str) -> Optional[sqlite3.Row]:
        return cursor.execute(
            "SELECT * FROM addresses WHERE address_id = ? AND tenant_id = ? AND deleted = 0",
            (address_id, tenant_id),
        ).fetchone()

    @classmethod
    def _get_accessible(
        cls,
        cursor: sqlite3.Cursor,
        context: RequestContext,
        address_id: str,
        allow_admin: bool,
    ) -> sqlite3.Row:
        row = cls._find_live(cursor, context.tenant_id, address_id)
        if row is None:
            raise NotFoundError(f"Address {address_id} not found")
        if row["user_id"] != context.user_id and not (allow_admin and context.is_admin):
            logging.getLogger(__name__).warning(
                "User %s denied access to address %s owned by %s",
                context.user_id,
                address_id,
                row["user_id"],
            )
            raise ForbiddenError("Address belongs to another user")
        return row

    @staticmethod
    def _find_duplicate(
        cursor: sqlite3.Cursor,
        tenant_id: str,
        user_id: str,
        data: AddressCreate,
        exclude_id: Optional[str] = None,
    ) -> Optional[str]:
        """Return the id of a live address with identical content, if any."""
        query = """
            SELECT address_id FROM addresses
            WHERE tenant_id = ? AND user_id = ? AND deleted = 0
              AND line1 = ? AND line2 = ? AND city = ? AND state = ? AND postcode = ? AND country = ?
        """
        params: List[Any] = [tenant_id, user_id, *data.content_key()]
        if exclude_id is not None:
            query += " AND address_id != ?"
            params.append(exclude_id)
        row = cursor.execute(query, tuple(params)).fetchone()
        return row["address_id"] if row else None

    @staticmethod
    def _row_to_address_read(row: sqlite3.Row) -> AddressRead:
        """Convert a database row to an AddressRead schema instance."""
        return AddressRead(
            address_id=row["address_id"],
            tenant_id=row["tenant_id"],
            user_id=row["user_id"],
            line1=row["line1"],
            line2=row["line2"] or None,
            city=row["city"],
            state=row["state"],
            postcode=row["postcode"],
            country=row["country"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
