"""Address book API client.

This module defines a small client wrapper around the address book
REST API for downstream services such as checkout (which lets the user
pick a saved address) and delivery (which reads the address for
routing).  The client uses the ``requests`` library internally.

The address book trusts identity headers set by the gateway, so the
client is constructed for one tenant and one user and sends
``X-Tenant-Id``, ``X-User-Id`` and, optionally, ``X-User-Roles`` with
every request.

All operations return a tuple ``(data, error)``.  On success ``error``
is ``None``.  On failure ``data`` is ``None`` (or an empty list for
listings) and ``error`` is a dictionary with keys ``status_code``,
``code`` and ``message``; ``code`` mirrors the error code returned by
the service (e.g. ``ADDRESS_DUPLICATE``).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Error = Dict[str, Any]


class AddressBookAPI:
    """Client for interacting with the address book API."""

    def __init__(
        self,
        *,
        base_url: str,
        tenant_id: str,
        user_id: str,
        roles: Optional[Iterable[str]] = None,
        api_prefix: str = "/api/v1",
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the service, e.g. ``http://address-book:8000``.
            tenant_id: Tenant every request is scoped to.
            user_id: User the requests are made on behalf of.
            roles: Optional role names forwarded in ``X-User-Roles``.
            api_prefix: Versioned prefix the routers are mounted under.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Per request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/") + api_prefix.rstrip("/")
        self.tenant_id = tenant_id
        self.user_id = user_id
        self.roles = list(roles) if roles else []
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _headers(self) -> Dict[str, str]:
        headers = {"X-Tenant-Id": self.tenant_id, "X-User-Id": self.user_id}
        if self.roles:
            headers["X-User-Roles"] = ",".join(self.roles)
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Dict[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> Tuple[Optional[Any], Optional[Error]]:
        """Perform an HTTP request to the API.

        Args:
            method: HTTP method (``GET``, ``POST``, ``PUT``, ``DELETE``).
            path: Path relative to the API prefix (e.g. ``/address``).
            params: Query parameters to include in the request.
            json_body: JSON body to send with the request.
        Returns:
            A tuple ``(data, error)`` as described in the module docstring.
        """
        url = f"{self.base_url}{path}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            code = None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    code = err_json.get("code")
                    message = err_json.get("message") or err_json.get("detail") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("Address book request failed (%s %s): %s", status, code, message)
            return None, {"status_code": status, "code": code, "message": message}
        except requests.RequestException as exc:
            logger.error("Address book request failed: %s", exc)
            return None, {"status_code": None, "code": None, "message": str(exc)}

    # ------------------------------------------------------------------
    # Address operations
    # ------------------------------------------------------------------
    def create_address(self, fields: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Save a new address for the client's user."""
        return self._request("POST", "/address", json_body=fields)

    def get_address(self, address_id: str) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Retrieve a single address by ID."""
        return self._request("GET", f"/address/{address_id}")

    def list_addresses(self, user_id: Optional[str] = None) -> Tuple[List[Dict[str, Any]], Optional[Error]]:
        """List addresses of the client's user, or of ``user_id`` (admin only)."""
        params = {"userId": user_id} if user_id else None
        data, error = self._request("GET", "/address", params=params)
        if error:
            return [], error
        return data or [], None

    def update_address(
        self, address_id: str, fields: Dict[str, Any]
    ) -> Tuple[Optional[Dict[str, Any]], Optional[Error]]:
        """Replace the content fields of an address."""
        return self._request("PUT", f"/address/{address_id}", json_body=fields)

    def delete_address(self, address_id: str) -> Tuple[bool, Optional[Error]]:
        """Delete an address.

        Returns:
            A tuple ``(success, error)``.
        """
        _, error = self._request("DELETE", f"/address/{address_id}")
        return error is None, error
