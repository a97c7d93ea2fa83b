"""Async HTTP client for the hosted backend.

Overview
--------
Thin client for a Supabase-style backend. It covers the three surfaces the
application talks to:

- ``/auth/v1``: password sign-in, sign-up, token refresh, password recovery,
  user update, verification resend and sign-out.
- ``/rest/v1``: named RPCs and row inserts, updates and deletes filtered with
  ``column=eq.value``.
- ``/storage/v1``: object upload and download (profile avatars).

Every request carries the ``apikey`` header and an ``Authorization`` bearer,
the user's access token when one is given and the anonymous key otherwise.

Errors
------
Non-2xx responses raise :class:`BackendError` (``AuthError`` for the auth
endpoints) with the message taken from the response body. Transport failures
raise the same types without a status code.

Usage
-----
>>> client = BackendClient("http://localhost:54321", "anon-key")
>>> rows = await client.rpc("get_elevators", {"in_company_id": None}, token=access_token)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Type

import httpx

from .errors import AuthError, BackendError, code_from_body, message_from_body

logger = logging.getLogger(__name__)

NETWORK_ERROR_MESSAGE = "Could not reach the server. Check your connection and try again."


class BackendClient:
    """Async client for the auth, REST and storage APIs.

    A fresh ``httpx.AsyncClient`` is opened per request so the client can be
    driven from short-lived event loops (one per Streamlit handler).
    """

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Create a backend client.

        Args:
            base_url: Project URL, e.g. ``http://localhost:54321``.
            anon_key: Public anonymous API key.
            timeout: HTTP timeout in seconds for every request.
            transport: Optional transport, used by tests to inject
                ``httpx.MockTransport``.
        """
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self._transport = transport

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------
    def _headers(self, token: Optional[str], extra: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        headers: Dict[str, str] = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token or self.anon_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        content: Optional[bytes] = None,
        token: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        error_cls: Type[BackendError] = BackendError,
    ) -> httpx.Response:
        logger.debug("%s %s", method, path)
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as http:
                response = await http.request(
                    method,
                    path,
                    params=params,
                    json=json,
                    content=content,
                    headers=self._headers(token, headers),
                )
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise error_cls(NETWORK_ERROR_MESSAGE, details=str(e)) from e

        if response.is_error:
            body = self._decode(response)
            logger.info("%s %s -> HTTP %s", method, path, response.status_code)
            raise error_cls(
                message_from_body(body),
                status_code=response.status_code,
                code=code_from_body(body),
                details=body,
            )
        return response

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self._send(method, path, **kwargs)
        return self._decode(response)

    @staticmethod
    def _eq_filters(filters: Optional[Mapping[str, Any]]) -> Dict[str, str]:
        return {column: f"eq.{value}" for column, value in (filters or {}).items()}

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------
    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        """Exchange credentials for a session payload (tokens + user)."""
        return await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
            error_cls=AuthError,
        )

    async def refresh_session(self, refresh_token: str) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
            error_cls=AuthError,
        )

    async def sign_up(
        self,
        email: str,
        password: str,
        *,
        data: Optional[Mapping[str, Any]] = None,
        redirect_to: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create an account; ``data`` is stored as user metadata.

        Returns either a session payload or, when e-mail confirmation is on,
        the bare user object.
        """
        params = {"redirect_to": redirect_to} if redirect_to else None
        return await self._request(
            "POST",
            "/auth/v1/signup",
            params=params,
            json={"email": email, "password": password, "data": dict(data or {})},
            error_cls=AuthError,
        )

    async def reset_password_for_email(self, email: str, redirect_to: str) -> None:
        await self._request(
            "POST",
            "/auth/v1/recover",
            params={"redirect_to": redirect_to},
            json={"email": email},
            error_cls=AuthError,
        )

    async def update_user(self, access_token: str, attributes: Mapping[str, Any]) -> Dict[str, Any]:
        return await self._request(
            "PUT", "/auth/v1/user", json=dict(attributes), token=access_token, error_cls=AuthError
        )

    async def verify_otp(self, token_hash: str, otp_type: str) -> Dict[str, Any]:
        """Redeem an e-mailed ``token_hash`` (``recovery``, ``signup``...) for a session."""
        return await self._request(
            "POST",
            "/auth/v1/verify",
            json={"type": otp_type, "token_hash": token_hash},
            error_cls=AuthError,
        )

    async def resend_signup(self, email: str, redirect_to: Optional[str] = None) -> None:
        params = {"redirect_to": redirect_to} if redirect_to else None
        await self._request(
            "POST",
            "/auth/v1/resend",
            params=params,
            json={"type": "signup", "email": email},
            error_cls=AuthError,
        )

    async def sign_out(self, access_token: str) -> None:
        await self._request("POST", "/auth/v1/logout", token=access_token, error_cls=AuthError)

    def authorize_url(self, provider: str, redirect_to: Optional[str] = None) -> str:
        """URL starting the OAuth flow for ``provider``."""
        params = {"provider": provider}
        if redirect_to:
            params["redirect_to"] = redirect_to
        return str(httpx.URL(f"{self.base_url}/auth/v1/authorize", params=params))

    # ------------------------------------------------------------------
    # REST: RPCs and rows
    # ------------------------------------------------------------------
    async def rpc(self, name: str, params: Optional[Mapping[str, Any]] = None, *, token: Optional[str] = None) -> Any:
        """Call the named database procedure and return its decoded result."""
        return await self._request("POST", f"/rest/v1/rpc/{name}", json=dict(params or {}), token=token)

    async def insert(
        self, table: str, row: Mapping[str, Any], *, token: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        return await self._request(
            "POST",
            f"/rest/v1/{table}",
            json=dict(row),
            token=token,
            headers={"Prefer": "return=representation"},
        ) or []

    async def update(
        self,
        table: str,
        values: Mapping[str, Any],
        *,
        filters: Mapping[str, Any],
        token: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        if not filters:
            raise ValueError("update() requires at least one filter")
        return await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=self._eq_filters(filters),
            json=dict(values),
            token=token,
            headers={"Prefer": "return=representation"},
        ) or []

    async def delete(self, table: str, *, filters: Mapping[str, Any], token: Optional[str] = None) -> None:
        if not filters:
            raise ValueError("delete() requires at least one filter")
        await self._request("DELETE", f"/rest/v1/{table}", params=self._eq_filters(filters), token=token)

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------
    async def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        *,
        content_type: str = "application/octet-stream",
        token: Optional[str] = None,
        upsert: bool = True,
    ) -> str:
        """Upload ``content`` to ``bucket/path`` and return the object path."""
        await self._request(
            "POST",
            f"/storage/v1/object/{bucket}/{path}",
            content=content,
            token=token,
            headers={"Content-Type": content_type, "x-upsert": "true" if upsert else "false"},
        )
        return path

    async def download(self, bucket: str, path: str, *, token: Optional[str] = None) -> bytes:
        response = await self._send("GET", f"/storage/v1/object/{bucket}/{path}", token=token)
        return response.content
