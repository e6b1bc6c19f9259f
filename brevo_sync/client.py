"""Thin authenticated HTTP client for the Brevo REST API (v3)."""
from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

import requests

from .config import Settings
from .errors import DecodeError, RemoteError, TransportError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiResponse:
    """Status and body of a completed request, read eagerly."""

    status_code: int
    text: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        if not self.text.strip():
            raise DecodeError(f"Empty response body (status {self.status_code})")
        try:
            return json.loads(self.text)
        except ValueError as exc:
            raise DecodeError(f"Failed to decode response: {exc}") from exc

    def json_object(self) -> Dict[str, Any]:
        data = self.json()
        if not isinstance(data, dict):
            raise DecodeError(f"Expected a JSON object, got {type(data).__name__}")
        return data

    def expect(self, statuses: Iterable[int], context: str) -> "ApiResponse":
        """Return ``self`` when the status is accepted, else raise :class:`RemoteError`."""

        if self.status_code not in set(statuses):
            raise RemoteError(
                f"{context}: status {self.status_code} - {self.text}",
                status_code=self.status_code,
                body=self.text,
            )
        return self


class BrevoClient:
    """Issues JSON requests with the ``api-key`` header and a fixed timeout.

    Without an explicit ``session`` every thread gets its own session from
    ``session_factory``, so concurrent upserts never share connection state.
    An explicit ``session`` is used as-is by all threads.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.brevo.com/v3",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = {
            "api-key": api_key,
            "accept": "application/json",
            "content-type": "application/json",
        }
        self._session_factory = session_factory
        self._shared_session = session
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._lock = threading.Lock()
        if session is not None:
            session.headers.update(self._headers)

    @classmethod
    def from_settings(cls, settings: Settings, *, session: Optional[requests.Session] = None) -> "BrevoClient":
        return cls(
            settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            session=session,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def session(self) -> requests.Session:
        """The session for the calling thread."""

        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._session_factory()
            session.headers.update(self._headers)
            self._local.session = session
            with self._lock:
                self._sessions.append(session)
        return session

    def __enter__(self) -> "BrevoClient":
        return self

    def __exit__(self, exc_type, exc, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            sessions, self._sessions = self._sessions, []
            self._local = threading.local()
        if self._shared_session is not None:
            sessions.append(self._shared_session)
        for session in sessions:
            session.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        payload: Optional[Any] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> ApiResponse:
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            response = self.session.request(
                method,
                url,
                json=payload,
                params=params,
                timeout=self._timeout,
            )
            text = response.text
        except requests.exceptions.RequestException as exc:
            LOGGER.error("%s %s failed: %s", method, url, exc)
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        LOGGER.debug("%s %s -> %s %s", method, url, response.status_code, text)
        return ApiResponse(status_code=response.status_code, text=text or "", headers=dict(response.headers or {}))

    def get(self, path: str, *, params: Optional[Mapping[str, Any]] = None) -> ApiResponse:
        return self.request("GET", path, params=params)

    def post(self, path: str, payload: Optional[Any] = None) -> ApiResponse:
        return self.request("POST", path, payload=payload)


__all__ = ["ApiResponse", "BrevoClient"]
