"""Shared fixtures: an in-memory stand-in for :class:`requests.Session`."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import pytest

from brevo_sync.client import BrevoClient
from brevo_sync.config import Settings
from brevo_sync.models import SOURCE_FIELDS, SourceRecord

BASE_URL = "https://api.brevo.com/v3"


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        json_data: Any = None,
        text: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.status_code = status_code
        if text is None:
            text = json.dumps(json_data) if json_data is not None else ""
        self.text = text
        self.headers = headers or {}


@dataclass
class Call:
    method: str
    path: str
    json: Any = None
    params: Dict[str, Any] = field(default_factory=dict)
    timeout: Optional[float] = None


class FakeSession:
    """Routes ``(method, path)`` to queued responses; the last one repeats."""

    def __init__(self) -> None:
        self.headers: Dict[str, str] = {}
        self.calls: List[Call] = []
        self.closed = False
        self._routes: Dict[tuple, list] = {}

    def add(self, method: str, path: str, *responses: Any) -> "FakeSession":
        self._routes.setdefault((method, path), []).extend(responses)
        return self

    def request(self, method, url, json=None, params=None, timeout=None):
        path = url[len(BASE_URL):] if url.startswith(BASE_URL) else url
        call = Call(method=method, path=path, json=json, params=dict(params or {}), timeout=timeout)
        self.calls.append(call)
        queue = self._routes.get((method, path))
        if not queue:
            raise AssertionError(f"Unexpected request {method} {path}")
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(call)
        return response

    def calls_to(self, method: str, path: str) -> List[Call]:
        return [call for call in self.calls if call.method == method and call.path == path]

    def close(self) -> None:
        self.closed = True


def contacts_pager(emails: List[Optional[str]]) -> Callable[[Call], FakeResponse]:
    """Serve ``GET /contacts`` pages from ``emails`` honouring limit/offset."""

    def handler(call: Call) -> FakeResponse:
        limit = int(call.params["limit"])
        offset = int(call.params["offset"])
        page = [{"email": email, "id": offset + index + 1} for index, email in enumerate(emails[offset : offset + limit])]
        return FakeResponse(200, {"contacts": page, "count": len(emails)})

    return handler


@pytest.fixture()
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def client(fake_session: FakeSession) -> BrevoClient:
    return BrevoClient("test-key", base_url=BASE_URL, session=fake_session)


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        api_key="test-key",
        sender_name="Translations Bureau",
        sender_email="office@example.com",
        page_delay_seconds=0.0,
        campaign_subject="Certified translations",
    )


@pytest.fixture()
def make_record() -> Callable[..., SourceRecord]:
    def factory(**overrides: str) -> SourceRecord:
        values = {name: "" for name in SOURCE_FIELDS}
        values.update(
            {
                "nat": "GE",
                "category": "79530000",
                "id": "1001",
                "contacts": "1",
                "email": "vendor@example.com",
                "website": "http://",
                "vendor_name": "Vendor LLC",
                "id_code": "404040404",
                "phone": "+995555123456",
                "city": "Tbilisi",
                "country": "Georgia",
            }
        )
        values.update(overrides)
        return SourceRecord(**values)

    return factory
