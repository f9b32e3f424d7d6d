from __future__ import annotations

from typing import Any, Callable, Optional

import pytest
import requests


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: Optional[str] = None) -> None:
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else str(body)

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Records POSTs and answers them with ``responder(url, json)``."""

    def __init__(self, responder: Callable[[str, dict[str, Any]], FakeResponse]) -> None:
        self.headers: dict[str, str] = {}
        self.calls: list[dict[str, Any]] = []
        self.closed = False
        self._responder = responder

    def post(self, url: str, json: dict[str, Any], timeout: float) -> FakeResponse:
        self.calls.append({"url": url, "payload": json, "timeout": timeout})
        return self._responder(url, json)

    def close(self) -> None:
        self.closed = True


def make_call(call_id: int, **overrides: Any) -> dict[str, Any]:
    call = {
        "callId": call_id,
        "title": f"Discovery call {call_id}",
        "startDate": "2024-03-05T14:00:00.000Z",
        "duration": 125,
        "provider": "zoom",
        "language": "en",
        "callCrmId": None,
        "relations": {
            "recording": {"url": f"https://app.modjo.ai/recordings/{call_id}"},
            "aiSummary": None,
            "speakers": [
                {"speakerId": 1, "name": "Alice Martin", "type": "user", "email": "alice@example.com"},
                {"speakerId": 2, "name": "Bob Stone", "type": "contact", "email": None, "phoneNumber": "+33600000000"},
            ],
            "transcript": [
                {"startTime": 0, "endTime": 4.6, "speakerId": 1, "content": "Hi Bob, thanks for joining.", "topics": []},
                {
                    "startTime": 65.2,
                    "endTime": 125,
                    "speakerId": 2,
                    "content": "What does pricing look like?",
                    "topics": [{"topicId": 7, "name": "Pricing"}, {"topicId": 9, "name": "Budget"}],
                },
            ],
        },
    }
    call.update(overrides)
    return call


def export_body(calls: list[dict[str, Any]], last_page: int, total: Optional[int] = None) -> dict[str, Any]:
    return {
        "pagination": {"totalValues": total if total is not None else len(calls), "lastPage": last_page},
        "values": calls,
    }


class FakeClock:
    """Monotonic clock whose ``sleep`` advances time instantly."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()
