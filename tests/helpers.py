"""Shared fakes: questionary answers, HTTP transports and tokens."""

import json
import time
import urllib.parse
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

import httpx

from spores.spotify_api.token_manager import TokenInfo


@dataclass
class _Askable:
    """Mimic questionary prompt objects that return a value from .ask()."""

    value: Any

    def ask(self):
        return self.value


class QuestionaryStub:
    """Returns queued answers and records the prompts it was asked."""

    def __init__(self, *answers: Any):
        self._queue: List[Any] = list(answers)
        self.messages: List[str] = []
        self.defaults: List[Any] = []

    def _pop(self) -> Any:
        if not self._queue:
            raise AssertionError("QuestionaryStub queue exhausted")
        return self._queue.pop(0)

    def text(self, message: str, default: str = "", **_kwargs):
        self.messages.append(message)
        self.defaults.append(default)
        return _Askable(self._pop())

    password = text


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=payload)


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content.decode("utf-8"))


def request_form(request: httpx.Request) -> Dict[str, str]:
    parsed = urllib.parse.parse_qs(request.content.decode("utf-8"))
    return {k: v[0] for k, v in parsed.items()}


def make_token(*, expires_in: float = 3600.0, refresh_token: str = "rt", scope: str = None) -> TokenInfo:
    from spores.spotify_api.auth import SCOPES

    return TokenInfo(
        access_token="at",
        token_type="Bearer",
        expires_at=time.time() + expires_in,
        refresh_token=refresh_token,
        scope=" ".join(SCOPES) if scope is None else scope,
    )


def track_payload(idx: int, **overrides) -> Dict[str, Any]:
    track = {
        "type": "track",
        "id": f"track{idx}",
        "uri": f"spotify:track:track{idx}",
        "name": f"Song {idx}",
        "artists": [{"name": "A"}, {"name": "B"}],
        "album": {"name": "Album", "release_date": "2020-01-01"},
        "duration_ms": 180000,
    }
    track.update(overrides)
    return track
