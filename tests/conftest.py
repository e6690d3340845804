"""Shared fakes and fixtures: an in-memory HTTP session, a manual clock and a silent console."""

from __future__ import annotations

import datetime as dt
import io
import json
from typing import Any, Dict, List, Optional, Tuple

import pytest
import requests
from rich.console import Console

from kite_agent.catalog import Target, TargetCatalog
from kite_agent.config import TZ, AutomationConfig
from kite_agent.console import SessionLog, theme
from kite_agent.proxy import EgressDescriptor, ProxyPool
from kite_agent.session import WalletAutomation

AGENT_URL = "https://agent.test/main"
USAGE_URL = "https://usage.test/api/report_usage"
EXPLORER = "https://explorer.test"


def sse(*contents: str, done: bool = True) -> bytes:
    frames = [
        "data: " + json.dumps({"choices": [{"delta": {"content": c}}]}, ensure_ascii=False) + "\n"
        for c in contents
    ]
    if done:
        frames.append("data: [DONE]\n")
    return "".join(frames).encode("utf-8")


class FakeResponse:
    def __init__(self, status_code: int = 200, chunks: Tuple[bytes, ...] = (), json_data: Any = None):
        self.status_code = status_code
        self.chunks = chunks
        self.json_data = json_data
        self.closed = False

    def json(self) -> Any:
        if isinstance(self.json_data, Exception):
            raise self.json_data
        return self.json_data

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)  # type: ignore[arg-type]

    def iter_content(self, chunk_size: Optional[int] = None):
        for c in self.chunks:
            yield c

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


class FakeHttp:
    """Stands in for ``requests.Session``; routes are keyed by (method, url)."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []

    def route(self, method: str, url: str, result: Any) -> None:
        self.routes[(method, url)] = result

    def _dispatch(self, method: str, url: str, kwargs: Dict[str, Any]) -> FakeResponse:
        self.calls.append((method, url, kwargs))
        result = self.routes.get((method, url))
        if result is None:
            raise requests.ConnectionError(f"no route for {method} {url}")
        if callable(result):
            result = result(**kwargs)
        if isinstance(result, Exception):
            raise result
        return result

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._dispatch("GET", url, kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._dispatch("POST", url, kwargs)


class ManualClock:
    def __init__(self, start: Optional[dt.datetime] = None):
        self.now = start or TZ.localize(dt.datetime(2026, 1, 1, 12, 0, 0))

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += dt.timedelta(seconds=seconds)


@pytest.fixture
def quiet() -> Console:
    return Console(file=io.StringIO(), theme=theme, width=120)


@pytest.fixture
def http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def config() -> AutomationConfig:
    return AutomationConfig(
        min_delay=0.0,
        max_delay=0.0,
        skip_backoff=0.0,
        explorer_base=EXPLORER,
        usage_url=USAGE_URL,
    )


@pytest.fixture
def pool() -> ProxyPool:
    return ProxyPool([
        EgressDescriptor("http", "p1.test", 8080),
        EgressDescriptor("socks5", "p2.test", 1080, "user", "pass"),
    ])


@pytest.fixture
def log(quiet: Console) -> SessionLog:
    return SessionLog(1, "0xABC", quiet)


@pytest.fixture
def catalog() -> TargetCatalog:
    return TargetCatalog([Target(url=AGENT_URL, agent_id="agent-1", name="Echo", questions=["ping"])])


@pytest.fixture
def make_automation(http, pool, catalog, config, clock, quiet):
    def make(**overrides: Any) -> WalletAutomation:
        kwargs: Dict[str, Any] = dict(
            wallet="0xABC",
            session_id=1,
            pool=pool,
            catalog=catalog,
            config=config,
            providers=[],
            http=http,
            clock=clock,
            out=quiet,
        )
        kwargs.update(overrides)
        return WalletAutomation(**kwargs)

    return make
