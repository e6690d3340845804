from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence
from urllib.parse import quote, urlsplit, unquote


@dataclass(frozen=True)
class EgressDescriptor:
    """One proxy: scheme, host, port and optional credentials."""

    scheme: str
    host: str
    port: int
    username: str = ""
    password: str = ""

    @property
    def transport(self) -> str:
        return "socks" if self.scheme.startswith("socks") else "http"

    @property
    def label(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"

    @property
    def url(self) -> str:
        auth = ""
        if self.username:
            auth = f"{quote(self.username, safe='')}:{quote(self.password, safe='')}@"
        return f"{self.scheme}://{auth}{self.host}:{self.port}"


def _port(raw: Optional[str], line: str) -> int:
    if not raw or not raw.isdigit():
        raise ValueError(f"invalid proxy port in {line!r}")
    return int(raw)


def parse_proxy_line(line: str) -> EgressDescriptor:
    line = line.strip()
    if "://" in line:
        parts = urlsplit(line)
        if not parts.hostname:
            raise ValueError(f"missing proxy host in {line!r}")
        try:
            port = parts.port
        except ValueError:
            port = None
        if port is None:
            raise ValueError(f"invalid proxy port in {line!r}")
        return EgressDescriptor(
            scheme=parts.scheme.lower(),
            host=parts.hostname,
            port=port,
            username=unquote(parts.username or ""),
            password=unquote(parts.password or ""),
        )
    fields = line.split(":")
    if len(fields) < 3:
        raise ValueError(f"expected scheme:host:port[:user:pass], got {line!r}")
    scheme, host, port = fields[0], fields[1].lstrip("/"), fields[2]
    user = fields[3] if len(fields) > 3 else ""
    password = fields[4] if len(fields) > 4 else ""
    if not host:
        raise ValueError(f"missing proxy host in {line!r}")
    if not (user and password):
        user = password = ""
    return EgressDescriptor(scheme=scheme.lower(), host=host, port=_port(port, line), username=user, password=password)


class ProxyPool:
    """Round-robin proxy list shared by every session.

    There is a single current index: a rotation triggered by one session is
    what every other session reads next.
    """

    def __init__(self, descriptors: Sequence[EgressDescriptor] = ()):
        self._proxies: List[EgressDescriptor] = list(descriptors)
        self._index = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._proxies)

    @property
    def index(self) -> int:
        return self._index

    def current(self) -> Optional[EgressDescriptor]:
        with self._lock:
            if not self._proxies:
                return None
            return self._proxies[self._index]

    def rotate(self) -> Optional[EgressDescriptor]:
        with self._lock:
            if not self._proxies:
                return None
            self._index = (self._index + 1) % len(self._proxies)
            return self._proxies[self._index]

    def requests_proxies(self) -> Optional[Dict[str, str]]:
        proxy = self.current()
        if proxy is None:
            return None
        return {"http": proxy.url, "https": proxy.url}
