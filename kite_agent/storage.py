from __future__ import annotations

import os
from typing import Iterable, List

from rich.markup import escape

from .console import console
from .proxy import EgressDescriptor, parse_proxy_line


class ConfigurationError(Exception):
    pass


def read_lines(path: str) -> List[str]:
    if not os.path.exists(path):
        return []
    with open(path, "r", encoding="utf-8") as f:
        lines = [ln.strip().replace("\r", "") for ln in f.read().splitlines()]
    return [ln for ln in lines if ln and not ln.startswith("#")]


def write_lines(path: str, lines: Iterable[str]) -> None:
    tmp = f"{path}.tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        for ln in lines:
            f.write(f"{ln}\n")
    os.replace(tmp, path)


def load_wallets(path: str) -> List[str]:
    if not os.path.exists(path):
        raise ConfigurationError(f"{path} not found")
    wallets = read_lines(path)
    if not wallets:
        raise ConfigurationError(f"no wallets found in {path}")
    return wallets


def load_proxies(path: str) -> List[EgressDescriptor]:
    proxies: List[EgressDescriptor] = []
    for i, raw in enumerate(read_lines(path), 1):
        try:
            proxies.append(parse_proxy_line(raw))
        except ValueError as e:
            console.print(f"[warn]Skipping proxy #{i}: {escape(str(e))}[/warn]")
    return proxies
