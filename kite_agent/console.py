from __future__ import annotations

import datetime as dt
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

from .config import TZ

theme = Theme({
    "ok": "bold green",
    "err": "bold red",
    "info": "cyan",
    "muted": "dim",
    "title": "bold magenta",
    "agent": "bold yellow",
    "warn": "yellow",
    "stream": "magenta",
    "session": "blue",
    "wallet": "green",
})
console = Console(theme=theme)


def now_tz() -> dt.datetime:
    return dt.datetime.now(TZ)


def fmt_time(t: Optional[dt.datetime]) -> str:
    if t is None:
        return "never"
    return t.astimezone(TZ).strftime("%d/%m/%Y, %H:%M:%S")


def now_str() -> str:
    return fmt_time(now_tz())


def human_tdelta(seconds: int) -> str:
    if seconds < 0:
        seconds = 0
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    return f"{h:02d}:{m:02d}:{s:02d}"


def short_wallet(wallet: str) -> str:
    return f"{wallet[:6]}..." if len(wallet) > 6 else wallet


class SessionLog:
    """Console writer that tags every line with the session and wallet it belongs to."""

    def __init__(self, session_id: int, wallet: str, out: Optional[Console] = None):
        self.session_id = session_id
        self.wallet = wallet
        self.out = out or console

    @property
    def prefix(self) -> str:
        return f"[session]\\[Session {self.session_id}][/session] [wallet]\\[{escape(short_wallet(self.wallet))}][/wallet]"

    def log(self, emoji: str, message: str, style: str = "default") -> None:
        self.out.print(f"[warn]\\[{now_str()}][/warn] {self.prefix} [{style}]{emoji} {escape(message)}[/{style}]")

    def ok(self, emoji: str, message: str) -> None:
        self.log(emoji, message, "ok")

    def info(self, emoji: str, message: str) -> None:
        self.log(emoji, message, "info")

    def warn(self, emoji: str, message: str) -> None:
        self.log(emoji, message, "warn")

    def error(self, emoji: str, message: str) -> None:
        self.log(emoji, message, "err")

    def stream_start(self, label: str) -> None:
        self.out.print(f"{self.prefix} [info]{escape(label)}[/info]", end="")

    def stream_delta(self, text: str) -> None:
        self.out.print(f"[stream]{escape(text)}[/stream]", end="")

    def stream_end(self) -> None:
        self.out.print()
