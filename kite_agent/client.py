from __future__ import annotations

from typing import Callable, Optional

import requests

from .config import USER_AGENT, AutomationConfig
from .catalog import Target
from .console import SessionLog
from .proxy import ProxyPool
from .stream import EventStreamDecoder, iter_deltas


def create_http_session() -> requests.Session:
    s = requests.Session()
    s.headers.update({"User-Agent": USER_AGENT})
    return s


class ProxiedCaller:
    def __init__(self, http: requests.Session, pool: ProxyPool, config: AutomationConfig, log: SessionLog):
        self.http = http
        self.pool = pool
        self.config = config
        self.log = log

    def fail_over(self, what: str, exc: Exception) -> None:
        self.log.error("❌", f"{what}: {exc}")
        proxy = self.pool.rotate()
        if proxy is not None:
            self.log.info("🔄", f"Switching to proxy: {proxy.label}")


class ConversationClient(ProxiedCaller):
    def query(self, target: Target, prompt: str, on_delta: Optional[Callable[[str], None]] = None) -> str:
        headers = {
            "Accept": "text/event-stream",
            "Content-Type": "application/json",
        }
        payload = {"message": prompt, "stream": True}
        decoder = EventStreamDecoder()
        parts = []
        try:
            with self.http.post(
                target.url,
                json=payload,
                headers=headers,
                proxies=self.pool.requests_proxies(),
                timeout=(self.config.request_timeout, self.config.stream_timeout),
                stream=True,
            ) as r:
                r.raise_for_status()
                for content in iter_deltas(r.iter_content(chunk_size=None), decoder):
                    parts.append(content)
                    if on_delta:
                        on_delta(content)
        except requests.RequestException as e:
            self.fail_over("AI query failed", e)
            return ""
        if decoder.skipped:
            self.log.log("⚠️", f"Skipped {decoder.skipped} malformed stream frame(s)", "muted")
        return "".join(parts).strip()


class UsageReporter(ProxiedCaller):
    def __init__(self, http: requests.Session, pool: ProxyPool, config: AutomationConfig, log: SessionLog, wallet: str):
        super().__init__(http, pool, config, log)
        self.wallet = wallet

    def report(self, target: Target, prompt: str, response: str) -> bool:
        body = {
            "wallet_address": self.wallet,
            "agent_id": target.agent_id,
            "request_text": prompt,
            "response_text": response,
            "request_metadata": {},
        }
        try:
            r = self.http.post(
                self.config.usage_url,
                json=body,
                headers={"Content-Type": "application/json"},
                proxies=self.pool.requests_proxies(),
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as e:
            self.fail_over("Usage report failed", e)
            return False
        if r.status_code != 200:
            self.log.warn("⚠️", f"Usage report rejected: HTTP {r.status_code}")
        return r.status_code == 200
