from __future__ import annotations

import datetime as dt
import enum
import random
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Protocol

import requests
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .catalog import TargetCatalog
from .client import ConversationClient, UsageReporter, create_http_session
from .config import TX_ANALYZER_URL, AutomationConfig
from .console import SessionLog, fmt_time, human_tdelta, now_tz
from .proxy import ProxyPool
from .scanner import TransactionPromptProvider, TransactionScanner


class Outcome(enum.Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"
    STOPPED = "stopped"


class PromptProvider(Protocol):
    def refresh(self, catalog: TargetCatalog) -> None: ...


@dataclass
class Statistics:
    agent_interactions: Dict[str, int] = field(default_factory=dict)
    total_points: int = 0
    total_interactions: int = 0
    successful_interactions: int = 0
    failed_interactions: int = 0
    last_interaction_time: Optional[dt.datetime] = None


class WalletSession:
    def __init__(self, wallet: str, session_id: int, start_time: dt.datetime,
                 reset_interval: dt.timedelta = dt.timedelta(hours=24),
                 agent_names: Iterable[str] = ()):
        self.wallet = wallet
        self.session_id = session_id
        self.daily_points = 0
        self.start_time = start_time
        self.reset_interval = reset_interval
        self.next_reset_time = start_time + reset_interval
        self.statistics = Statistics(agent_interactions={name: 0 for name in agent_names})

    def check_reset(self, now: dt.datetime) -> bool:
        """Zero the daily points once ``now`` has crossed the reset boundary.

        The boundary moves forward in whole intervals until it is in the
        future again, so a long stall still produces a single reset.
        """
        if now < self.next_reset_time:
            return False
        self.daily_points = 0
        while self.next_reset_time <= now:
            self.next_reset_time += self.reset_interval
        return True

    def record(self, agent_name: str, success: bool, points: int, now: dt.datetime) -> None:
        st = self.statistics
        st.agent_interactions[agent_name] = st.agent_interactions.get(agent_name, 0) + 1
        st.total_interactions += 1
        st.last_interaction_time = now
        if success:
            st.successful_interactions += 1
            st.total_points += points
            self.daily_points += points
        else:
            st.failed_interactions += 1

    def stats_table(self) -> Table:
        st = self.statistics
        table = Table(title=f"Session {self.session_id} • {escape(self.wallet)}", header_style="title", show_lines=True)
        table.add_column("Field")
        table.add_column("Value", justify="right")
        table.add_row("Total points", str(st.total_points))
        table.add_row("Daily points", str(self.daily_points))
        table.add_row("Interactions", str(st.total_interactions))
        table.add_row("Successful", f"[ok]{st.successful_interactions}[/ok]")
        table.add_row("Failed", f"[err]{st.failed_interactions}[/err]")
        table.add_row("Last interaction", fmt_time(st.last_interaction_time))
        for name, count in st.agent_interactions.items():
            table.add_row(f"[agent]{escape(name)}[/agent]", str(count))
        return table


class WalletAutomation:
    """One wallet's interaction loop.

    Every wait goes through ``waiter`` (``stop_event.wait`` by default), so
    setting the stop event ends the loop at its next suspension point.
    """

    def __init__(self, wallet: str, session_id: int, pool: ProxyPool, catalog: TargetCatalog,
                 config: Optional[AutomationConfig] = None,
                 providers: Optional[List[PromptProvider]] = None,
                 http: Optional[requests.Session] = None,
                 stop_event: Optional[threading.Event] = None,
                 clock: Callable[[], dt.datetime] = now_tz,
                 waiter: Optional[Callable[[float], bool]] = None,
                 rng: Optional[random.Random] = None,
                 out: Optional[Console] = None):
        self.config = config or AutomationConfig()
        self.pool = pool
        self.catalog = catalog
        self.clock = clock
        self.random = rng or random.Random()
        self.stop_event = stop_event or threading.Event()
        self.waiter = waiter or self.stop_event.wait
        self.http = http or create_http_session()
        self.log = SessionLog(session_id, wallet, out)
        self.session = WalletSession(wallet, session_id, clock(), self.config.reset_interval, catalog.names())
        self.client = ConversationClient(self.http, pool, self.config, self.log)
        self.reporter = UsageReporter(self.http, pool, self.config, self.log, wallet)
        if providers is None:
            scanner = TransactionScanner(self.http, pool, self.config, self.log)
            providers = [TransactionPromptProvider(scanner, TX_ANALYZER_URL)]
        self.providers = providers
        self.iteration = 0

    @property
    def stopped(self) -> bool:
        return self.stop_event.is_set()

    def stop(self) -> None:
        self.stop_event.set()

    def pause(self, seconds: float) -> bool:
        if seconds <= 0:
            return self.stopped
        return self.waiter(seconds) or self.stopped

    def reset_if_due(self) -> None:
        if self.session.check_reset(self.clock()):
            self.log.ok("✨", "New 24-hour points window started")

    def wait_for_reset(self) -> bool:
        while self.session.daily_points >= self.config.max_daily_points:
            remaining = (self.session.next_reset_time - self.clock()).total_seconds()
            if remaining > 0:
                self.log.warn("🎯", f"Daily points cap reached ({self.config.max_daily_points})")
                self.log.warn("⏳", f"Next reset: {fmt_time(self.session.next_reset_time)} (in {human_tdelta(int(remaining))})")
                if self.pause(remaining):
                    return False
            self.reset_if_due()
        return True

    def step(self) -> Outcome:
        if self.stopped:
            return Outcome.STOPPED
        self.reset_if_due()
        if not self.wait_for_reset():
            return Outcome.STOPPED
        cfg = self.config
        for provider in self.providers:
            provider.refresh(self.catalog)
        if self.stopped:
            return Outcome.STOPPED

        keys = self.catalog.keys()
        if not keys:
            self.log.error("⚠️", "No endpoints configured. Skipping.")
            self.pause(cfg.skip_backoff)
            return Outcome.SKIPPED
        target = self.catalog.get(self.random.choice(keys))
        if target is None or not target.questions:
            name = target.name if target else "?"
            self.log.error("⚠️", f'Endpoint "{name}" has no questions. Skipping.')
            self.pause(cfg.skip_backoff)
            return Outcome.SKIPPED
        prompt = self.random.choice(target.questions)

        self.iteration += 1
        self.log.log("🔄", f"Interaction #{self.iteration}", "title")
        self.log.info("📈", f"Progress: {self.session.daily_points + cfg.points_per_interaction}/{cfg.max_daily_points} points")
        self.log.info("⏳", f"Next reset: {fmt_time(self.session.next_reset_time)}")
        self.log.info("🤖", f"AI system: {target.name}")
        self.log.info("🔑", f"Agent ID: {target.agent_id}")
        self.log.info("❓", f"Query: {prompt}")

        shown = []

        def show(text: str) -> None:
            if not shown:
                self.log.stream_start("🤖 AI answer: ")
                shown.append(True)
            self.log.stream_delta(text)

        response = self.client.query(target, prompt, on_delta=show)
        if shown:
            self.log.stream_end()
        if self.stopped:
            return Outcome.STOPPED

        self.log.log("📝", "Reporting interaction...")
        success = self.reporter.report(target, prompt, response)
        if success:
            self.log.ok("✅", "Interaction recorded")
        else:
            self.log.error("⚠️", "Interaction was not recorded")
        self.session.record(target.name, success, cfg.points_per_interaction, self.clock())
        self.log.out.print(self.session.stats_table())

        delay = self.random.uniform(cfg.min_delay, cfg.max_delay)
        self.log.warn("⏳", f"Waiting {delay:.1f} seconds...")
        self.pause(delay)
        return Outcome.SUCCESS if success else Outcome.FAILED

    def run(self) -> Statistics:
        cfg = self.config
        self.log.ok("🚀", "Starting Kite AI interaction automation")
        self.log.info("💼", f"Wallet: {self.session.wallet}")
        self.log.info("🎯", f"Daily target: {cfg.max_daily_points} points ({cfg.max_daily_interactions} interactions)")
        self.log.info("⏰", f"Next reset: {fmt_time(self.session.next_reset_time)}")
        if len(self.pool):
            self.log.info("🌐", f"{len(self.pool)} proxies loaded")
        else:
            self.log.warn("🌐", "Running on a direct connection")
        try:
            while not self.stopped:
                if self.step() is Outcome.STOPPED:
                    break
            self.log.warn("🛑", "Session stopped")
        except KeyboardInterrupt:
            self.stop()
            self.log.warn("🛑", "Stopped by user")
        except Exception as e:
            self.log.error("❌", f"Session aborted: {e}")
        return self.session.statistics
