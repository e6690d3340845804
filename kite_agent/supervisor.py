from __future__ import annotations

import threading
import time
from typing import Callable, List, Optional, Sequence

from rich.markup import escape

from .catalog import TargetCatalog
from .config import AutomationConfig
from .console import console
from .proxy import ProxyPool
from .session import WalletAutomation


class SessionSupervisor:
    """Runs one WalletAutomation per wallet, each on its own thread."""

    def __init__(self, wallets: Sequence[str], pool: ProxyPool, catalog: TargetCatalog,
                 config: Optional[AutomationConfig] = None,
                 factory: Optional[Callable[..., WalletAutomation]] = None,
                 shutdown_grace: float = 2.0):
        self.pool = pool
        self.shutdown_grace = shutdown_grace
        self.catalog = catalog
        self.stop_event = threading.Event()
        make = factory or WalletAutomation
        self.sessions: List[WalletAutomation] = [
            make(wallet, idx, pool, catalog, config=config, stop_event=self.stop_event)
            for idx, wallet in enumerate(wallets, 1)
        ]
        self._threads: List[threading.Thread] = []

    def stop(self) -> None:
        self.stop_event.set()

    def _run_session(self, s: WalletAutomation) -> None:
        try:
            s.run()
        except Exception as e:
            console.print(f"[err]❌ Session {s.session.session_id} crashed: {escape(str(e))}[/err]")

    def start(self) -> None:
        for s in self.sessions:
            t = threading.Thread(target=self._run_session, args=(s,), name=f"session-{s.session.session_id}", daemon=True)
            self._threads.append(t)
            t.start()

    def join(self, poll: float = 0.5) -> None:
        # join with a timeout so Ctrl+C still reaches the main thread
        for t in self._threads:
            while t.is_alive():
                t.join(poll)

    def join_within(self, seconds: float) -> List[threading.Thread]:
        deadline = time.monotonic() + seconds
        for t in self._threads:
            t.join(max(0.0, deadline - time.monotonic()))
        return [t for t in self._threads if t.is_alive()]

    def run(self) -> None:
        self.start()
        try:
            self.join()
        except KeyboardInterrupt:
            console.print("\n[warn]🛑 Stopping all sessions...[/warn]")
            self.stop()
            # daemon threads still blocked in a request die with the process
            left = self.join_within(self.shutdown_grace)
            if left:
                console.print(f"[warn]{len(left)} session(s) still busy; leaving them behind.[/warn]")
