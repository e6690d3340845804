"""Unit tests for the session supervisor."""

import threading
import time

from kite_agent.catalog import TargetCatalog
from kite_agent.proxy import ProxyPool
from kite_agent.supervisor import SessionSupervisor


class FakeSession:
    def __init__(self, session_id):
        self.session_id = session_id


class FakeAutomation:
    instances = []

    def __init__(self, wallet, session_id, pool, catalog, config=None, stop_event=None):
        self.wallet = wallet
        self.session = FakeSession(session_id)
        self.pool = pool
        self.catalog = catalog
        self.stop_event = stop_event
        self.finished = False
        FakeAutomation.instances.append(self)

    def run(self):
        if self.wallet == "0xBAD":
            raise RuntimeError("session crashed")
        self.stop_event.wait(5)
        self.finished = True


def make_supervisor(wallets):
    FakeAutomation.instances = []
    return SessionSupervisor(wallets, ProxyPool(), TargetCatalog(), factory=FakeAutomation)


def test_one_session_per_wallet_with_ordinals():
    sup = make_supervisor(["0x1", "0x2", "0x3"])
    assert [s.session.session_id for s in sup.sessions] == [1, 2, 3]
    assert [s.wallet for s in sup.sessions] == ["0x1", "0x2", "0x3"]


def test_sessions_share_pool_catalog_and_stop_event():
    sup = make_supervisor(["0x1", "0x2"])
    a, b = sup.sessions
    assert a.pool is b.pool is sup.pool
    assert a.catalog is b.catalog is sup.catalog
    assert a.stop_event is b.stop_event is sup.stop_event


def test_stop_releases_every_session():
    sup = make_supervisor(["0x1", "0x2", "0x3"])
    threading.Timer(0.1, sup.stop).start()
    sup.run()
    assert all(s.finished for s in sup.sessions)


def test_crashing_session_does_not_stop_others():
    sup = make_supervisor(["0xBAD", "0x2"])
    threading.Timer(0.1, sup.stop).start()
    sup.run()
    assert sup.sessions[1].finished
    assert not sup.sessions[0].finished


class BlockingAutomation(FakeAutomation):
    def run(self):
        # stands in for a request stuck until its read timeout
        time.sleep(3)
        self.finished = True


def test_interrupt_returns_within_grace_period(monkeypatch):
    sup = SessionSupervisor(["0x1"], ProxyPool(), TargetCatalog(), factory=BlockingAutomation, shutdown_grace=0.3)

    def interrupted_join(poll=0.5):
        time.sleep(0.2)
        raise KeyboardInterrupt

    monkeypatch.setattr(sup, "join", interrupted_join)
    started = time.monotonic()
    sup.run()
    assert time.monotonic() - started < 1.5
    assert sup.stop_event.is_set()
    assert not sup.sessions[0].finished
