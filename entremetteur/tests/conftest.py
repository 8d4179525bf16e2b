"""
Test fixtures and configuration.
"""

from typing import List, Tuple

import pytest

from shared.reporter import SystemReporter

from entremetteur.application.use_cases import SessionCoordinator
from entremetteur.config.settings import Settings
from entremetteur.domain.events import OutboundEvent
from entremetteur.infrastructure.key_exchange import KeyExchangeRelay
from entremetteur.infrastructure.matchmaking import RoomRegistry, WaitingQueue
from entremetteur.infrastructure.rate_limiting import FixedWindowRateLimiter


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingEmitter:
    """EventEmitter that keeps every emitted event in order."""

    def __init__(self):
        self.emitted: List[Tuple[str, OutboundEvent]] = []

    def emit(self, connection_id: str, event: OutboundEvent) -> None:
        self.emitted.append((connection_id, event))

    def events_for(self, connection_id: str) -> List[OutboundEvent]:
        return [event for target, event in self.emitted if target == connection_id]

    def names_for(self, connection_id: str) -> List[str]:
        return [event.name for event in self.events_for(connection_id)]

    def clear(self) -> None:
        self.emitted.clear()


@pytest.fixture
def reporter() -> SystemReporter:
    """Quiet reporter (critical messages only)."""
    return SystemReporter(name="entremetteur-test", verbose=0, retention=False)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def emitter() -> RecordingEmitter:
    return RecordingEmitter()


@pytest.fixture
def waiting_queue(reporter) -> WaitingQueue:
    return WaitingQueue(reporter=reporter)


@pytest.fixture
def room_registry(waiting_queue, reporter) -> RoomRegistry:
    return RoomRegistry(waiting_queue, reporter=reporter)


@pytest.fixture
def coordinator(emitter, waiting_queue, room_registry, clock, reporter):
    """Coordinator with L=10, W=1s on the fake clock."""
    return SessionCoordinator(
        emitter=emitter,
        waiting_queue=waiting_queue,
        room_registry=room_registry,
        rate_limiter=FixedWindowRateLimiter(limit=10, window_seconds=1.0, clock=clock),
        key_relay=KeyExchangeRelay(room_registry, reporter=reporter),
        reporter=reporter,
    )


@pytest.fixture
def test_settings() -> Settings:
    """Settings for in-process app tests."""
    return Settings(
        ENV="test",
        DEBUG=True,
        port=7300,
        http_rate_limit_enabled=False,
        shutdown_grace_period=0,
        receive_timeout=1.0,
        log_verbose=0,
    )


@pytest.fixture
def connected(coordinator):
    """Factory registering Idle connections on the coordinator."""

    def _connect(*connection_ids: str):
        return [coordinator.connect(cid) for cid in connection_ids]

    return _connect
