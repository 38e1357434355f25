import asyncio
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import pytest

from aqdash.shared.errors import TransportError
from aqdash.shared.models import Sample


class FakeClient:
    """Stand-in for ThingSpeakClient.

    `latest` results are served in order; an exception instance is raised
    instead of returned. Range results are keyed by (start, end). Setting
    a gate makes the corresponding call wait until the event is set.
    """

    def __init__(self) -> None:
        self.latest: List[Any] = []
        self.ranges: Dict[Tuple[datetime, datetime], Any] = {}
        self.latest_gate: Optional[asyncio.Event] = None
        self.range_gates: Dict[Tuple[datetime, datetime], asyncio.Event] = {}
        self.latest_calls = 0
        self.range_calls: List[Tuple[datetime, datetime]] = []
        self.started: List[Tuple[datetime, datetime]] = []

    async def get_latest(self) -> Optional[Sample]:
        self.latest_calls += 1
        if self.latest_gate is not None:
            await self.latest_gate.wait()
        result = self.latest.pop(0) if self.latest else None
        if isinstance(result, Exception):
            raise result
        return result

    async def get_range(self, start: datetime, end: datetime, limit: Optional[int] = None) -> List[Sample]:
        key = (start, end)
        self.range_calls.append(key)
        self.started.append(key)
        gate = self.range_gates.get(key)
        if gate is not None:
            await gate.wait()
        result = self.ranges.get(key, [])
        if isinstance(result, Exception):
            raise result
        return list(result)


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def transport_error() -> TransportError:
    return TransportError("HTTP error! status: 503")
