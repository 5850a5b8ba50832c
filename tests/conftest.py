# =============================================================================
# Shared fixtures for the investigation library tests
# =============================================================================

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import pytest

from fm_investigation_lib.models import Agent, InvestigationTemplate, UrgencyLevel
from fm_investigation_lib.persistence import InMemoryKeyValueStore
from fm_investigation_lib.store import InvestigationStore


class RecordingKeyValueStore(InMemoryKeyValueStore):
    """In-memory store that records every write and delete."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        super().__init__(initial)
        self.calls: List[Tuple[str, str]] = []

    async def set(self, key: str, value: str) -> None:
        self.calls.append(("set", key))
        await super().set(key, value)

    async def delete(self, key: str) -> None:
        self.calls.append(("delete", key))
        await super().delete(key)

    def count(self, op: str, key: str) -> int:
        return sum(1 for call in self.calls if call == (op, key))


@pytest.fixture
def kv_store() -> RecordingKeyValueStore:
    return RecordingKeyValueStore()


@pytest.fixture
def store(kv_store) -> InvestigationStore:
    return InvestigationStore(kv_store, debounce_seconds=0.01)


@pytest.fixture
def directory() -> List[Agent]:
    return [
        Agent(name="k8s-agent", ready=True),
        Agent(name="observability-agent-prod", ready=True),
        Agent(name="helm-agent", ready=False),
    ]


@pytest.fixture
def template() -> InvestigationTemplate:
    return InvestigationTemplate(
        id="prod-incident",
        name="Production Incident",
        description="Immediate response for critical production issues",
        required_agents=["k8s-agent", "observability-agent", "promql-agent"],
        urgency=UrgencyLevel.P0,
    )
