"""Investigation data models.

Key Models:
- Investigation: the single mutable entity tracked by the store
- InvestigationStatus: ACTIVE while in the active slot, retired otherwise
- InvestigationTemplate: immutable blueprint naming required agents
- Agent / ChatMessage / AgentSessionSnapshot: externally supplied shapes,
  only the identifying fields are interpreted

Persisted documents use camelCase aliases (startTime, chatMessages, ...) so
that stored payloads keep the shape the dashboard has always written.
Population by field name is allowed everywhere.
"""

import time
from datetime import datetime, timezone, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


# ============================================================
# Identifiers
# ============================================================

_last_id_millis = 0


def generate_investigation_id() -> str:
    """Generate an ``inv-<epoch-millis>`` id, strictly increasing per process.

    Two ids requested within the same millisecond are kept distinct by
    bumping the second one past the previous value.
    """
    global _last_id_millis

    millis = int(time.time() * 1000)
    if millis <= _last_id_millis:
        millis = _last_id_millis + 1
    _last_id_millis = millis
    return f"inv-{millis}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# Enums
# ============================================================

class InvestigationStatus(str, Enum):
    """
    Investigation lifecycle status.

    Lifecycle Flow:
      ACTIVE → ARCHIVED  (archive and clear)
             → COMPLETED (finished with findings)
             → CANCELLED (abandoned by the user)

    Only ACTIVE investigations may occupy the active slot; everything in
    history carries one of the retired statuses.
    """

    ACTIVE = "active"
    ARCHIVED = "archived"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_active(self) -> bool:
        return self == InvestigationStatus.ACTIVE

    @property
    def is_retired(self) -> bool:
        """Check if investigation has left the active slot"""
        return self != InvestigationStatus.ACTIVE


class UrgencyLevel(str, Enum):
    """Template urgency tag, P0 being the most urgent."""

    P0 = "P0"  # Critical: production down, security incident
    P1 = "P1"  # High: degraded service
    P2 = "P2"  # Medium: failed rollout, contained impact
    P3 = "P3"  # Low: planning and analysis


# ============================================================
# External Shapes
# ============================================================

class Agent(BaseModel):
    """Agent descriptor from the agent directory.

    Only ``name`` is interpreted; every other field is preserved untouched.
    """

    name: str = Field(description="Agent name as published by the directory")

    class Config:
        extra = "allow"


class ChatMessage(BaseModel):
    """Chat message record. Identity is ``id``; the rest is opaque."""

    id: str = Field(description="Unique message identifier")

    class Config:
        extra = "allow"


class AgentSessionSnapshot(BaseModel):
    """Latest known chat session for one agent, as supplied by the chat subsystem."""

    session: Any = Field(default=None, description="Opaque session handle")
    messages: Optional[List[Any]] = Field(
        default=None,
        description="Full message sequence of the session (replaces any previous copy)"
    )
    last_active: Optional[datetime] = Field(default=None, description="Last activity timestamp")

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "allow"


class InvestigationTemplate(BaseModel):
    """Predefined investigation blueprint. Immutable once created."""

    id: str = Field(description="Stable template identifier (e.g. 'prod-incident')")
    name: str = Field(description="Display name")
    description: str = Field(default="", description="What this investigation is for")
    required_agents: List[str] = Field(
        description="Ordered agent roles; the first available one starts the chat"
    )
    urgency: UrgencyLevel = Field(default=UrgencyLevel.P2)

    @field_validator('required_agents')
    @classmethod
    def required_agents_not_empty(cls, v):
        if not v:
            raise ValueError("Template must name at least one required agent")
        return list(v)

    class Config:
        frozen = True
        alias_generator = to_camel
        populate_by_name = True


class CustomInvestigationConfig(BaseModel):
    """User-assembled investigation. Any name, even a blank one, and an empty
    agent list are permitted.
    """

    name: str
    description: str = ""
    agents: List[str] = Field(default_factory=list)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        return v.strip()


# ============================================================
# Investigation
# ============================================================

class Investigation(BaseModel):
    """
    A tracked troubleshooting session bound to a set of agents.

    ``findings`` and ``recommendations`` are uninterpreted, append-only
    records written by agent interaction. ``chat_messages`` never holds two
    records with the same id. ``agent_sessions`` is replaced per agent on
    every integration pass.
    """

    id: str = Field(default_factory=generate_investigation_id)
    name: str = Field(description="Display name")
    description: str = Field(default="")
    agents: List[str] = Field(
        default_factory=list,
        description="Required agent names, copied at creation and never mutated"
    )

    template_id: Optional[str] = Field(
        default=None,
        description="Source template, None for custom investigations"
    )
    urgency: Optional[UrgencyLevel] = Field(default=None)

    start_time: datetime = Field(default_factory=utc_now)
    end_time: Optional[datetime] = Field(
        default=None,
        description="Set only when the investigation leaves the active slot"
    )
    last_updated: Optional[datetime] = Field(
        default=None,
        description="Most recent chat or session merge"
    )

    status: InvestigationStatus = Field(default=InvestigationStatus.ACTIVE)
    current_step: int = Field(default=0, ge=0, description="Progress cursor")

    findings: List[Any] = Field(default_factory=list)
    recommendations: List[Any] = Field(default_factory=list)

    chat_messages: List[Dict[str, Any]] = Field(default_factory=list)
    agent_sessions: Dict[str, List[Any]] = Field(default_factory=dict)

    # ============================================================
    # Computed Properties
    # ============================================================
    @property
    def is_active(self) -> bool:
        return self.status.is_active

    @property
    def duration(self) -> Optional[timedelta]:
        """Time from start to retirement. None while still active."""
        if self.end_time:
            return self.end_time - self.start_time
        return None

    @property
    def message_ids(self) -> List[str]:
        return [msg.get("id") for msg in self.chat_messages]

    # ============================================================
    # Validation
    # ============================================================
    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        return v.strip()

    @model_validator(mode='after')
    def template_investigation_has_agents(self):
        if self.template_id and not self.agents:
            raise ValueError("Template-based investigation requires at least one agent")
        return self

    @model_validator(mode='after')
    def end_time_consistency(self):
        if self.status == InvestigationStatus.ACTIVE and self.end_time is not None:
            raise ValueError("Active investigation cannot have end_time")
        if self.end_time and self.end_time < self.start_time:
            raise ValueError(
                f"end_time ({self.end_time}) cannot be before start_time ({self.start_time})"
            )
        return self

    class Config:
        validate_assignment = True
        alias_generator = to_camel
        populate_by_name = True
