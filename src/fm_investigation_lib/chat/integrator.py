"""Fold externally-driven chat data into the active investigation.

Two independent merge passes, both idempotent and safe to re-run with
overlapping input:

- Message merge appends messages whose id has not been seen, in incoming
  order. Re-delivered ids are skipped.
- Session merge replaces, per agent, the stored session messages with the
  latest snapshot. Only agents that belong to the investigation are taken.

Both passes are no-ops when no investigation is active.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from fm_investigation_lib.models import AgentSessionSnapshot, ChatMessage, Investigation
from fm_investigation_lib.models.investigation import utc_now
from fm_investigation_lib.store import InvestigationStore

logger = logging.getLogger(__name__)

MessageInput = Union[ChatMessage, Dict[str, Any]]
SessionInput = Union[AgentSessionSnapshot, Dict[str, Any]]


def _normalize_message(message: MessageInput) -> Optional[Dict[str, Any]]:
    if isinstance(message, ChatMessage):
        return message.model_dump()
    try:
        return ChatMessage.model_validate(message).model_dump()
    except ValidationError as e:
        logger.warning(f"Skipping chat message without a valid id: {e.errors()[0]['msg']}")
        return None


def _normalize_snapshot(agent_name: str, snapshot: SessionInput) -> Optional[AgentSessionSnapshot]:
    if isinstance(snapshot, AgentSessionSnapshot):
        return snapshot
    try:
        return AgentSessionSnapshot.model_validate(snapshot)
    except ValidationError as e:
        logger.warning(f"Skipping malformed session for agent '{agent_name}': {e}")
        return None


class ChatIntegrator:
    """Merges chat message and agent session feeds into the store's active investigation."""

    def __init__(self, store: InvestigationStore):
        self.store = store

    def merge_messages(self, messages: Iterable[MessageInput]) -> int:
        """Append unseen messages. Returns the number appended."""
        if not self.store.has_active:
            return 0

        incoming = [m for m in (_normalize_message(msg) for msg in messages) if m is not None]
        if not incoming:
            return 0

        appended: List[Dict[str, Any]] = []

        def _append_new(inv: Investigation) -> bool:
            seen = {msg.get("id") for msg in inv.chat_messages}
            for msg in incoming:
                if msg["id"] in seen:
                    continue
                seen.add(msg["id"])
                appended.append(msg)
            if not appended:
                return False
            inv.chat_messages.extend(appended)
            inv.last_updated = utc_now()
            return True

        if self.store.update_active(_append_new):
            logger.debug(f"Updated investigation with {len(appended)} new chat messages")
        return len(appended)

    def merge_sessions(self, sessions: Mapping[str, SessionInput]) -> List[str]:
        """Replace session messages for investigation agents present in ``sessions``.

        Returns the agent names whose sessions were integrated in this pass,
        whether or not their content changed.
        """
        if not self.store.has_active or not sessions:
            return []

        integrated: List[str] = []

        def _replace_sessions(inv: Investigation) -> bool:
            changed = False
            for agent_name in inv.agents:
                if agent_name not in sessions or agent_name in integrated:
                    continue
                snapshot = _normalize_snapshot(agent_name, sessions[agent_name])
                if snapshot is None or snapshot.messages is None:
                    continue
                integrated.append(agent_name)
                messages = list(snapshot.messages)
                if inv.agent_sessions.get(agent_name) != messages:
                    inv.agent_sessions[agent_name] = messages
                    changed = True
            if changed:
                inv.last_updated = utc_now()
            return changed

        if self.store.update_active(_replace_sessions):
            logger.debug(f"Integrated chat sessions for {len(integrated)} agents")
        return integrated
