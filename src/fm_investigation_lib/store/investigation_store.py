"""Investigation Store - sole owner of the active investigation and history.

State:
- active: the single investigation with status ACTIVE, or None
- history: retired investigations, most recently retired first

Every mutation schedules a debounced write of the affected slot. The active
slot and the history list live under separate keys and are debounced
independently. When the active slot is empty its key is deleted.

Readers get deep copies; only the store (and the integrator through
``update_active``) mutates the owned instances.
"""

import logging
from typing import Callable, Iterable, List, Optional

from fm_investigation_lib.models import (
    Investigation,
    InvestigationStatus,
    PersistenceDecodeFailure,
)
from fm_investigation_lib.models.investigation import utc_now
from fm_investigation_lib.persistence import (
    DebouncedWriter,
    KeyValueStore,
    decode_history,
    decode_investigation,
    encode_history,
    encode_investigation,
)

logger = logging.getLogger(__name__)


class InvestigationStore:
    """Owns the active investigation slot and the history sequence.

    Usage:
        store = InvestigationStore(InMemoryKeyValueStore())
        await store.load()
        store.set_active(investigation)
        store.retire_active(InvestigationStatus.ARCHIVED)
        await store.flush()
    """

    ACTIVE_KEY = "active-investigation"
    HISTORY_KEY = "investigation-history"

    def __init__(
        self,
        kv_store: KeyValueStore,
        key_prefix: str = "skanyxx-",
        debounce_seconds: float = 0.1,
    ):
        self.kv_store = kv_store
        self.key_prefix = key_prefix
        self._writer = DebouncedWriter(delay=debounce_seconds)

        self._active: Optional[Investigation] = None
        self._history: List[Investigation] = []

    @property
    def active_key(self) -> str:
        return f"{self.key_prefix}{self.ACTIVE_KEY}"

    @property
    def history_key(self) -> str:
        return f"{self.key_prefix}{self.HISTORY_KEY}"

    @property
    def writer(self) -> DebouncedWriter:
        return self._writer

    # ============================================================
    # Rehydration
    # ============================================================
    async def load(self) -> None:
        """Rehydrate both slots from storage.

        Missing keys mean empty state. Corrupt payloads are logged and
        treated as missing; this never raises.
        """
        self._active = None
        self._history = []

        raw_active = await self.kv_store.get(self.active_key)
        if raw_active:
            try:
                active = decode_investigation(raw_active, key=self.active_key)
            except PersistenceDecodeFailure as e:
                logger.warning(f"Discarding stored active investigation: {e.reason}")
            else:
                if active.status.is_active:
                    self._active = active
                else:
                    logger.warning(
                        f"Discarding stored active investigation {active.id}: "
                        f"status is {active.status.value}"
                    )

        raw_history = await self.kv_store.get(self.history_key)
        if raw_history:
            try:
                history = decode_history(raw_history, key=self.history_key)
            except PersistenceDecodeFailure as e:
                logger.warning(f"Discarding stored investigation history: {e.reason}")
            else:
                self._history = [inv for inv in history if inv.status.is_retired]
                dropped = len(history) - len(self._history)
                if dropped:
                    logger.warning(f"Dropped {dropped} stored history entries still marked active")

        logger.info(
            f"Investigation store loaded: active={self._active.id if self._active else None}, "
            f"history={len(self._history)}"
        )

    # ============================================================
    # Read-only snapshots
    # ============================================================
    @property
    def active(self) -> Optional[Investigation]:
        return self._active.model_copy(deep=True) if self._active else None

    @property
    def has_active(self) -> bool:
        return self._active is not None

    @property
    def history(self) -> List[Investigation]:
        return [inv.model_copy(deep=True) for inv in self._history]

    def get_from_history(self, investigation_id: str) -> Optional[Investigation]:
        for inv in self._history:
            if inv.id == investigation_id:
                return inv.model_copy(deep=True)
        return None

    # ============================================================
    # Active slot
    # ============================================================
    def set_active(self, investigation: Investigation) -> None:
        """Install ``investigation`` as the active one.

        Overwrite is always legal: a previous active investigation is
        discarded, not moved to history.
        """
        if self._active is not None:
            logger.info(f"Discarding active investigation {self._active.id} (replaced)")
        self._active = investigation.model_copy(deep=True)
        self._schedule_active()

    def clear_active(self) -> None:
        """Discard the active investigation, progress cursor included."""
        if self._active is not None:
            logger.info(f"Cleared active investigation {self._active.id}")
        self._active = None
        self._schedule_active()

    def update_active(self, mutate: Callable[[Investigation], bool]) -> bool:
        """Apply ``mutate`` to the owned active investigation in place.

        ``mutate`` returns True when it changed something; only then is a
        write scheduled. Returns False when there is no active investigation.
        """
        if self._active is None:
            return False
        changed = bool(mutate(self._active))
        if changed:
            self._schedule_active()
        return changed

    def update_progress(self, step: int) -> bool:
        def _set_step(inv: Investigation) -> bool:
            if inv.current_step == step:
                return False
            inv.current_step = step
            return True

        return self.update_active(_set_step)

    def retire_active(
        self,
        status: InvestigationStatus,
        findings: Optional[Iterable] = None,
        recommendations: Optional[Iterable] = None,
    ) -> Optional[Investigation]:
        """Move the active investigation to the front of history.

        Sets ``status`` and ``end_time``. Findings and recommendations are
        appended, never replaced. Returns a snapshot of the retired
        investigation, or None when nothing was active.
        """
        if not status.is_retired:
            raise ValueError(f"Cannot retire an investigation with status {status.value}")
        if self._active is None:
            return None

        investigation = self._active
        if findings:
            investigation.findings.extend(findings)
        if recommendations:
            investigation.recommendations.extend(recommendations)
        investigation.status = status
        investigation.end_time = utc_now()

        self._active = None
        self._history.insert(0, investigation)
        self._schedule_active()
        self._schedule_history()

        logger.info(f"Investigation {investigation.id} retired as {status.value}")
        return investigation.model_copy(deep=True)

    # ============================================================
    # History
    # ============================================================
    def append_history(self, investigation: Investigation) -> None:
        self._history.insert(0, investigation.model_copy(deep=True))
        self._schedule_history()

    def remove_from_history(self, investigation_id: str) -> bool:
        """Remove by id. Unknown ids are a silent no-op."""
        remaining = [inv for inv in self._history if inv.id != investigation_id]
        if len(remaining) == len(self._history):
            return False
        self._history = remaining
        self._schedule_history()
        logger.info(f"Deleted investigation {investigation_id} from history")
        return True

    # ============================================================
    # Persistence
    # ============================================================
    def _schedule_active(self) -> None:
        self._writer.schedule(self.active_key, self._write_active)

    def _schedule_history(self) -> None:
        self._writer.schedule(self.history_key, self._write_history)

    async def _write_active(self) -> None:
        if self._active is None:
            await self.kv_store.delete(self.active_key)
        else:
            await self.kv_store.set(self.active_key, encode_investigation(self._active))

    async def _write_history(self) -> None:
        await self.kv_store.set(self.history_key, encode_history(self._history))

    async def flush(self) -> None:
        """Write all pending slots immediately."""
        await self._writer.flush()

    async def close(self) -> None:
        await self.flush()
        await self.kv_store.close()
