# =============================================================================
# Unit Tests: Investigation store (active slot, history, persistence)
# =============================================================================

from __future__ import annotations

import asyncio
import json

import pytest

from fm_investigation_lib.models import Investigation, InvestigationStatus
from fm_investigation_lib.persistence import (
    InMemoryKeyValueStore,
    encode_history,
    encode_investigation,
)
from fm_investigation_lib.store import InvestigationStore


def _run(coro):
    """Helper to run async functions in sync tests."""
    return asyncio.run(coro)


def _inv(name: str = "Investigation", **kwargs) -> Investigation:
    return Investigation(name=name, agents=["k8s-agent"], **kwargs)


def _retired(name: str) -> Investigation:
    inv = _inv(name)
    inv.status = InvestigationStatus.ARCHIVED
    return inv


class TestActiveSlot:
    def test_set_active(self, store):
        inv = _inv()
        store.set_active(inv)
        assert store.has_active
        assert store.active == inv

    def test_set_active_overwrites_without_archiving(self, store):
        first, second = _inv("first"), _inv("second")
        store.set_active(first)
        store.set_active(second)
        assert store.active.id == second.id
        assert store.history == []

    def test_clear_active(self, store):
        store.set_active(_inv(current_step=3))
        store.clear_active()
        assert store.active is None
        assert not store.has_active

    def test_snapshots_are_copies(self, store):
        store.set_active(_inv())
        snapshot = store.active
        snapshot.chat_messages.append({"id": "x"})
        snapshot.current_step = 9
        assert store.active.chat_messages == []
        assert store.active.current_step == 0

    def test_set_active_copies_input(self, store):
        inv = _inv()
        store.set_active(inv)
        inv.findings.append("mutated outside")
        assert store.active.findings == []

    def test_update_progress(self, store):
        store.set_active(_inv())
        assert store.update_progress(2)
        assert store.active.current_step == 2
        assert not store.update_progress(2)

    def test_update_without_active_is_noop(self, store):
        assert not store.update_progress(1)
        assert not store.update_active(lambda inv: True)


class TestRetire:
    def test_retire_moves_active_to_history(self, store):
        inv = _inv()
        store.set_active(inv)
        retired = store.retire_active(InvestigationStatus.ARCHIVED)

        assert store.active is None
        assert retired.id == inv.id
        assert retired.status == InvestigationStatus.ARCHIVED
        assert retired.end_time is not None
        assert [h.id for h in store.history] == [inv.id]

    def test_retire_appends_findings(self, store):
        store.set_active(_inv(findings=["existing"]))
        retired = store.retire_active(
            InvestigationStatus.COMPLETED,
            findings=["root cause: OOM"],
            recommendations=["raise memory limit"],
        )
        assert retired.findings == ["existing", "root cause: OOM"]
        assert retired.recommendations == ["raise memory limit"]

    def test_retire_without_active(self, store):
        assert store.retire_active(InvestigationStatus.CANCELLED) is None
        assert store.history == []

    def test_retire_rejects_active_status(self, store):
        store.set_active(_inv())
        with pytest.raises(ValueError):
            store.retire_active(InvestigationStatus.ACTIVE)
        assert store.has_active

    def test_most_recently_retired_first(self, store):
        for name in ("one", "two", "three"):
            store.set_active(_inv(name))
            store.retire_active(InvestigationStatus.ARCHIVED)
        assert [h.name for h in store.history] == ["three", "two", "one"]


class TestHistory:
    def test_append_and_remove(self, store):
        a, b, c = _retired("a"), _retired("b"), _retired("c")
        for inv in (a, b, c):
            store.append_history(inv)
        assert store.remove_from_history(b.id)
        assert {h.id for h in store.history} == {a.id, c.id}

    def test_remove_unknown_id_is_noop(self, store, kv_store):
        store.append_history(_retired("a"))
        _run(store.flush())
        writes_before = len(kv_store.calls)

        assert not store.remove_from_history("inv-0")
        _run(store.flush())
        assert len(store.history) == 1
        assert len(kv_store.calls) == writes_before

    def test_interleaved_appends_and_removals(self, store):
        items = [_retired(f"inv{i}") for i in range(6)]
        store.append_history(items[0])
        store.append_history(items[1])
        store.remove_from_history(items[0].id)
        store.append_history(items[2])
        store.append_history(items[3])
        store.remove_from_history(items[3].id)
        store.remove_from_history("missing")
        store.append_history(items[4])
        store.append_history(items[5])
        store.remove_from_history(items[1].id)

        expected = {items[2].id, items[4].id, items[5].id}
        assert {h.id for h in store.history} == expected

    def test_get_from_history(self, store):
        inv = _retired("a")
        store.append_history(inv)
        assert store.get_from_history(inv.id).name == "a"
        assert store.get_from_history("missing") is None


class TestPersistence:
    def test_flush_writes_both_keys(self, store, kv_store):
        inv = _inv()
        store.set_active(inv)
        store.append_history(_retired("old"))
        _run(store.flush())

        active = json.loads(kv_store.data[store.active_key])
        history = json.loads(kv_store.data[store.history_key])
        assert active["id"] == inv.id
        assert [h["name"] for h in history] == ["old"]

    def test_clear_deletes_active_key(self, store, kv_store):
        store.set_active(_inv())
        _run(store.flush())
        store.clear_active()
        _run(store.flush())
        assert store.active_key not in kv_store.data
        assert kv_store.count("delete", store.active_key) == 1

    def test_keys_use_prefix(self, kv_store):
        store = InvestigationStore(kv_store, key_prefix="test-")
        assert store.active_key == "test-active-investigation"
        assert store.history_key == "test-investigation-history"

    def test_default_keys(self, kv_store):
        store = InvestigationStore(kv_store)
        assert store.active_key == "skanyxx-active-investigation"
        assert store.history_key == "skanyxx-investigation-history"

    def test_burst_of_mutations_is_one_write(self, kv_store):
        async def scenario():
            store = InvestigationStore(kv_store, debounce_seconds=0.05)
            store.set_active(_inv())
            for step in range(1, 10):
                store.update_progress(step)
            await asyncio.sleep(0.25)
            return store

        store = _run(scenario())
        assert kv_store.count("set", store.active_key) == 1
        assert json.loads(kv_store.data[store.active_key])["currentStep"] == 9

    def test_mutation_does_not_write_synchronously(self, kv_store):
        async def scenario():
            store = InvestigationStore(kv_store, debounce_seconds=0.05)
            store.set_active(_inv())
            written_immediately = store.active_key in kv_store.data
            await asyncio.sleep(0.25)
            return written_immediately, store.active_key in kv_store.data

        immediately, eventually = _run(scenario())
        assert not immediately
        assert eventually

    def test_reload_restores_state(self, store, kv_store):
        inv = _inv()
        store.set_active(inv)
        store.update_progress(4)
        store.append_history(_retired("old"))
        _run(store.flush())

        reloaded = InvestigationStore(kv_store)
        _run(reloaded.load())
        assert reloaded.active == store.active
        assert reloaded.history == store.history

    def test_load_from_empty_storage(self, store):
        _run(store.load())
        assert store.active is None
        assert store.history == []

    def test_load_corrupt_active_fails_open(self, kv_store):
        history = [_retired("kept")]
        kv_store.data["skanyxx-active-investigation"] = "{not json"
        kv_store.data["skanyxx-investigation-history"] = encode_history(history)

        store = InvestigationStore(kv_store)
        _run(store.load())
        assert store.active is None
        assert [h.name for h in store.history] == ["kept"]

    def test_load_corrupt_history_fails_open(self, kv_store):
        inv = _inv()
        kv_store.data["skanyxx-active-investigation"] = encode_investigation(inv)
        kv_store.data["skanyxx-investigation-history"] = '{"not": "a list"}'

        store = InvestigationStore(kv_store)
        _run(store.load())
        assert store.active == inv
        assert store.history == []

    def test_close_flushes(self, store, kv_store):
        store.set_active(_inv())
        _run(store.close())
        assert store.active_key in kv_store.data

    def test_load_drops_history_entries_still_active(self, kv_store):
        kv_store.data["skanyxx-investigation-history"] = encode_history(
            [_inv("stale"), _retired("kept")]
        )

        store = InvestigationStore(kv_store)
        _run(store.load())
        assert [h.name for h in store.history] == ["kept"]
        assert all(h.status.is_retired for h in store.history)

    def test_load_discards_retired_active_payload(self, kv_store):
        kv_store.data["skanyxx-active-investigation"] = encode_investigation(_retired("done"))

        store = InvestigationStore(kv_store)
        _run(store.load())
        assert store.active is None

    def test_close_waits_for_write_in_progress(self):
        log = []

        class SlowKeyValueStore(InMemoryKeyValueStore):
            async def set(self, key, value):
                await asyncio.sleep(0.05)
                log.append(("set", key))
                await super().set(key, value)

            async def close(self):
                log.append(("close",))

        kv = SlowKeyValueStore()
        store = InvestigationStore(kv, debounce_seconds=0.01)

        async def scenario():
            store.set_active(_inv())
            # let the debounce timer fire so the write is mid-flight
            await asyncio.sleep(0.02)
            await store.close()

        _run(scenario())
        assert log == [("set", "skanyxx-active-investigation"), ("close",)]
        assert "skanyxx-active-investigation" in kv.data
