"""Build a ready-to-use InvestigationManager from settings."""

import logging
from typing import Iterable, Optional

from fm_investigation_lib.config import ExportMode, InvestigationSettings, StorageBackend
from fm_investigation_lib.export import BaseExporter, HttpDocumentExporter, JsonReportExporter
from fm_investigation_lib.manager import AgentInput, ChatStarter, InvestigationManager
from fm_investigation_lib.persistence import InMemoryKeyValueStore, KeyValueStore, RedisKeyValueStore
from fm_investigation_lib.store import InvestigationStore

logger = logging.getLogger(__name__)


async def create_kv_store(settings: InvestigationSettings) -> KeyValueStore:
    if settings.storage_backend == StorageBackend.REDIS:
        return await RedisKeyValueStore.connect(settings.redis)
    return InMemoryKeyValueStore()


def create_exporter(settings: InvestigationSettings) -> BaseExporter:
    """Build the exporter selected by ``settings.export_mode``.

    Raises:
        ValueError: If http mode is selected without INVESTIGATION_EXPORT_URL
    """
    if settings.export_mode == ExportMode.HTTP:
        if not settings.export_url:
            raise ValueError("INVESTIGATION_EXPORT_URL is required for http export mode")
        return HttpDocumentExporter(
            base_url=settings.export_url,
            output_dir=settings.export_dir,
            timeout=settings.export_timeout,
        )
    return JsonReportExporter(output_dir=settings.export_dir)


async def create_manager(
    settings: Optional[InvestigationSettings] = None,
    agents: Iterable[AgentInput] = (),
    chat_starter: Optional[ChatStarter] = None,
    kv_store: Optional[KeyValueStore] = None,
) -> InvestigationManager:
    """Create a manager whose store has already been rehydrated.

    Args:
        settings: Library settings (defaults read from the environment)
        agents: Initial agent directory
        chat_starter: Callback invoked with the agent a new investigation starts with
        kv_store: Storage override; bypasses ``settings.storage_backend``
    """
    settings = settings or InvestigationSettings()
    kv_store = kv_store or await create_kv_store(settings)

    store = InvestigationStore(
        kv_store,
        key_prefix=settings.key_prefix,
        debounce_seconds=settings.debounce_seconds,
    )
    await store.load()

    manager = InvestigationManager(
        store,
        agents=agents,
        chat_starter=chat_starter,
        exporter=create_exporter(settings),
    )
    logger.info(f"InvestigationManager ready (backend={settings.storage_backend.value})")
    return manager
