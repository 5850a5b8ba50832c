"""Investigation Manager - orchestrates the investigation lifecycle.

Starts investigations from templates or custom configurations, routes chat
feeds to the integrator, retires investigations into history and hands
exports to the configured exporter.

Start-time failures (no agents, no matching required agents, unknown
template) are reported in the returned StartResult and in ``last_error``;
they never leave a partial investigation behind and never disturb the
current active one.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from fm_investigation_lib.catalog import get_template, get_templates
from fm_investigation_lib.chat import ChatIntegrator
from fm_investigation_lib.export import BaseExporter
from fm_investigation_lib.matching import available_required_agents, resolve
from fm_investigation_lib.models import (
    Agent,
    CustomInvestigationConfig,
    ExportFailure,
    ExportResult,
    Investigation,
    InvestigationError,
    InvestigationStatus,
    InvestigationTemplate,
    NoAgentsAvailable,
    NoRequiredAgentsAvailable,
    StartResult,
    TemplateAvailability,
)
from fm_investigation_lib.store import InvestigationStore

logger = logging.getLogger(__name__)

AgentInput = Union[Agent, Dict[str, Any]]
ChatStarter = Callable[[Agent], Any]


def _coerce_agents(agents: Iterable[AgentInput]) -> List[Agent]:
    return [a if isinstance(a, Agent) else Agent.model_validate(a) for a in agents]


class InvestigationManager:
    """Lifecycle orchestrator over a single InvestigationStore.

    Args:
        store: Store owning the active investigation and history
        agents: Current agent directory, in directory order
        chat_starter: Called with the agent to begin interaction with after a start
        exporter: Document exporter for ``export_to_document``
        templates: Template catalog override (defaults to the built-in catalog)

    Usage:
        manager = InvestigationManager(store, agents=directory, chat_starter=open_chat)
        result = manager.start_from_template(get_template("prod-incident"))
        if not result.success:
            show(result.error_message)
    """

    def __init__(
        self,
        store: InvestigationStore,
        agents: Iterable[AgentInput] = (),
        chat_starter: Optional[ChatStarter] = None,
        exporter: Optional[BaseExporter] = None,
        templates: Optional[Sequence[InvestigationTemplate]] = None,
    ):
        self.store = store
        self.integrator = ChatIntegrator(store)
        self.chat_starter = chat_starter
        self.exporter = exporter
        self._agents: List[Agent] = _coerce_agents(agents)
        self._templates = list(templates) if templates is not None else get_templates()

        self._last_error: Optional[InvestigationError] = None
        self._is_exporting = False

    # ============================================================
    # Observable state
    # ============================================================
    @property
    def agents(self) -> List[Agent]:
        return list(self._agents)

    @property
    def active_investigation(self) -> Optional[Investigation]:
        return self.store.active

    @property
    def history(self) -> List[Investigation]:
        return self.store.history

    @property
    def last_error(self) -> Optional[InvestigationError]:
        return self._last_error

    @property
    def is_exporting(self) -> bool:
        return self._is_exporting

    def update_agents(self, agents: Iterable[AgentInput]) -> None:
        """Replace the agent directory snapshot."""
        self._agents = _coerce_agents(agents)
        logger.debug(f"Agent directory updated: {len(self._agents)} agents")

    def available_templates(self) -> List[TemplateAvailability]:
        return [
            TemplateAvailability(
                template=template,
                available_agents=available_required_agents(template.required_agents, self._agents),
            )
            for template in self._templates
        ]

    # ============================================================
    # Starting
    # ============================================================
    def start_from_template(self, template: InvestigationTemplate) -> StartResult:
        """Validate, then install a new investigation built from ``template``.

        Any current active investigation is discarded, not archived.
        """
        self._last_error = None
        try:
            agents = self._agents
            if not agents:
                raise NoAgentsAvailable()

            available = available_required_agents(template.required_agents, agents)
            if not available:
                raise NoRequiredAgentsAvailable(template.name, template.required_agents)

            first_agent = (
                resolve(available[0], agents)
                or resolve(template.required_agents[0], agents)
                or agents[0]
            )
        except InvestigationError as e:
            self._last_error = e
            logger.warning(f"Investigation error: {e.message}")
            return StartResult(success=False, error=e)

        investigation = Investigation(
            name=template.name,
            description=template.description,
            agents=list(template.required_agents),
            template_id=template.id,
            urgency=template.urgency,
        )
        self.store.set_active(investigation)
        logger.info(
            f"Started investigation {investigation.id}: {template.name} "
            f"({len(available)}/{len(template.required_agents)} agents available)"
        )

        self._begin_chat(first_agent)
        return StartResult(success=True, investigation=investigation, agent=first_agent)

    def start_from_template_id(self, template_id: str) -> StartResult:
        try:
            template = next((t for t in self._templates if t.id == template_id), None)
            if template is None:
                template = get_template(template_id)
        except InvestigationError as e:
            self._last_error = e
            return StartResult(success=False, error=e)
        return self.start_from_template(template)

    def start_custom(self, config: Union[CustomInvestigationConfig, Dict[str, Any]]) -> StartResult:
        """Install a user-assembled investigation without availability checks.

        The chat begins with the first directory agent whose exact name is in
        ``config.agents``; when there is none, no chat is started.
        """
        if not isinstance(config, CustomInvestigationConfig):
            config = CustomInvestigationConfig.model_validate(config)

        self._last_error = None
        investigation = Investigation(
            name=config.name,
            description=config.description,
            agents=list(config.agents),
        )
        self.store.set_active(investigation)
        logger.info(f"Started custom investigation {investigation.id}: {config.name}")

        first_agent = next((a for a in self._agents if a.name in config.agents), None)
        if first_agent is not None:
            self._begin_chat(first_agent)
        return StartResult(success=True, investigation=investigation, agent=first_agent)

    def _begin_chat(self, agent: Agent) -> None:
        logger.info(f"Starting investigation with agent: {agent.name}")
        if self.chat_starter is not None:
            self.chat_starter(agent)

    # ============================================================
    # Progress and retirement
    # ============================================================
    def update_progress(self, step: int) -> bool:
        if step < 0:
            raise ValueError(f"Progress step must be >= 0, got {step}")
        return self.store.update_progress(step)

    def clear(self) -> None:
        """Discard the active investigation without keeping it in history."""
        self.store.clear_active()

    def archive_and_clear(self) -> Optional[Investigation]:
        return self.store.retire_active(InvestigationStatus.ARCHIVED)

    def complete(
        self,
        findings: Optional[Iterable[Any]] = None,
        recommendations: Optional[Iterable[Any]] = None,
    ) -> Optional[Investigation]:
        return self.store.retire_active(
            InvestigationStatus.COMPLETED,
            findings=findings,
            recommendations=recommendations,
        )

    def cancel(self) -> Optional[Investigation]:
        return self.store.retire_active(InvestigationStatus.CANCELLED)

    def delete_from_history(self, investigation_id: str) -> bool:
        return self.store.remove_from_history(investigation_id)

    # ============================================================
    # Chat feeds
    # ============================================================
    def ingest_chat_messages(self, messages: Iterable[Any]) -> int:
        return self.integrator.merge_messages(messages)

    def ingest_agent_sessions(self, sessions: Mapping[str, Any]) -> List[str]:
        return self.integrator.merge_sessions(sessions)

    # ============================================================
    # Export
    # ============================================================
    async def export_to_document(self, investigation: Optional[Investigation] = None) -> ExportResult:
        """Export ``investigation`` (the active one by default).

        Failures are captured in the result; investigation state is never
        modified by an export.
        """
        investigation = investigation or self.store.active
        if investigation is None:
            error = ExportFailure("No investigation to export")
            return ExportResult(success=False, investigation_id="", error=error)

        if self.exporter is None:
            error = ExportFailure("No exporter configured", investigation.id)
            return ExportResult(success=False, investigation_id=investigation.id, error=error)

        if self._is_exporting:
            error = ExportFailure("Export already in progress", investigation.id)
            return ExportResult(success=False, investigation_id=investigation.id, error=error)

        self._is_exporting = True
        try:
            location = await self.exporter.export(investigation.model_copy(deep=True))
        except ExportFailure as e:
            logger.error(f"Failed to export investigation {investigation.id}: {e.message}")
            return ExportResult(success=False, investigation_id=investigation.id, error=e)
        except Exception as e:
            logger.error(f"Failed to export investigation {investigation.id}: {e}")
            failure = ExportFailure(str(e), investigation.id)
            return ExportResult(success=False, investigation_id=investigation.id, error=failure)
        finally:
            self._is_exporting = False

        logger.info(f"Exported investigation {investigation.id}: {location}")
        return ExportResult(success=True, investigation_id=investigation.id, location=location)

    async def close(self) -> None:
        await self.store.close()
        if self.exporter is not None:
            await self.exporter.close()
