"""Result values returned across the manager boundary."""

from dataclasses import dataclass, field
from typing import List, Optional

from fm_investigation_lib.models.exceptions import ExportFailure, InvestigationError
from fm_investigation_lib.models.investigation import Agent, Investigation, InvestigationTemplate


@dataclass
class StartResult:
    """Outcome of starting an investigation.

    On failure ``investigation`` is None and the previous state is untouched.
    ``agent`` is the agent the chat was started with, if any.
    """

    success: bool
    investigation: Optional[Investigation] = None
    agent: Optional[Agent] = None
    error: Optional[InvestigationError] = None

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None


@dataclass
class ExportResult:
    """Outcome of exporting an investigation to a document."""

    success: bool
    investigation_id: str
    location: Optional[str] = None
    error: Optional[ExportFailure] = None


@dataclass
class TemplateAvailability:
    """A catalog template annotated against the current agent directory."""

    template: InvestigationTemplate
    available_agents: List[str] = field(default_factory=list)

    @property
    def is_available(self) -> bool:
        return len(self.available_agents) > 0
