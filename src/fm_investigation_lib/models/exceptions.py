"""Exception hierarchy for investigation lifecycle management.

Start-time failures are caught at the manager boundary and reported as
values. Decode failures are caught by the store and never reach callers.
"""

from typing import List, Optional


class InvestigationError(Exception):
    """Base class for all investigation lifecycle errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NoAgentsAvailable(InvestigationError):
    """The agent directory was empty when an investigation was requested."""

    def __init__(self, message: str = "No agents available. Please check your connection."):
        super().__init__(message)


class NoRequiredAgentsAvailable(InvestigationError):
    """None of a template's required agents matched the agent directory."""

    def __init__(self, template_name: str, required_agents: List[str]):
        self.template_name = template_name
        self.required_agents = list(required_agents)
        super().__init__(
            f"No required agents available for {template_name}. "
            f"Required: {', '.join(self.required_agents)}"
        )


class TemplateNotFound(InvestigationError):
    """Lookup of an unknown template id."""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Unknown investigation template: {template_id}")


class ExportFailure(InvestigationError):
    """External exporter failed. Never mutates investigation state."""

    def __init__(self, message: str, investigation_id: Optional[str] = None):
        self.investigation_id = investigation_id
        super().__init__(message)


class PersistenceDecodeFailure(InvestigationError):
    """Stored payload could not be decoded; treated as absent by the store."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Failed to decode stored value for '{key}': {reason}")
