"""
Data models for investigation lifecycle management.

Pydantic models for investigations, templates and the externally supplied
agent/chat shapes, plus the exception hierarchy and result values.
"""

from fm_investigation_lib.models.investigation import (
    Agent,
    AgentSessionSnapshot,
    ChatMessage,
    CustomInvestigationConfig,
    Investigation,
    InvestigationStatus,
    InvestigationTemplate,
    UrgencyLevel,
    generate_investigation_id,
)
from fm_investigation_lib.models.exceptions import (
    ExportFailure,
    InvestigationError,
    NoAgentsAvailable,
    NoRequiredAgentsAvailable,
    PersistenceDecodeFailure,
    TemplateNotFound,
)
from fm_investigation_lib.models.results import (
    ExportResult,
    StartResult,
    TemplateAvailability,
)

__all__ = [
    # Investigation
    "Investigation", "InvestigationStatus", "generate_investigation_id",
    # Templates
    "InvestigationTemplate", "UrgencyLevel", "CustomInvestigationConfig",
    # External shapes
    "Agent", "ChatMessage", "AgentSessionSnapshot",
    # Errors
    "InvestigationError", "NoAgentsAvailable", "NoRequiredAgentsAvailable",
    "TemplateNotFound", "ExportFailure", "PersistenceDecodeFailure",
    # Results
    "StartResult", "ExportResult", "TemplateAvailability",
]
