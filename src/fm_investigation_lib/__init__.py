"""FaultMaven Investigation Library

Lifecycle management for guided troubleshooting investigations: template
catalog, agent matching, the single active investigation, chat integration,
persistence and export.
"""

__version__ = "0.1.0"

# Export models first (no dependencies)
from fm_investigation_lib.models import (
    Agent, AgentSessionSnapshot, ChatMessage, CustomInvestigationConfig,
    Investigation, InvestigationStatus, InvestigationTemplate, UrgencyLevel,
    InvestigationError, NoAgentsAvailable, NoRequiredAgentsAvailable,
    TemplateNotFound, ExportFailure, PersistenceDecodeFailure,
    StartResult, ExportResult, TemplateAvailability,
)

from fm_investigation_lib.catalog import get_template, get_templates
from fm_investigation_lib.config import InvestigationSettings
from fm_investigation_lib.manager import InvestigationManager
from fm_investigation_lib.store import InvestigationStore


# Lazy import for the factory; only composition roots need it
def __getattr__(name):
    """Lazy import for create_manager."""
    if name == "create_manager":
        from fm_investigation_lib.factory import create_manager
        return create_manager
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    # Models
    "Agent", "AgentSessionSnapshot", "ChatMessage", "CustomInvestigationConfig",
    "Investigation", "InvestigationStatus", "InvestigationTemplate", "UrgencyLevel",
    # Errors
    "InvestigationError", "NoAgentsAvailable", "NoRequiredAgentsAvailable",
    "TemplateNotFound", "ExportFailure", "PersistenceDecodeFailure",
    # Results
    "StartResult", "ExportResult", "TemplateAvailability",
    # Catalog
    "get_template", "get_templates",
    # Lifecycle
    "InvestigationManager", "InvestigationStore", "InvestigationSettings",
    # Factory (lazy loaded)
    "create_manager",
]
