"""Investigation store"""

from .investigation_store import InvestigationStore

__all__ = ["InvestigationStore"]
