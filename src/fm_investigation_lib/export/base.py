"""Exporter port and the report payload shared by all exporters."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict

from fm_investigation_lib.models import Investigation


def build_report(investigation: Investigation) -> Dict[str, Any]:
    """Assemble the report document for an investigation.

    Duration is reported in whole minutes, measured to ``end_time`` for
    retired investigations and to now for the active one.
    """
    end = investigation.end_time or datetime.now(timezone.utc)
    minutes = round((end - investigation.start_time).total_seconds() / 60)
    used_agents = [name for name, messages in investigation.agent_sessions.items() if messages]

    return {
        "title": f"Investigation Report: {investigation.name}",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "investigation": investigation.model_dump(mode="json", by_alias=True),
        "summary": {
            "totalAgents": len(investigation.agents),
            "usedAgents": used_agents,
            "totalMessages": len(investigation.chat_messages),
            "duration": f"{minutes} minutes",
            "status": investigation.status.value,
        },
    }


def report_filename(investigation: Investigation, extension: str) -> str:
    return f"investigation-report-{investigation.id}.{extension}"


class BaseExporter(ABC):
    """Turns an investigation into a document somewhere outside the library.

    Implementations raise ExportFailure (or let any other exception escape;
    the manager wraps it) and must not modify the investigation.
    """

    @abstractmethod
    async def export(self, investigation: Investigation) -> str:
        """Export ``investigation`` and return where the document ended up."""

    async def close(self) -> None:
        pass
