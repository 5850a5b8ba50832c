"""Write investigation reports as JSON files."""

import json
import logging
from pathlib import Path
from typing import Union

from fm_investigation_lib.export.base import BaseExporter, build_report, report_filename
from fm_investigation_lib.models import ExportFailure, Investigation

logger = logging.getLogger(__name__)


class JsonReportExporter(BaseExporter):
    """Writes ``investigation-report-<id>.json`` into ``output_dir``."""

    def __init__(self, output_dir: Union[str, Path] = "./reports"):
        self.output_dir = Path(output_dir)

    async def export(self, investigation: Investigation) -> str:
        path = self.output_dir / report_filename(investigation, "json")
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(build_report(investigation), indent=2), encoding="utf-8")
        except OSError as e:
            raise ExportFailure(f"Failed to write {path}: {e}", investigation.id) from e

        logger.info(f"Exported JSON report for {investigation.id} to {path}")
        return str(path)
