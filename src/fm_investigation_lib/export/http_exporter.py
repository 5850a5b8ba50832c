"""Export investigations through a remote document rendering service."""

import logging
from pathlib import Path
from typing import Optional, Union

import httpx

from fm_investigation_lib.export.base import BaseExporter, build_report, report_filename
from fm_investigation_lib.models import ExportFailure, Investigation
from fm_investigation_lib.utils import create_custom_retry

logger = logging.getLogger(__name__)

_render_retry = create_custom_retry(
    max_attempts=3,
    min_wait=0.5,
    max_wait=4.0,
    retry_on=(httpx.TransportError,),
)


class HttpDocumentExporter(BaseExporter):
    """Posts the report to a rendering service and saves the returned document.

    The service receives ``{"format": ..., "report": {...}}`` at
    ``POST {base_url}/api/v1/documents/render`` and answers with the rendered
    bytes. Transport errors are retried; HTTP error statuses are not.

    Usage:
        exporter = HttpDocumentExporter(base_url="http://fm-render-service:8000")
        location = await exporter.export(investigation)
    """

    def __init__(
        self,
        base_url: str,
        output_dir: Union[str, Path] = "./reports",
        document_format: str = "pdf",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize exporter.

        Args:
            base_url: Rendering service base URL
            output_dir: Where rendered documents are written
            document_format: Format requested from the service, also the file extension
            timeout: Request timeout in seconds (default: 30.0)
            transport: Optional httpx transport (mock transports in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.output_dir = Path(output_dir)
        self.document_format = document_format
        self.timeout = timeout
        self._transport = transport

        logger.info(f"Initialized {self.__class__.__name__} with base_url={base_url}")

    def _headers(self, correlation_id: Optional[str] = None) -> dict:
        headers = {"Content-Type": "application/json"}
        if correlation_id:
            headers["X-Correlation-ID"] = correlation_id
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    @_render_retry
    async def _render(self, investigation: Investigation) -> bytes:
        async with self._get_client() as client:
            response = await client.post(
                f"{self.base_url}/api/v1/documents/render",
                json={"format": self.document_format, "report": build_report(investigation)},
                headers=self._headers(correlation_id=investigation.id),
            )
            response.raise_for_status()
            return response.content

    async def export(self, investigation: Investigation) -> str:
        try:
            content = await self._render(investigation)
        except httpx.HTTPStatusError as e:
            raise ExportFailure(
                f"Rendering service returned {e.response.status_code}", investigation.id
            ) from e
        except httpx.HTTPError as e:
            raise ExportFailure(f"Rendering service unreachable: {e}", investigation.id) from e

        path = self.output_dir / report_filename(investigation, self.document_format)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            raise ExportFailure(f"Failed to write {path}: {e}", investigation.id) from e

        logger.info(f"Exported {self.document_format} document for {investigation.id} to {path}")
        return str(path)
