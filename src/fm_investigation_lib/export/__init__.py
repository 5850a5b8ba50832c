"""Investigation exporters"""

from .base import BaseExporter, build_report, report_filename
from .http_exporter import HttpDocumentExporter
from .json_exporter import JsonReportExporter

__all__ = [
    "BaseExporter",
    "JsonReportExporter",
    "HttpDocumentExporter",
    "build_report",
    "report_filename",
]
