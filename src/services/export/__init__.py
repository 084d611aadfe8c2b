"""GitHub project export."""

from .service import ExportSummary, run_export, summarize_snapshot  # noqa: F401
