# src/monaco_deploy/report/__init__.py
from .report_md import REQUIRED_SECTIONS, generate_report_md
from .summary import SUMMARY_COLUMNS, status_counts, summary_frame

__all__ = ["REQUIRED_SECTIONS", "SUMMARY_COLUMNS", "generate_report_md", "status_counts", "summary_frame"]
