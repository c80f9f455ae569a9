"""Clinical record summaries module."""

from .types import Summary, SummaryType
from .templates import (
    UNSUPPORTED_SUMMARY,
    SummaryWriter,
    get_summary_writer,
    write_summary,
)

__all__ = [
    # Types
    "Summary",
    "SummaryType",
    # Writer
    "UNSUPPORTED_SUMMARY",
    "SummaryWriter",
    "get_summary_writer",
    "write_summary",
]
