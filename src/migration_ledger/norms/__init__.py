"""Norm detection: rules that reached zero and stayed there, per directory."""

from .detection import (
    build_rule_series,
    compute_directory_stats,
    count_directory_violations,
    count_rule_violations,
    detect_extinct_norms,
    detect_norm_transition,
    determine_status,
    dir_key_from_path,
    find_clean_timestamp,
    in_directory,
    list_directories,
    normalize_directory,
)
from .capture import (
    NORMS_DIRNAME,
    STATUS_FILTERS,
    filter_summaries,
    norm_summary_path,
    skip_reason,
    write_summary,
)
from .models import DirectoryStats, DirectoryStatus, DirectorySummary, Norm
from .summarizer import DirectorySummarizer, summarize

__all__ = [
    "Norm",
    "DirectoryStats",
    "DirectoryStatus",
    "DirectorySummary",
    "DirectorySummarizer",
    "summarize",
    "normalize_directory",
    "in_directory",
    "dir_key_from_path",
    "list_directories",
    "count_rule_violations",
    "count_directory_violations",
    "build_rule_series",
    "detect_norm_transition",
    "detect_extinct_norms",
    "compute_directory_stats",
    "determine_status",
    "find_clean_timestamp",
    "NORMS_DIRNAME",
    "STATUS_FILTERS",
    "norm_summary_path",
    "skip_reason",
    "filter_summaries",
    "write_summary",
]
