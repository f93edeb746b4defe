"""Formatting utilities for git-cleanup."""

from .status import format_deletion_items, format_deletion_line, format_summary

__all__ = [
    "format_deletion_items",
    "format_deletion_line",
    "format_summary",
]
