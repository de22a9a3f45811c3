"""Utility functions for codekit."""

from .url import is_file_url, resolve_file_path, source_name_from_url

__all__ = [
    "is_file_url",
    "resolve_file_path",
    "source_name_from_url",
]
