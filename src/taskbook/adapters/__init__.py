"""Adapters - I/O implementations of ports."""

from .json_file import JsonFileStore

__all__ = [
    "JsonFileStore",
]
