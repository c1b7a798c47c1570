"""Utility functions for trackpick."""

from .deps import check_system_dependencies, print_dependency_status

__all__ = [
    "check_system_dependencies",
    "print_dependency_status",
]
