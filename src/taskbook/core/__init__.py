"""Functional core - pure business logic with no I/O."""

from .tasks import (
    Category,
    Task,
    filter_active,
    filter_completed,
    filter_overdue,
    filter_due_soon,
    filter_by_category,
    format_day_label,
    group_by_due_day,
    sort_by_due_date,
)

__all__ = [
    "Category",
    "Task",
    "filter_active",
    "filter_completed",
    "filter_overdue",
    "filter_due_soon",
    "filter_by_category",
    "format_day_label",
    "group_by_due_day",
    "sort_by_due_date",
]
