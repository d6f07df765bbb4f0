"""Shared wiring between the CLI and the stores.

Resolves storage from config and hands back loaded stores.
"""

from dataclasses import dataclass
from datetime import timedelta

from .adapters.json_file import JsonFileStore
from .config import Config
from .stores import CategoryStore, TaskStore


@dataclass
class TaskBook:
    """Loaded category and task stores sharing one storage directory."""

    categories: CategoryStore
    tasks: TaskStore
    due_soon_window: timedelta = timedelta(hours=1)

    def write_errors(self) -> list[str]:
        """Messages for stores whose last write failed."""
        return [
            str(store.last_write_error)
            for store in (self.categories, self.tasks)
            if store.last_write_error is not None
        ]


def get_storage(config: Config) -> JsonFileStore:
    """Resolve the storage directory from config."""
    return JsonFileStore(config.resolved_data_dir())


def open_task_book(config: Config) -> TaskBook:
    """Build both stores on the configured storage and load them."""
    storage = get_storage(config)
    categories = CategoryStore(storage, default_names=config.default_categories)
    tasks = TaskStore(storage, seed_samples=config.seed_sample_tasks)
    categories.load()
    tasks.load()
    return TaskBook(
        categories=categories,
        tasks=tasks,
        due_soon_window=timedelta(minutes=config.due_soon_minutes),
    )
