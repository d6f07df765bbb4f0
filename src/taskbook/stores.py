"""Stateful task and category stores with write-through persistence.

Each store owns its in-memory collection. Every mutation updates memory,
publishes a new immutable snapshot to subscribers, and writes the whole
collection back through a CollectionStore before returning.
"""

import logging
import threading
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Generic, TypeVar

from .core.tasks import Category, Task, as_aware, new_id, now_local
from .ports.collection_store import (
    CollectionStore,
    StorageNotFound,
    StorageReadError,
    StorageWriteError,
)

logger = logging.getLogger(__name__)

TASKS_COLLECTION = "tasks"
CATEGORIES_COLLECTION = "taskTypes"
DEFAULT_CATEGORY_NAMES = ("Personal", "Work", "Urgent")

T = TypeVar("T", Category, Task)
Listener = Callable[[tuple], None]


class _SnapshotStore(Generic[T]):
    """Shared plumbing: lock, subscribers, write-through save."""

    collection: str

    def __init__(self, storage: CollectionStore):
        self._storage = storage
        self._items: list[T] = []
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()
        self.last_write_error: StorageWriteError | None = None

    def __len__(self) -> int:
        return len(self._items)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener with every new snapshot. Returns an unsubscribe function."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        snapshot = tuple(self._items)
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception(f"Subscriber failed on {self.collection} snapshot")

    def _persist(self) -> bool:
        """Write the whole collection. Failures are logged and kept, not raised."""
        try:
            self._storage.save([item.to_record() for item in self._items], self.collection)
        except StorageWriteError as e:
            logger.error(f"Failed to save {self.collection}: {e}")
            self.last_write_error = e
            return False
        self.last_write_error = None
        return True

    def _commit(self) -> bool:
        """Persist then publish the current in-memory state."""
        saved = self._persist()
        self._publish()
        return saved

    def _read(self, decode: Callable[[dict], T]) -> list[T]:
        """Load and decode records. Raises StorageNotFound or StorageReadError."""
        records = self._storage.load(self.collection)
        try:
            items = [decode(r) for r in records]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageReadError(f"Malformed record in {self.collection}: {e!r}") from e

        unique: dict[str, T] = {}
        for item in items:
            if item.id in unique:
                logger.warning(f"Dropping duplicate id {item.id} in {self.collection}")
                continue
            unique[item.id] = item
        return list(unique.values())

    # Defined last: the name shadows the builtin in this class body.
    def list(self) -> tuple[T, ...]:
        """Immutable snapshot of the current collection."""
        with self._lock:
            return tuple(self._items)


class CategoryStore(_SnapshotStore[Category]):
    """Owns the set of task categories."""

    collection = CATEGORIES_COLLECTION

    def __init__(
        self,
        storage: CollectionStore,
        default_names: tuple[str, ...] | list[str] = DEFAULT_CATEGORY_NAMES,
    ):
        super().__init__(storage)
        self.default_names = tuple(default_names)

    def load(self) -> tuple[Category, ...]:
        """Load categories, seeding defaults when nothing usable is stored."""
        with self._lock:
            try:
                self._items = self._read(Category.from_record)
            except StorageNotFound:
                logger.info("No stored categories, seeding defaults")
                self._items = []
            except StorageReadError as e:
                logger.error(f"Could not load categories, falling back to defaults: {e}")
                self._items = []

            if not self.ensure_defaults():
                self._publish()
            logger.info(f"Loaded {len(self._items)} categories")
            return tuple(self._items)

    def ensure_defaults(self) -> bool:
        """Seed the default categories if the collection is empty."""
        with self._lock:
            if self._items:
                return False
            self._items = [Category.create(name) for name in self.default_names]
            self._commit()
            return True

    def add(self, name: str) -> Category:
        """Create a category. Names are stripped and must be non-empty."""
        name = (name or "").strip()
        if not name:
            raise ValueError("category name must be non-empty")

        with self._lock:
            self.ensure_defaults()
            category = Category.create(name)
            self._items.append(category)
            logger.debug(f"Category added id={category.id} name={name!r}")
            self._commit()
            return category

    def get(self, category_id: str) -> Category | None:
        with self._lock:
            return next((c for c in self._items if c.id == category_id), None)

    def find(self, name: str) -> Category | None:
        """First category whose name matches, ignoring case."""
        wanted = name.strip().lower()
        with self._lock:
            return next((c for c in self._items if c.name.lower() == wanted), None)


def sample_tasks(now: datetime | None = None) -> list[Task]:
    """Example tasks shown on first run. They share one placeholder category."""
    now = as_aware(now) if now else now_local()
    category = Category.placeholder()
    return [
        Task(id=new_id(), title="Buy groceries", due_date=now + timedelta(days=1), category=category),
        Task(
            id=new_id(),
            title="Finish project report",
            due_date=now + timedelta(days=3),
            category=category,
        ),
    ]


class TaskStore(_SnapshotStore[Task]):
    """Owns the set of tasks."""

    collection = TASKS_COLLECTION

    def __init__(self, storage: CollectionStore, seed_samples: bool = True):
        super().__init__(storage)
        self.seed_samples = seed_samples

    def load(self, now: datetime | None = None) -> tuple[Task, ...]:
        """
        Load tasks from storage.

        First run (nothing stored) seeds the sample tasks. Unreadable data
        leaves an empty collection and the file untouched until the next
        mutation. A stored empty list stays empty.
        """
        with self._lock:
            try:
                self._items = self._read(Task.from_record)
            except StorageNotFound:
                logger.info("No stored tasks, first run")
                self._items = []
                if self.ensure_defaults(now):
                    return tuple(self._items)
            except StorageReadError as e:
                logger.error(f"Could not load tasks, starting empty: {e}")
                self._items = []

            self._publish()
            logger.info(f"Loaded {len(self._items)} tasks")
            return tuple(self._items)

    def ensure_defaults(self, now: datetime | None = None) -> bool:
        """Seed the sample tasks if the collection is empty."""
        with self._lock:
            if self._items or not self.seed_samples:
                return False
            self._items = sample_tasks(now)
            logger.info(f"Seeded {len(self._items)} sample tasks")
            self._commit()
            return True

    def get(self, task_id: str) -> Task | None:
        with self._lock:
            return next((t for t in self._items if t.id == task_id), None)

    def add(self, title: str, due_date: datetime, category: Category | None = None) -> Task:
        """Create an incomplete task holding a snapshot of the category."""
        _check_title(title)
        with self._lock:
            task = Task(
                id=new_id(),
                title=title,
                due_date=due_date,
                category=category or Category.placeholder(),
            )
            self._items.append(task)
            logger.debug(f"Task added id={task.id} title={title!r}")
            self._commit()
            return task

    def delete(self, task_id: str) -> None:
        """Remove a task. Unknown ids are ignored."""
        with self._lock:
            remaining = [t for t in self._items if t.id != task_id]
            if len(remaining) == len(self._items):
                logger.debug(f"delete: no task with id={task_id}")
                self._persist()
                return
            self._items = remaining
            self._commit()

    def toggle_completion(self, task_id: str) -> None:
        """Flip a task's completion state. Unknown ids are ignored."""
        with self._lock:
            self._change(task_id, lambda t: replace(t, is_completed=not t.is_completed))

    def update(
        self,
        task_id: str,
        title: str,
        due_date: datetime,
        category: Category | None = None,
    ) -> None:
        """
        Replace title, due date and category, keeping id and completion state.

        A None category keeps the snapshot the task already holds.
        """
        _check_title(title)
        with self._lock:
            self._change(
                task_id,
                lambda t: replace(
                    t,
                    title=title,
                    due_date=due_date,
                    category=category or t.category,
                ),
            )

    def _change(self, task_id: str, change: Callable[[Task], Task]) -> None:
        for index, task in enumerate(self._items):
            if task.id == task_id:
                self._items[index] = change(task)
                logger.debug(f"Task updated id={task_id}")
                self._commit()
                return
        logger.debug(f"No task with id={task_id}")
        self._persist()


def _check_title(title: str) -> None:
    if not title or not title.strip():
        raise ValueError("task title must be non-empty")
