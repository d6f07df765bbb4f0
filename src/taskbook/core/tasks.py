"""Pure task domain logic - no I/O dependencies."""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo

DUE_SOON_WINDOW = timedelta(hours=1)
PLACEHOLDER_CATEGORY_NAME = "Default"


def new_id() -> str:
    """Fresh opaque identifier for tasks and categories."""
    return uuid.uuid4().hex


def as_aware(moment: datetime) -> datetime:
    """Interpret naive datetimes as local time."""
    if moment.tzinfo is None or moment.utcoffset() is None:
        return moment.astimezone()
    return moment


def now_local() -> datetime:
    return datetime.now().astimezone()


@dataclass(frozen=True)
class Category:
    """A user-defined label attached to tasks."""

    id: str
    name: str

    @classmethod
    def create(cls, name: str) -> "Category":
        return cls(id=new_id(), name=name)

    @classmethod
    def placeholder(cls) -> "Category":
        """Synthesized category for tasks created without one."""
        return cls.create(PLACEHOLDER_CATEGORY_NAME)

    def to_record(self) -> dict:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_record(cls, data: dict) -> "Category":
        return cls(id=str(data["id"]), name=str(data["name"]))


@dataclass(frozen=True)
class Task:
    """
    A task with a due date.

    The category is an independent snapshot taken when the task was created
    or last updated. It is never re-synced with the category store.
    """

    id: str
    title: str
    due_date: datetime
    category: Category = field(default_factory=Category.placeholder)
    is_completed: bool = False

    def __post_init__(self) -> None:
        # frozen: bypass __setattr__ to normalize the timestamp
        object.__setattr__(self, "due_date", as_aware(self.due_date))

    def is_overdue(self, now: datetime | None = None) -> bool:
        """Incomplete and past its due date."""
        now = as_aware(now) if now else now_local()
        return not self.is_completed and now > self.due_date

    def is_due_soon(self, now: datetime | None = None, window: timedelta = DUE_SOON_WINDOW) -> bool:
        """Incomplete and due within the window (exclusive)."""
        now = as_aware(now) if now else now_local()
        if self.is_completed or self.due_date <= now:
            return False
        return self.due_date - now < window

    def due_day(self, tz: tzinfo | None = None) -> date:
        """Calendar day of the due date in the given zone (local by default)."""
        return self.due_date.astimezone(tz).date()

    def to_record(self) -> dict:
        """Serialize to the persisted record layout."""
        return {
            "id": self.id,
            "title": self.title,
            "dueDate": self.due_date.isoformat(),
            "isCompleted": self.is_completed,
            "type": self.category.to_record(),
        }

    @classmethod
    def from_record(cls, data: dict) -> "Task":
        """Create Task from a persisted record."""
        due = datetime.fromisoformat(data["dueDate"])
        completed = data.get("isCompleted", False)
        if not isinstance(completed, bool):
            raise ValueError(f"isCompleted must be a boolean, got {completed!r}")
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            due_date=due,
            category=Category.from_record(data["type"]),
            is_completed=completed,
        )


def format_day_label(day: date) -> str:
    """Medium-style day label, e.g. 'Jan 1, 2024'."""
    return f"{day:%b} {day.day}, {day.year}"


def filter_active(tasks: list[Task]) -> list[Task]:
    """Tasks not yet completed."""
    return [t for t in tasks if not t.is_completed]


def filter_completed(tasks: list[Task]) -> list[Task]:
    """Completed tasks only."""
    return [t for t in tasks if t.is_completed]


def group_by_due_day(tasks: list[Task], tz: tzinfo | None = None) -> dict[str, list[Task]]:
    """
    Group tasks by the calendar day of their due date.

    Keys are day labels from format_day_label. Groups are ordered by the
    actual calendar day, so "Feb 1, 2024" follows "Jan 31, 2024".
    Within a group tasks keep their input order.

    Pure function - no I/O.
    """
    by_day: dict[date, list[Task]] = {}
    for task in tasks:
        by_day.setdefault(task.due_day(tz), []).append(task)
    return {format_day_label(day): by_day[day] for day in sorted(by_day)}


def filter_overdue(tasks: list[Task], now: datetime | None = None) -> list[Task]:
    """Filter to overdue tasks only."""
    now = now or now_local()
    return [t for t in tasks if t.is_overdue(now)]


def filter_due_soon(
    tasks: list[Task],
    now: datetime | None = None,
    window: timedelta = DUE_SOON_WINDOW,
) -> list[Task]:
    """Filter to tasks due within the window."""
    now = now or now_local()
    return [t for t in tasks if t.is_due_soon(now, window)]


def filter_by_category(tasks: list[Task], category_name: str) -> list[Task]:
    """Filter tasks by the name of their category snapshot."""
    return [t for t in tasks if t.category.name.lower() == category_name.lower()]


def sort_by_due_date(tasks: list[Task]) -> list[Task]:
    """Sort tasks by due date (ascending), then title."""
    return sorted(tasks, key=lambda t: (t.due_date, t.title.lower()))
