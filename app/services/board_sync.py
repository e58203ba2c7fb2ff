# app/services/board_sync.py
"""Client-side board state with optimistic drag-and-drop moves.

The synchronizer holds one local copy of a project's tasks. Drags move a task
between columns locally right away and the status change is persisted in the
background; a failed persistence call rolls the board back to the last
authoritative snapshot. Loading a new snapshot always replaces local state.
"""
import asyncio
import enum
import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Union

from app.models.task import TaskStatus

logger = logging.getLogger(__name__)

COLUMNS = (TaskStatus.TO_START, TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED)

StatusPersister = Callable[[int, TaskStatus], Awaitable[Any]]


class BoardSyncError(Exception):
    """Raised when the drag protocol is used out of order"""


class MutationState(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"  # rolled back


@dataclass
class BoardTask:
    id: int
    title: str
    status: TaskStatus
    priority: int = 1
    description: Optional[str] = None
    due_date: Optional[date] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    is_soft_deleted: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoardTask":
        """Build from a TaskOut payload or any object with the same attributes"""
        if not isinstance(data, dict):
            data = {name: getattr(data, name, None) for name in cls.__dataclass_fields__}

        def parse(value, parser):
            if value is None or not isinstance(value, str):
                return value
            return parser(value)

        return cls(
            id=data["id"],
            title=data["title"],
            status=TaskStatus(data["status"]),
            priority=data.get("priority") or 1,
            description=data.get("description"),
            due_date=parse(data.get("due_date"), date.fromisoformat),
            created_at=parse(data.get("created_at"), datetime.fromisoformat),
            completed_at=parse(data.get("completed_at"), datetime.fromisoformat),
            is_soft_deleted=bool(data.get("is_soft_deleted", False)),
        )


@dataclass
class PendingMutation:
    task_id: int
    from_status: TaskStatus
    to_status: TaskStatus
    state: MutationState = MutationState.PENDING
    error: Optional[BaseException] = None
    _future: Optional[asyncio.Task] = field(default=None, repr=False)


@dataclass
class _Drag:
    task_id: int
    persisted_status: TaskStatus


class BoardSynchronizer:
    def __init__(
        self,
        persist_status: StatusPersister,
        project_id: Optional[int] = None,
        on_failure: Optional[Callable[[PendingMutation], None]] = None,
        can_move_deleted: bool = False,
    ):
        self.project_id = project_id
        # Only the super-admin may still act on soft-deleted tasks
        self.can_move_deleted = can_move_deleted
        self._persist_status = persist_status
        self._on_failure = on_failure
        self.tasks: List[BoardTask] = []
        self.last_snapshot: List[BoardTask] = []
        self.mutations: List[PendingMutation] = []
        self.failures: List[PendingMutation] = []
        self._drag: Optional[_Drag] = None

    # Reconciliation

    def load(self, snapshot: Iterable[Union[BoardTask, Dict[str, Any]]]) -> None:
        """Replace local state wholesale with an authoritative snapshot"""
        tasks = [t if isinstance(t, BoardTask) else BoardTask.from_dict(t) for t in snapshot]
        tasks.sort(key=lambda t: (t.created_at or datetime.min, t.id), reverse=True)
        self.last_snapshot = [replace(t) for t in tasks]
        self.tasks = tasks
        # Settled moves are part of the snapshot now
        self.mutations = [m for m in self.mutations if m.state == MutationState.PENDING]
        if self._drag and self.get(self._drag.task_id) is None:
            self._drag = None

    def rollback(self) -> None:
        self.tasks = [replace(t) for t in self.last_snapshot]

    # Queries

    @property
    def active_id(self) -> Optional[int]:
        return self._drag.task_id if self._drag else None

    def get(self, task_id: int) -> Optional[BoardTask]:
        return next((t for t in self.tasks if t.id == task_id), None)

    def columns(self) -> Dict[TaskStatus, List[BoardTask]]:
        grouped = {status: [] for status in COLUMNS}
        for task in self.tasks:
            grouped[task.status].append(task)
        return grouped

    def resolve_destination(self, destination) -> Optional[TaskStatus]:
        """A column id or the id of a task in a column, resolved to a status"""
        if destination is None:
            return None
        if isinstance(destination, TaskStatus):
            return destination
        if isinstance(destination, str) and destination in TaskStatus.__members__:
            return TaskStatus(destination)
        over_task = self.get(destination)
        return over_task.status if over_task else None

    # Drag protocol

    def begin_drag(self, task_id: int) -> None:
        if self._drag is not None:
            raise BoardSyncError(f"Task {self._drag.task_id} is already being dragged")
        task = self.get(task_id)
        if task is None:
            raise BoardSyncError(f"Task {task_id} is not on the board")
        if task.is_soft_deleted and not self.can_move_deleted:
            raise BoardSyncError(f"Task {task_id} is deleted and cannot be moved")

        # Status as last persisted, in case an earlier move is still in flight
        persisted = next((t.status for t in self.last_snapshot if t.id == task_id), task.status)
        for mutation in self.mutations:
            if mutation.task_id == task_id and mutation.state == MutationState.PENDING:
                persisted = mutation.to_status
        self._drag = _Drag(task_id=task_id, persisted_status=persisted)

    def drag_over(self, task_id: int, destination) -> None:
        """Speculatively show the dragged task in the hovered column"""
        self._check_subject(task_id)
        task = self.get(task_id)
        target = self.resolve_destination(destination)
        if task is None or target is None or task.status == target:
            return
        self._show_status(task, target)

    def end_drag(self, task_id: int, destination) -> Optional[PendingMutation]:
        """Finish the drag and persist the move if the column really changed.

        Returns the scheduled mutation, or None when nothing is persisted.
        Must run inside an event loop.
        """
        drag, self._drag = self._drag, None
        if drag is None or drag.task_id != task_id:
            raise BoardSyncError(f"Task {task_id} is not the active drag subject")

        task = self.get(task_id)
        if task is None:
            return None

        target = self.resolve_destination(destination)
        if target is None:
            # Cancelled drop, undo whatever drag_over showed
            self._show_status(task, drag.persisted_status)
            return None

        self._show_status(task, target)
        if target == drag.persisted_status:
            return None

        mutation = PendingMutation(task_id=task_id, from_status=drag.persisted_status, to_status=target)
        self.mutations.append(mutation)
        mutation._future = asyncio.get_running_loop().create_task(self._persist(mutation))
        return mutation

    async def wait_pending(self) -> None:
        """Wait for every in-flight status mutation to settle"""
        futures = [m._future for m in self.mutations if m._future is not None and not m._future.done()]
        if futures:
            await asyncio.gather(*futures)

    def _check_subject(self, task_id: int) -> None:
        if self._drag is None or self._drag.task_id != task_id:
            raise BoardSyncError(f"Task {task_id} is not the active drag subject")

    async def _persist(self, mutation: PendingMutation) -> None:
        try:
            result = await self._persist_status(mutation.task_id, mutation.to_status)
        except Exception as e:
            mutation.state = MutationState.FAILED
            mutation.error = e
            self.failures.append(mutation)
            self.rollback()
            logger.warning(
                f"Moving task {mutation.task_id} to {mutation.to_status.value} failed, board rolled back: {e}"
            )
            if self._on_failure:
                self._on_failure(mutation)
            return

        mutation.state = MutationState.CONFIRMED
        later = self._later_mutations(mutation)
        if any(m.state == MutationState.CONFIRMED for m in later):
            # A newer move already settled, this one is stale
            return

        for index, snapshot_task in enumerate(self.last_snapshot):
            if snapshot_task.id != mutation.task_id:
                continue
            if isinstance(result, dict) and result.get("id") == mutation.task_id:
                self.last_snapshot[index] = BoardTask.from_dict(result)
            else:
                _set_status(snapshot_task, mutation.to_status)

        # A rollback may have reverted this task locally; bring it back in line
        # unless a newer move for it is still showing
        if not later and self.active_id != mutation.task_id:
            self._resync(mutation.task_id)

    def _later_mutations(self, mutation: PendingMutation) -> List[PendingMutation]:
        if mutation not in self.mutations:
            return []
        after = self.mutations[self.mutations.index(mutation) + 1:]
        return [m for m in after if m.task_id == mutation.task_id and m.state != MutationState.FAILED]

    def _resync(self, task_id: int) -> None:
        persisted = next((t for t in self.last_snapshot if t.id == task_id), None)
        if persisted is None:
            return
        for index, task in enumerate(self.tasks):
            if task.id == task_id:
                self.tasks[index] = replace(persisted)

    def _show_status(self, task: BoardTask, status: TaskStatus) -> None:
        """Change a task's local status, reusing the persisted completion time where it applies"""
        persisted = next((t for t in self.last_snapshot if t.id == task.id), None)
        if persisted is not None and persisted.status == status:
            task.status = status
            task.completed_at = persisted.completed_at
        else:
            _set_status(task, status)


def _set_status(task: BoardTask, status: TaskStatus) -> None:
    if task.status == status:
        return
    task.completed_at = datetime.utcnow() if status == TaskStatus.COMPLETED else None
    task.status = status
