from datetime import date, datetime

import pytest

from app.models import Project, Task, TaskStatus
from app.services import task_lifecycle
from app.services.task_lifecycle import TaskValidationError
from app.utils.permissions import DeleteMode, Tier
from app.utils.security import SessionIdentity


def test_new_task_defaults():
    task = task_lifecycle.new_task(project_id=1, title="  Setup Repo ")
    assert task.title == "Setup Repo"
    assert task.status == TaskStatus.TO_START
    assert task.priority == 1
    assert task.completed_at is None
    assert task.is_soft_deleted is False


@pytest.mark.parametrize("title", ["", "   ", None])
def test_new_task_requires_title(title):
    with pytest.raises(TaskValidationError):
        task_lifecycle.new_task(project_id=1, title=title)


def test_new_task_rejects_unknown_priority():
    with pytest.raises(TaskValidationError):
        task_lifecycle.new_task(project_id=1, title="x", priority=4)


def test_completed_at_tracks_completed_status():
    task = task_lifecycle.new_task(project_id=1, title="Deploy")
    stamp = datetime(2026, 1, 2, 3, 4, 5)

    assert task_lifecycle.transition(task, TaskStatus.COMPLETED, now=stamp)
    assert task.status == TaskStatus.COMPLETED
    assert task.completed_at == stamp

    assert task_lifecycle.transition(task, TaskStatus.IN_PROGRESS)
    assert task.completed_at is None

    # Any column is reachable from any other
    assert task_lifecycle.transition(task, TaskStatus.COMPLETED)
    assert task.completed_at is not None
    assert task_lifecycle.transition(task, TaskStatus.TO_START)
    assert task.completed_at is None


def test_same_status_transition_is_a_no_op():
    task = task_lifecycle.new_task(project_id=1, title="Deploy")
    task_lifecycle.transition(task, TaskStatus.COMPLETED, now=datetime(2026, 1, 1))
    assert not task_lifecycle.transition(task, TaskStatus.COMPLETED, now=datetime(2027, 1, 1))
    assert task.completed_at == datetime(2026, 1, 1)


def test_transition_accepts_status_strings():
    task = task_lifecycle.new_task(project_id=1, title="Deploy")
    task_lifecycle.transition(task, "IN_PROGRESS")
    assert task.status == TaskStatus.IN_PROGRESS


def test_apply_edits_leaves_lifecycle_fields_alone():
    task = task_lifecycle.new_task(project_id=1, title="Deploy")
    task_lifecycle.transition(task, TaskStatus.COMPLETED, now=datetime(2026, 1, 1))

    task_lifecycle.apply_edits(task, title="Ship it", priority=3, due_date=date(2026, 2, 1), description="now")

    assert task.title == "Ship it"
    assert task.priority == 3
    assert task.due_date == date(2026, 2, 1)
    assert task.status == TaskStatus.COMPLETED
    assert task.completed_at == datetime(2026, 1, 1)
    assert task.is_soft_deleted is False


def test_apply_edits_rejects_lifecycle_fields():
    task = task_lifecycle.new_task(project_id=1, title="Deploy")
    with pytest.raises(TaskValidationError):
        task_lifecycle.apply_edits(task, status=TaskStatus.COMPLETED)
    with pytest.raises(TaskValidationError):
        task_lifecycle.apply_edits(task, title=" ")
    assert task.title == "Deploy"


def test_apply_edits_rejects_cleared_priority():
    task = task_lifecycle.new_task(project_id=1, title="Deploy", priority=3)
    with pytest.raises(TaskValidationError):
        task_lifecycle.apply_edits(task, priority=None)
    with pytest.raises(TaskValidationError):
        task_lifecycle.apply_edits(task, title=None)
    assert task.priority == 3
    assert task.title == "Deploy"


def _stored_task(db):
    project = Project(name="P")
    db.add(project)
    db.flush()
    task = task_lifecycle.new_task(project_id=project.id, title="T")
    db.add(task)
    db.commit()
    return project, task


def test_soft_delete_keeps_the_row(db):
    project, task = _stored_task(db)
    actor = SessionIdentity(id=2, username="sarada", role="ADMIN", tier=Tier.ADMIN)

    assert task_lifecycle.delete_task(db, task, actor) == DeleteMode.SOFT
    db.commit()

    stored = db.query(Task).filter(Task.id == task.id).one()
    assert stored.is_soft_deleted is True
    assert stored.status == TaskStatus.TO_START
    assert db.query(Task).filter(Task.project_id == project.id).count() == 1


def test_super_admin_delete_erases(db):
    project, task = _stored_task(db)
    actor = SessionIdentity(id=1, username="nkc", role="ADMIN", tier=Tier.SUPER_ADMIN)

    assert task_lifecycle.delete_task(db, task, actor) == DeleteMode.ERASE
    db.commit()

    assert db.query(Task).filter(Task.project_id == project.id).count() == 0
