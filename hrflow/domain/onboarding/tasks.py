"""Onboarding task checklist.

Tasks live in the draft as plain dicts until commit; these helpers return a
new list every time.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from hrflow.core.errors import RecordNotFound, ValidationFailed
from hrflow.core.results import Outcome
from .entities import TaskStatus

TASK_TEMPLATES: dict[str, list[dict[str, Any]]] = {
    'general': [
        {'title': 'Prepare workstation', 'assignee': 'IT'},
        {'title': 'Create system accounts', 'assignee': 'IT'},
        {'title': 'Collect signed contract', 'assignee': 'HR'},
        {'title': 'Introduce the team', 'assignee': 'Manager'},
    ],
    'it': [
        {'title': 'Prepare laptop', 'assignee': 'IT'},
        {'title': 'Create email account', 'assignee': 'IT'},
        {'title': 'Grant repository access', 'assignee': 'IT'},
        {'title': 'Security awareness training', 'assignee': 'Security'},
    ],
}


def _as_dict(task: Any) -> dict[str, Any]:
    if isinstance(task, Mapping):
        return dict(task)
    return task.model_dump()


def _next_task_id(tasks: Sequence[Mapping[str, Any]]) -> str:
    taken = {t.get('id') for t in tasks}
    n = len(tasks) + 1
    while f'task-{n}' in taken:
        n += 1
    return f'task-{n}'


def add_task(tasks: Sequence[Any], task: Mapping[str, Any]) -> Outcome[list[dict[str, Any]]]:
    current = [_as_dict(t) for t in tasks]
    title = (task.get('title') or '').strip()
    if not title:
        return Outcome.failure(ValidationFailed('Task title is required', details={'title': 'required'}))

    new_task = {**task, 'title': title, 'id': _next_task_id(current)}
    new_task.setdefault('status', TaskStatus.PENDING.value)
    return Outcome.success([*current, new_task])


def remove_task(tasks: Sequence[Any], task_id: str) -> list[dict[str, Any]]:
    return [t for t in (_as_dict(t) for t in tasks) if t.get('id') != task_id]


def update_task(
    tasks: Sequence[Any], task_id: str, changes: Mapping[str, Any]
) -> Outcome[list[dict[str, Any]]]:
    current = [_as_dict(t) for t in tasks]
    if not any(t.get('id') == task_id for t in current):
        return Outcome.failure(RecordNotFound('task', task_id))
    return Outcome.success(
        [{**t, **changes, 'id': task_id} if t.get('id') == task_id else t for t in current]
    )


def apply_task_template(template: str) -> Outcome[list[dict[str, Any]]]:
    entries = TASK_TEMPLATES.get(template)
    if entries is None:
        return Outcome.failure(
            ValidationFailed(
                f"Unknown task template '{template}'",
                details={'available': sorted(TASK_TEMPLATES)},
            )
        )
    return Outcome.success(
        [
            {**entry, 'id': f'template-{i}', 'status': TaskStatus.PENDING.value}
            for i, entry in enumerate(entries, start=1)
        ]
    )


def task_progress(tasks: Sequence[Any]) -> float:
    items = [_as_dict(t) for t in tasks]
    if not items:
        return 0.0
    done = sum(1 for t in items if t.get('status') == TaskStatus.COMPLETED.value)
    return done / len(items)
