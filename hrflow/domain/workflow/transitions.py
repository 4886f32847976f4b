"""Legal status transitions and the history action each status records."""

from __future__ import annotations

from typing import Mapping

from .entities import HistoryAction, RecordStatus

S = RecordStatus

OFFER_TRANSITIONS: Mapping[RecordStatus, frozenset[RecordStatus]] = {
    S.DRAFT: frozenset({S.PENDING_APPROVAL, S.APPROVED}),
    S.PENDING_APPROVAL: frozenset({S.APPROVED, S.REJECTED, S.DRAFT}),
    S.REJECTED: frozenset({S.DRAFT}),
    S.APPROVED: frozenset({S.SENT, S.DRAFT}),
    S.SENT: frozenset({S.SIGNED, S.DECLINED, S.EXPIRED}),
    S.SIGNED: frozenset(),
    S.DECLINED: frozenset(),
    S.EXPIRED: frozenset(),
}

ONBOARDING_TRANSITIONS: Mapping[RecordStatus, frozenset[RecordStatus]] = {
    S.DRAFT: frozenset({S.IN_PROGRESS}),
    S.IN_PROGRESS: frozenset({S.COMPLETED, S.DRAFT}),
    S.COMPLETED: frozenset(),
}

_STATUS_ACTIONS = {
    S.APPROVED: HistoryAction.APPROVED,
    S.REJECTED: HistoryAction.REJECTED,
    S.SENT: HistoryAction.SENT,
    S.SIGNED: HistoryAction.SIGNED,
    S.DECLINED: HistoryAction.DECLINED,
}


def history_action_for(status: RecordStatus) -> HistoryAction:
    return _STATUS_ACTIONS.get(status, HistoryAction.EDITED)


def is_allowed(
    table: Mapping[RecordStatus, frozenset[RecordStatus]],
    current: RecordStatus,
    new: RecordStatus,
) -> bool:
    return new in table.get(current, frozenset())
