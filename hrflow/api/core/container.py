# --------------------------------
# DI container
# --------------------------------
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Callable

from hrflow.config import Settings, settings as default_settings
from hrflow.domain.offers.letters import InMemoryLetterTemplateStore
from hrflow.domain.offers.workflow import OFFER_WORKFLOW
from hrflow.domain.onboarding.workflow import ONBOARDING_WORKFLOW
from hrflow.domain.records.repository import InMemoryRecordRepository
from hrflow.domain.workflow.entities import WorkflowDefinition
from hrflow.domain.workflow.lifecycle import RecordLifecycleManager, utc_now
from hrflow.runtime.prefill import CandidateDirectory, InMemoryCandidateDirectory
from hrflow.runtime.sessions import SessionRegistry


@dataclass
class WorkflowServices:
    definition: WorkflowDefinition
    repository: InMemoryRecordRepository
    lifecycle: RecordLifecycleManager
    sessions: SessionRegistry


class Container:
    def __init__(
        self,
        *,
        settings: Settings | None = None,
        candidates: CandidateDirectory | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._settings = settings or default_settings
        self._candidates = candidates or InMemoryCandidateDirectory()
        self._letters = InMemoryLetterTemplateStore()
        self._workflows = {
            "offers": self._build(OFFER_WORKFLOW, self._settings.offer_id_prefix, clock),
            "onboardings": self._build(ONBOARDING_WORKFLOW, self._settings.onboarding_id_prefix, clock),
        }

    @staticmethod
    def _build(definition: WorkflowDefinition, id_prefix: str, clock) -> WorkflowServices:
        repository = InMemoryRecordRepository()
        lifecycle = RecordLifecycleManager(
            definition=definition,
            repository=repository,
            id_prefix=id_prefix,
            clock=clock,
        )
        return WorkflowServices(
            definition=definition,
            repository=repository,
            lifecycle=lifecycle,
            sessions=SessionRegistry(lifecycle),
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def candidates(self) -> CandidateDirectory:
        return self._candidates

    @property
    def letters(self) -> InMemoryLetterTemplateStore:
        return self._letters

    def workflow(self, kind: str) -> WorkflowServices:
        return self._workflows[kind]


@lru_cache
def get_container():
    return Container()
