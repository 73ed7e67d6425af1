"""EventBus로 발행되는 길드 이벤트

이벤트는 식별자와 결과 값만 담는다. 가변 엔티티 참조는 넣지 않는다.
"""

from __future__ import annotations

from dataclasses import dataclass

from guildhall.core.guild.enums import OutcomeGrade
from guildhall.core.guild.models import InjuryPackage, RewardPackage


@dataclass(frozen=True)
class QuestAssignedEvent:
    quest_id: str
    party_id: str
    member_ids: tuple[str, ...]
    day_index: int


@dataclass(frozen=True)
class MissionResolvedEvent:
    quest_id: str
    party_id: str
    grade: OutcomeGrade
    rewards: RewardPackage
    injuries: InjuryPackage
    fatigue_delta: int
    resolved_day: int

    @property
    def is_success(self) -> bool:
        return self.grade != OutcomeGrade.FAIL


@dataclass(frozen=True)
class QuestArchivedEvent:
    quest_id: str
    reason: str  # "expired" | "resolved" | "cancelled"
    day_index: int
