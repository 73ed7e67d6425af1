"""퀘스트 인스턴스와 수명주기 상태 머신

PENDING → ASSIGNED → IN_PROGRESS → RESOLVED → ARCHIVED
PENDING → ARCHIVED (만료, 취소)
"""

from __future__ import annotations

from typing import Iterable, Optional

from guildhall.core.errors import InvalidArgumentError
from guildhall.core.guild.enums import QuestCategory, QuestRank, QuestState
from guildhall.core.guild.models import MissionOutcome, RewardPackage, TransitionResult
from guildhall.core.logging import get_logger

logger = get_logger(__name__)

ALLOWED_TRANSITIONS: dict[QuestState, frozenset[QuestState]] = {
    QuestState.PENDING: frozenset({QuestState.ASSIGNED, QuestState.ARCHIVED}),
    QuestState.ASSIGNED: frozenset({QuestState.IN_PROGRESS}),
    QuestState.IN_PROGRESS: frozenset({QuestState.RESOLVED}),
    QuestState.RESOLVED: frozenset({QuestState.ARCHIVED}),
    QuestState.ARCHIVED: frozenset(),
}

OPEN_STATES = frozenset(
    {QuestState.PENDING, QuestState.ASSIGNED, QuestState.IN_PROGRESS}
)


class QuestInstance:
    """퀘스트 보드가 소유하는 가변 퀘스트 엔티티.

    version은 모든 변경(전이, 평가 반영)마다 1씩 증가한다.
    외부 관찰자의 변경 감지용이며 내부 잠금에는 쓰지 않는다.
    """

    def __init__(
        self,
        quest_id: str,
        template_id: str,
        title: str,
        category: QuestCategory,
        base_difficulty: float,
        issued_day: int,
        expire_day: int,
        time_limit_days: int,
        location_id: str = "",
        environment_tags: Optional[Iterable[str]] = None,
        base_reward: Optional[RewardPackage] = None,
    ) -> None:
        if not quest_id or not quest_id.strip():
            raise InvalidArgumentError("quest_id is required")

        # 기본 정보 (불변)
        self._quest_id = quest_id
        self._template_id = template_id
        self._title = title
        self._category = category
        self._base_difficulty = base_difficulty
        self._issued_day = issued_day
        self._expire_day = expire_day
        self._time_limit_days = time_limit_days
        self._location_id = location_id
        self._environment_tags: tuple[str, ...] = tuple(environment_tags or ())
        self._base_reward = base_reward or RewardPackage()

        # 평가 결과
        self._assessed_difficulty = float(base_difficulty)
        self._recommended_rank = QuestRank.F
        self._risk_score = 0.0
        self._expected_reward = self._base_reward

        # 배정 & 결과
        self._state = QuestState.PENDING
        self._assigned_party_id: Optional[str] = None
        self._resolution: Optional[MissionOutcome] = None
        self._version = 0

    def __repr__(self) -> str:
        return (
            f"QuestInstance(id={self._quest_id!r}, state={self._state.value}, "
            f"version={self._version})"
        )

    # === 읽기 전용 속성 ===

    @property
    def quest_id(self) -> str:
        return self._quest_id

    @property
    def template_id(self) -> str:
        return self._template_id

    @property
    def title(self) -> str:
        return self._title

    @property
    def category(self) -> QuestCategory:
        return self._category

    @property
    def base_difficulty(self) -> float:
        return self._base_difficulty

    @property
    def issued_day(self) -> int:
        return self._issued_day

    @property
    def expire_day(self) -> int:
        return self._expire_day

    @property
    def time_limit_days(self) -> int:
        return self._time_limit_days

    @property
    def location_id(self) -> str:
        return self._location_id

    @property
    def environment_tags(self) -> tuple[str, ...]:
        return self._environment_tags

    @property
    def base_reward(self) -> RewardPackage:
        return self._base_reward

    @property
    def assessed_difficulty(self) -> float:
        return self._assessed_difficulty

    @property
    def recommended_rank(self) -> QuestRank:
        return self._recommended_rank

    @property
    def risk_score(self) -> float:
        return self._risk_score

    @property
    def expected_reward(self) -> RewardPackage:
        return self._expected_reward

    @property
    def state(self) -> QuestState:
        return self._state

    @property
    def assigned_party_id(self) -> Optional[str]:
        return self._assigned_party_id

    @property
    def resolution(self) -> Optional[MissionOutcome]:
        return self._resolution

    @property
    def version(self) -> int:
        return self._version

    @property
    def is_open(self) -> bool:
        return self._state in OPEN_STATES

    def is_expired(self, day_index: int) -> bool:
        return day_index >= self._expire_day

    # === 평가 반영 (상태 전이 아님) ===

    def apply_assessment(
        self,
        assessed_difficulty: float,
        recommended_rank: QuestRank,
        risk_score: float,
        expected_reward: RewardPackage,
    ) -> None:
        self._assessed_difficulty = assessed_difficulty
        self._recommended_rank = recommended_rank
        self._risk_score = risk_score
        self._expected_reward = expected_reward
        self._version += 1

    # === 상태 전이 ===

    def can_transition_to(self, target: QuestState) -> bool:
        return target in ALLOWED_TRANSITIONS[self._state]

    def _check(self, target: QuestState) -> TransitionResult:
        if self.can_transition_to(target):
            return TransitionResult.ok(self._state, target)
        reason = f"Cannot transition {self._state.value} -> {target.value}"
        logger.warning("Quest %s: %s", self._quest_id, reason)
        return TransitionResult.fail(self._state, target, reason)

    def _commit(self, target: QuestState) -> None:
        logger.debug(
            "Quest %s: %s -> %s", self._quest_id, self._state.value, target.value
        )
        self._state = target
        self._version += 1

    def assign_to_party(self, party_id: str) -> TransitionResult:
        result = self._check(QuestState.ASSIGNED)
        if result:
            self._assigned_party_id = party_id
            self._commit(QuestState.ASSIGNED)
        return result

    def mark_in_progress(self) -> TransitionResult:
        result = self._check(QuestState.IN_PROGRESS)
        if result:
            self._commit(QuestState.IN_PROGRESS)
        return result

    def resolve(self, outcome: MissionOutcome) -> TransitionResult:
        result = self._check(QuestState.RESOLVED)
        if result:
            self._resolution = outcome
            self._commit(QuestState.RESOLVED)
        return result

    def archive(self) -> TransitionResult:
        result = self._check(QuestState.ARCHIVED)
        if result:
            self._commit(QuestState.ARCHIVED)
        return result
