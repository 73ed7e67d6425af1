"""배정 플래너: 배정 가능 여부 판정 + 매칭 품질(미리보기 성공률) 추정"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional

from guildhall.core.errors import InvalidArgumentError
from guildhall.core.guild.enums import QuestState
from guildhall.core.guild.models import ResolveOptions, WorldStateSnapshot
from guildhall.core.guild.party import Party
from guildhall.core.guild.quest_instance import QuestInstance
from guildhall.core.guild.resolver import MissionResolver, ResolveRequest

if TYPE_CHECKING:
    from guildhall.config import Settings

DEFAULT_PREVIEW_SEED = 1337

# (난이도 상한 미포함, 최소 인원)
PARTY_SIZE_TIERS: list[tuple[float, int]] = [
    (30.0, 1),
    (60.0, 2),
    (90.0, 3),
]
MAX_TIER_PARTY_SIZE = 4


class AssignmentPlanner:
    def __init__(
        self,
        resolver: MissionResolver,
        minimum_party_size: int = 1,
        default_day_index: int = 0,
        preview_options: Optional[ResolveOptions] = None,
        preview_seed: int = DEFAULT_PREVIEW_SEED,
    ) -> None:
        if resolver is None:
            raise InvalidArgumentError("resolver is required")
        self._resolver = resolver
        self._minimum_party_size = max(1, minimum_party_size)
        self._default_day_index = max(0, default_day_index)
        self._preview_options = preview_options or ResolveOptions.preview()
        self._preview_seed = preview_seed

    @classmethod
    def from_settings(cls, resolver: MissionResolver, settings: Settings) -> AssignmentPlanner:
        return cls(
            resolver,
            minimum_party_size=settings.MIN_PARTY_SIZE,
            default_day_index=settings.PREVIEW_DAY_INDEX,
            preview_options=ResolveOptions(
                enable_trait_effects=settings.ENABLE_TRAIT_EFFECTS,
                enable_injury_simulation=False,
                global_difficulty_multiplier=settings.GLOBAL_DIFFICULTY_MULTIPLIER,
                critical_success_bonus=settings.CRITICAL_SUCCESS_BONUS,
            ),
            preview_seed=settings.PREVIEW_SEED,
        )

    @property
    def minimum_party_size(self) -> int:
        return self._minimum_party_size

    def required_minimum_members(self, quest: QuestInstance) -> int:
        difficulty_based = MAX_TIER_PARTY_SIZE
        for upper, size in PARTY_SIZE_TIERS:
            if quest.assessed_difficulty < upper:
                difficulty_based = size
                break
        return max(self._minimum_party_size, difficulty_based)

    def explain(self, quest: QuestInstance, party: Party) -> list[str]:
        """배정 불가 사유 목록. 빈 목록이면 배정 가능."""
        if quest is None:
            raise InvalidArgumentError("quest is required")
        if party is None:
            raise InvalidArgumentError("party is required")

        problems: list[str] = []
        if quest.state != QuestState.PENDING:
            problems.append(f"quest {quest.quest_id} is {quest.state.value}, not pending")

        required = self.required_minimum_members(quest)
        if len(party) < required:
            problems.append(f"party has {len(party)} member(s), needs {required}")

        for member in party:
            if not member.is_deployable():
                problems.append(f"adventurer {member.adventurer_id} is not deployable")
        return problems

    def can_assign(self, quest: QuestInstance, party: Party) -> bool:
        return not self.explain(quest, party)

    def evaluate_match(self, quest: QuestInstance, party: Party) -> float:
        """배정 불가면 0.0, 아니면 고정 시드 미리보기 판정의 최종 성공률.

        미리보기는 부상 시뮬레이션을 끄며 어떤 상태도 변경하지 않는다.
        """
        if not self.can_assign(quest, party):
            return 0.0

        request = ResolveRequest(
            quest=quest,
            party=party,
            world=WorldStateSnapshot(day_index=self._default_day_index),
            day_index=self._default_day_index,
            seed=self._preview_seed,
            options=self._preview_options,
        )
        return self._resolver.resolve(request).final_success_chance

    def rank_parties(
        self, quest: QuestInstance, parties: Iterable[Party]
    ) -> list[tuple[Party, float]]:
        """후보 파티를 매칭 점수 내림차순으로 정렬 (동점은 입력 순서 유지)"""
        scored = [(party, self.evaluate_match(quest, party)) for party in parties]
        return sorted(scored, key=lambda pair: pair[1], reverse=True)
