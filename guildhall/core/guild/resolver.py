"""미션 판정기

핵심 로직:
1) 파티 종합 전력(가중합) 계산
2) 난이도 대비 전력 비율을 로지스틱 곡선으로 성공 확률화 (score=1.0 에서 50%)
3) 시드 고정 난수 한 번으로 등급(Critical/Success/Partial/Fail) 판정
4) 등급별 보상, 부상, 피로 산출

판정기는 순수 계산기다. 퀘스트/파티/모험가 상태를 변경하지 않으며
결과 적용은 호출자의 책임이다. 같은 입력과 시드는 항상 같은 결과를 낸다.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Mapping, Optional

from guildhall.core.errors import InvalidArgumentError
from guildhall.core.guild.adventurer import AdventurerState
from guildhall.core.guild.enums import OutcomeGrade
from guildhall.core.guild.models import (
    FatiguePackage,
    InjuryInfo,
    InjuryPackage,
    MissionOutcome,
    ResolveLogEntry,
    ResolveOptions,
    RewardPackage,
    WorldStateSnapshot,
)
from guildhall.core.guild.party import Party
from guildhall.core.guild.quest_instance import QuestInstance
from guildhall.core.guild.templates import TraitTemplate
from guildhall.core.logging import get_logger

logger = get_logger(__name__)

MIN_SUCCESS_CHANCE = 0.05
MAX_SUCCESS_CHANCE = 0.95

EMPTY_PARTY_POWER = 10.0
LOGISTIC_STEEPNESS = 3.2

# === 멤버 전력 계수 ===
COMBAT_WEIGHTS = {"attack": 1.25, "defense": 0.90, "magic": 1.10, "support": 0.80}
EXPLORATION_WEIGHTS = {"detection": 1.20, "mobility": 1.00, "survival": 1.05}
MORALE_WEIGHT = 0.70
HP_RATIO_WEIGHT = 25.0
STAMINA_WEIGHT = 0.40
FATIGUE_DIVISOR = 140.0  # 피로 70이면 약 -50%
INJURY_SEVERITY_PENALTY = 0.12
LEVEL_BONUS = 0.02
SYNERGY_PER_MEMBER = 0.03
MAX_SYNERGY = 0.15

# === 기한 압박 ===
MAX_DEADLINE_PENALTY = 0.15
DEADLINE_PENALTY_BASE = 0.03

# === 등급 ===
CRITICAL_BAND = 0.20
PARTIAL_BAND = 0.4  # 실패 구간 중 하위 40%는 수습 성공

REWARD_MULTIPLIERS: dict[OutcomeGrade, float] = {
    OutcomeGrade.CRITICAL_SUCCESS: 1.50,
    OutcomeGrade.SUCCESS: 1.00,
    OutcomeGrade.PARTIAL_SUCCESS: 0.55,
    OutcomeGrade.FAIL: 0.10,
}

# === 부상 ===
BASE_INJURY_SEVERITY: dict[OutcomeGrade, int] = {
    OutcomeGrade.SUCCESS: 1,
    OutcomeGrade.PARTIAL_SUCCESS: 2,
    OutcomeGrade.FAIL: 3,
}
INJURY_CHANCE = 0.20
INJURY_RESIST_DIVISOR = 200.0
MIN_INJURY_SEVERITY = 1
MAX_INJURY_SEVERITY = 5

# === 피로 ===
MISSION_LOAD_PER_DIFFICULTY = 4.0
GRADE_FATIGUE_LOAD: dict[OutcomeGrade, float] = {
    OutcomeGrade.CRITICAL_SUCCESS: 6.0,
    OutcomeGrade.SUCCESS: 10.0,
    OutcomeGrade.PARTIAL_SUCCESS: 14.0,
    OutcomeGrade.FAIL: 20.0,
}
LOAD_REDUCTION_PER_MEMBER = 1.5
MAX_LOAD_REDUCTION = 8.0
MIN_FATIGUE_DELTA = 3


@dataclass(frozen=True, eq=False)
class ResolveRequest:
    quest: QuestInstance
    party: Party
    world: WorldStateSnapshot
    day_index: int
    seed: int
    options: ResolveOptions = field(default_factory=ResolveOptions)


@dataclass(frozen=True)
class ResolveResult:
    outcome: MissionOutcome
    final_success_chance: float
    grade: OutcomeGrade
    rewards: RewardPackage
    injuries: InjuryPackage
    fatigue: FatiguePackage
    logs: tuple[ResolveLogEntry, ...]
    consumed_seed: int

    @property
    def log_messages(self) -> list[str]:
        return [entry.message for entry in self.logs]


class _AuditLog:
    """판정 단계 기록. DEBUG 로그로도 함께 남긴다."""

    def __init__(self, quest_id: str) -> None:
        self._quest_id = quest_id
        self.entries: list[ResolveLogEntry] = []

    def add(self, message: str) -> None:
        self.entries.append(ResolveLogEntry(message))
        logger.debug("[resolve %s] %s", self._quest_id, message)


def logistic_chance(score: float) -> float:
    return 1.0 / (1.0 + math.exp(-(score - 1.0) * LOGISTIC_STEEPNESS))


def deadline_penalty(expire_day: int, day_index: int) -> float:
    days_left = expire_day - day_index
    if days_left <= 0:
        return MAX_DEADLINE_PENALTY
    return min(MAX_DEADLINE_PENALTY, DEADLINE_PENALTY_BASE / max(days_left, 1))


def determine_grade(
    success_chance: float, roll_value: float, critical_success_bonus: float = 0.0
) -> OutcomeGrade:
    if roll_value <= success_chance * CRITICAL_BAND + critical_success_bonus:
        return OutcomeGrade.CRITICAL_SUCCESS
    if roll_value <= success_chance:
        return OutcomeGrade.SUCCESS

    fail_margin = roll_value - success_chance
    fail_band = 1.0 - success_chance
    if fail_margin <= fail_band * PARTIAL_BAND:
        return OutcomeGrade.PARTIAL_SUCCESS
    return OutcomeGrade.FAIL


class MissionResolver:
    def __init__(
        self,
        trait_catalog: Optional[Mapping[str, TraitTemplate]] = None,
        clamp_injury_penalty: bool = True,
    ) -> None:
        self._trait_catalog = dict(trait_catalog or {})
        self._clamp_injury_penalty = clamp_injury_penalty

    def resolve(self, request: ResolveRequest) -> ResolveResult:
        quest = request.quest
        party = request.party
        options = request.options
        if quest is None:
            raise InvalidArgumentError("request.quest is required")
        if party is None:
            raise InvalidArgumentError("request.party is required")

        audit = _AuditLog(quest.quest_id)
        effective_difficulty = max(
            1.0, quest.assessed_difficulty * options.global_difficulty_multiplier
        )

        party_power = self.calculate_party_power(
            party, audit, use_traits=options.enable_trait_effects
        )
        score = party_power / effective_difficulty
        logistic = logistic_chance(score)
        penalty = deadline_penalty(quest.expire_day, request.day_index)
        final_chance = max(MIN_SUCCESS_CHANCE, min(logistic - penalty, MAX_SUCCESS_CHANCE))

        audit.add(
            f"Difficulty={effective_difficulty:.2f}, PartyPower={party_power:.2f}, "
            f"Score={score:.2f}"
        )
        audit.add(
            f"Logistic={logistic:.3f}, DeadlinePenalty={penalty:.3f}, "
            f"FinalChance={final_chance:.3f}"
        )

        rng = random.Random(request.seed)
        roll_value = rng.random()
        grade = determine_grade(final_chance, roll_value, options.critical_success_bonus)
        audit.add(f"Roll={roll_value:.3f}, Grade={grade.value}")

        rewards = self.build_reward_package(quest.base_reward, grade)
        injuries = self.build_injury_package(
            party,
            grade,
            rng,
            options.enable_injury_simulation,
            audit,
            trait_catalog=self._trait_catalog if options.enable_trait_effects else None,
        )
        fatigue = self.build_fatigue_package(party, quest, grade)
        audit.add(
            f"Rewards: gold={rewards.gold}, reputation={rewards.reputation}; "
            f"Injuries={len(injuries)}; FatigueDelta={fatigue.fatigue_delta}"
        )

        outcome = MissionOutcome(
            quest_id=quest.quest_id,
            party_id=party.party_id,
            is_success=grade != OutcomeGrade.FAIL,
            grade=grade,
            success_chance=final_chance,
            roll_value=roll_value,
            rewards=rewards,
            injuries=injuries,
            resolved_day=request.day_index,
        )

        return ResolveResult(
            outcome=outcome,
            final_success_chance=final_chance,
            grade=grade,
            rewards=rewards,
            injuries=injuries,
            fatigue=fatigue,
            logs=tuple(audit.entries),
            consumed_seed=request.seed,
        )

    # === 전력 ===

    def calculate_member_power(self, member: AdventurerState, use_traits: bool = True) -> float:
        s = member.effective_stats(self._trait_catalog if use_traits else None)

        combat = sum(getattr(s, stat) * w for stat, w in COMBAT_WEIGHTS.items())
        exploration = sum(getattr(s, stat) * w for stat, w in EXPLORATION_WEIGHTS.items())
        stability = (
            s.morale * MORALE_WEIGHT
            + (s.current_hp / max(1, s.max_hp)) * HP_RATIO_WEIGHT
            + s.stamina * STAMINA_WEIGHT
        )

        fatigue_penalty = 1.0 - member.fatigue / FATIGUE_DIVISOR
        if member.injury.is_injured:
            injury_penalty = 1.0 - member.injury.severity * INJURY_SEVERITY_PENALTY
            if self._clamp_injury_penalty:
                injury_penalty = max(0.0, injury_penalty)
        else:
            injury_penalty = 1.0
        level_bonus = 1.0 + member.level * LEVEL_BONUS

        power = (combat + exploration + stability) * fatigue_penalty * injury_penalty * level_bonus
        return max(1.0, power)

    def calculate_party_power(
        self, party: Party, audit: Optional[_AuditLog] = None, use_traits: bool = True
    ) -> float:
        if len(party) == 0:
            if audit is not None:
                audit.add(f"Party has no members. Fallback power={EMPTY_PARTY_POWER:g}.")
            return EMPTY_PARTY_POWER

        total = 0.0
        for member in party:
            power = self.calculate_member_power(member, use_traits)
            if audit is not None:
                audit.add(f"Member {member.adventurer_id}: power={power:.2f}")
            total += power

        # 파티 시너지: 인원당 +3%, 최대 +15%
        synergy = 1.0 + min(MAX_SYNERGY, len(party) * SYNERGY_PER_MEMBER)
        return total * synergy

    # === 결과 패키지 ===

    @staticmethod
    def build_reward_package(base_reward: RewardPackage, grade: OutcomeGrade) -> RewardPackage:
        multiplier = REWARD_MULTIPLIERS[grade]
        return base_reward.scaled(multiplier, multiplier)

    @staticmethod
    def build_injury_package(
        party: Party,
        grade: OutcomeGrade,
        rng: random.Random,
        enable_injury_simulation: bool,
        audit: Optional[_AuditLog] = None,
        trait_catalog: Optional[Mapping[str, TraitTemplate]] = None,
    ) -> InjuryPackage:
        """부상 저항은 전력 계산과 같은 능력치(특성 반영)를 쓴다."""
        if not enable_injury_simulation or grade == OutcomeGrade.CRITICAL_SUCCESS:
            return InjuryPackage()

        base_severity = BASE_INJURY_SEVERITY[grade]
        injuries: list[InjuryInfo] = []
        for member in party:
            resist = member.effective_stats(trait_catalog).injury_resist
            resist_factor = 1.0 - resist / INJURY_RESIST_DIVISOR
            if rng.random() < INJURY_CHANCE * resist_factor:
                severity = max(
                    MIN_INJURY_SEVERITY,
                    min(base_severity + rng.randint(-1, 1), MAX_INJURY_SEVERITY),
                )
                injuries.append(
                    InjuryInfo(
                        severity=severity,
                        description=f"{member.name} suffered mission injury.",
                        adventurer_id=member.adventurer_id,
                    )
                )
                if audit is not None:
                    audit.add(f"Injury: {member.adventurer_id} severity={severity}")
        return InjuryPackage(tuple(injuries))

    @staticmethod
    def build_fatigue_package(
        party: Party, quest: QuestInstance, grade: OutcomeGrade
    ) -> FatiguePackage:
        mission_load = quest.assessed_difficulty * MISSION_LOAD_PER_DIFFICULTY
        grade_load = GRADE_FATIGUE_LOAD[grade]
        reduction = min(MAX_LOAD_REDUCTION, len(party) * LOAD_REDUCTION_PER_MEMBER)
        delta = max(MIN_FATIGUE_DELTA, int(round(mission_load + grade_load - reduction)))
        return FatiguePackage(delta)
