"""퀘스트 평가: 세계 상태를 반영한 체감 난이도, 추천 랭크, 위험도, 예상 보상

순수 계산. 환경 보정과 위험도 산정은 교체 가능한 전략 객체로 분리한다.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping, Optional

from guildhall.core.guild.enums import QuestCategory, QuestRank
from guildhall.core.guild.models import RewardPackage, WorldStateSnapshot
from guildhall.core.guild.quest_instance import QuestInstance
from guildhall.core.logging import get_logger

logger = get_logger(__name__)

# === 환경 보정 계수 ===
WEATHER_WEIGHT = 0.15
GLOBAL_RISK_WEIGHT = 0.20
LOCATION_RISK_WEIGHT = 0.30
TAG_OVERLAP_WEIGHT = 0.05
MIN_ENVIRONMENT_MODIFIER = 0.75
MAX_ENVIRONMENT_MODIFIER = 2.5

# === 위험도 ===
DIFFICULTY_RISK_DIVISOR = 120.0
MIN_TIME_PRESSURE = 0.02
MAX_TIME_PRESSURE = 0.35
EXPIRED_RISK = 0.25
SPECIAL_CATEGORY_RISK = 0.12

# === 랭크 경계 (상한 미포함) ===
RANK_THRESHOLDS: list[tuple[float, QuestRank]] = [
    (15.0, QuestRank.F),
    (30.0, QuestRank.E),
    (45.0, QuestRank.D),
    (65.0, QuestRank.C),
    (85.0, QuestRank.B),
    (110.0, QuestRank.A),
]

# === 예상 보상 ===
REWARD_RISK_SCALE = 0.35
MIN_REWARD_SCALE = 0.6
MAX_REWARD_SCALE = 2.4
REPUTATION_BASE_SCALE = 0.85
REPUTATION_RISK_SCALE = 0.45


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


class EnvironmentDifficultyModifier(ABC):
    @abstractmethod
    def get_modifier(self, quest: QuestInstance, world: WorldStateSnapshot) -> float:
        """난이도에 곱할 환경 배율"""
        ...


class QuestRiskModel(ABC):
    @abstractmethod
    def evaluate_risk(
        self,
        quest: QuestInstance,
        world: WorldStateSnapshot,
        assessed_difficulty: float,
    ) -> float:
        """위험도 (0.0~1.0)"""
        ...


def count_threat_tags(quest_tags: tuple[str, ...], world_tags: tuple[str, ...]) -> int:
    """퀘스트 환경 태그 중 현재 세계 태그와 겹치는 개수 (대소문자 무시)"""
    if not quest_tags or not world_tags:
        return 0
    active = {tag.casefold() for tag in world_tags}
    return sum(1 for tag in quest_tags if tag.casefold() in active)


class DefaultEnvironmentDifficultyModifier(EnvironmentDifficultyModifier):
    """날씨 × 전역 위험 × 지역 위험 × 태그 중첩, [0.75, 2.5]로 클램프"""

    def raw_modifier(self, quest: QuestInstance, world: WorldStateSnapshot) -> float:
        weather = 1.0 + world.weather_severity * WEATHER_WEIGHT
        global_risk = 1.0 + world.global_risk_level * GLOBAL_RISK_WEIGHT
        location = 1.0 + world.location_risk(quest.location_id) * LOCATION_RISK_WEIGHT
        tags = 1.0 + (
            count_threat_tags(quest.environment_tags, world.active_world_tags)
            * TAG_OVERLAP_WEIGHT
        )
        return weather * global_risk * location * tags

    def get_modifier(self, quest: QuestInstance, world: WorldStateSnapshot) -> float:
        return _clamp(
            self.raw_modifier(quest, world),
            MIN_ENVIRONMENT_MODIFIER,
            MAX_ENVIRONMENT_MODIFIER,
        )


class LocationProfileModifier(DefaultEnvironmentDifficultyModifier):
    """지역 프로필의 난이도 배율을 기본 환경 배율에 곱한다 (클램프 전)."""

    def __init__(self, multiplier_by_location: Mapping[str, float]) -> None:
        self._multipliers = dict(multiplier_by_location)

    def get_modifier(self, quest: QuestInstance, world: WorldStateSnapshot) -> float:
        multiplier = self._multipliers.get(quest.location_id, 1.0)
        if multiplier <= 0:
            logger.warning(
                "Location %s has non-positive multiplier %.2f, ignored",
                quest.location_id,
                multiplier,
            )
            multiplier = 1.0
        return _clamp(
            self.raw_modifier(quest, world) * multiplier,
            MIN_ENVIRONMENT_MODIFIER,
            MAX_ENVIRONMENT_MODIFIER,
        )


class DefaultQuestRiskModel(QuestRiskModel):
    def evaluate_risk(
        self,
        quest: QuestInstance,
        world: WorldStateSnapshot,
        assessed_difficulty: float,
    ) -> float:
        difficulty_risk = assessed_difficulty / DIFFICULTY_RISK_DIVISOR
        if quest.time_limit_days <= 0:
            time_pressure = MAX_TIME_PRESSURE
        else:
            time_pressure = _clamp(
                1.0 / quest.time_limit_days, MIN_TIME_PRESSURE, MAX_TIME_PRESSURE
            )
        expiration = EXPIRED_RISK if world.day_index >= quest.expire_day else 0.0
        category = SPECIAL_CATEGORY_RISK if quest.category == QuestCategory.SPECIAL else 0.0

        return _clamp(difficulty_risk + time_pressure + expiration + category, 0.0, 1.0)


def recommend_rank(assessed_difficulty: float) -> QuestRank:
    for upper, rank in RANK_THRESHOLDS:
        if assessed_difficulty < upper:
            return rank
    return QuestRank.S


def build_expected_reward(
    base_reward: RewardPackage,
    risk_score: float,
    assessed_difficulty: float,
    base_difficulty: float,
) -> RewardPackage:
    """골드는 난이도 배율 × 위험 배율 ([0.6, 2.4]), 명성은 0.85 + 위험도 × 0.45"""
    difficulty_scale = assessed_difficulty / max(1.0, base_difficulty)
    risk_scale = 1.0 + risk_score * REWARD_RISK_SCALE
    total_scale = _clamp(difficulty_scale * risk_scale, MIN_REWARD_SCALE, MAX_REWARD_SCALE)
    return base_reward.scaled(
        gold_factor=total_scale,
        reputation_factor=REPUTATION_BASE_SCALE + risk_score * REPUTATION_RISK_SCALE,
    )


class QuestAssessmentService:
    def __init__(
        self,
        environment_modifier: Optional[EnvironmentDifficultyModifier] = None,
        risk_model: Optional[QuestRiskModel] = None,
    ) -> None:
        self._environment_modifier = (
            environment_modifier or DefaultEnvironmentDifficultyModifier()
        )
        self._risk_model = risk_model or DefaultQuestRiskModel()

    def assess(self, quest: QuestInstance, world: WorldStateSnapshot) -> float:
        """체감 난이도 = max(1, 기본 난이도 × 환경 배율)"""
        base_difficulty = max(1.0, quest.base_difficulty)
        modifier = self._environment_modifier.get_modifier(quest, world)
        return max(1.0, base_difficulty * modifier)

    def recommend_rank(self, quest: QuestInstance, assessed_difficulty: float) -> QuestRank:
        return recommend_rank(assessed_difficulty)

    def apply_assessment(self, quest: QuestInstance, world: WorldStateSnapshot) -> None:
        assessed_difficulty = self.assess(quest, world)
        rank = self.recommend_rank(quest, assessed_difficulty)
        risk_score = self._risk_model.evaluate_risk(quest, world, assessed_difficulty)
        expected_reward = build_expected_reward(
            quest.base_reward, risk_score, assessed_difficulty, quest.base_difficulty
        )

        quest.apply_assessment(
            assessed_difficulty=assessed_difficulty,
            recommended_rank=rank,
            risk_score=risk_score,
            expected_reward=expected_reward,
        )
        logger.debug(
            "Assessed quest %s: difficulty=%.2f rank=%s risk=%.3f gold=%d",
            quest.quest_id,
            assessed_difficulty,
            rank.value,
            risk_score,
            expected_reward.gold,
        )
