"""정적 템플릿 레코드 (퀘스트, 모험가, 특성, 보상표, 지역 프로필)

호스트가 로드/검증해 넘겨주는 읽기 전용 데이터. 코어는 재검증하지 않고
validation_warnings()로 권고성 경고만 남긴다 (생성을 막지 않음).
"""

from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from guildhall.core.guild.adventurer import AdventurerState
from guildhall.core.guild.enums import QuestCategory, QuestRank, RoleType
from guildhall.core.guild.models import RewardPackage, StatBlock, TraitRuntime
from guildhall.core.guild.quest_instance import QuestInstance
from guildhall.core.logging import get_logger

logger = get_logger(__name__)

UNKNOWN_LOCATION_ID = "unknown"
GOLD_PER_POWER = 12
MIN_FALLBACK_GOLD = 10


class TemplateModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    def validation_warnings(self) -> list[str]:
        return []

    def log_warnings(self) -> list[str]:
        """경고를 WARNING 로그로 남기고 그대로 반환"""
        warnings = self.validation_warnings()
        for message in warnings:
            logger.warning(message)
        return warnings


class TraitTemplate(TemplateModel):
    """특성 정의: 능력치 보너스 + 피로 배율"""

    trait_id: str = ""
    trait_name: str = ""
    description: str = ""

    # 전투
    attack_bonus: int = 0
    defense_bonus: int = 0
    magic_bonus: int = 0
    support_bonus: int = 0
    # 탐험
    detection_bonus: int = 0
    mobility_bonus: int = 0
    survival_bonus: int = 0
    morale_bonus: int = 0
    # 내구
    max_hp_bonus: int = 0
    stamina_bonus: int = 0
    stress_resist_bonus: int = 0
    injury_resist_bonus: int = 0
    carry_capacity_bonus: int = 0

    fatigue_rate_modifier: float = 1.0

    def stat_bonus(self) -> StatBlock:
        # 최대 HP 보너스는 현재 HP에도 같이 더해 HP 비율이 떨어지지 않게 한다
        return StatBlock(
            attack=self.attack_bonus,
            defense=self.defense_bonus,
            magic=self.magic_bonus,
            support=self.support_bonus,
            detection=self.detection_bonus,
            mobility=self.mobility_bonus,
            survival=self.survival_bonus,
            morale=self.morale_bonus,
            max_hp=self.max_hp_bonus,
            current_hp=self.max_hp_bonus,
            stamina=self.stamina_bonus,
            stress_resist=self.stress_resist_bonus,
            injury_resist=self.injury_resist_bonus,
            carry_capacity=self.carry_capacity_bonus,
        )

    def validation_warnings(self) -> list[str]:
        warnings = []
        if not self.trait_id.strip():
            warnings.append("TraitTemplate.trait_id should not be empty.")
        if not self.trait_name.strip():
            warnings.append("TraitTemplate.trait_name should not be empty.")
        if self.fatigue_rate_modifier <= 0:
            warnings.append("TraitTemplate.fatigue_rate_modifier should be greater than zero.")
        return warnings


class RewardTable(TemplateModel):
    gold: int = 0
    reputation: int = 0
    items: list[str] = Field(default_factory=list)

    @field_validator("gold", "reputation")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        return max(0, value)

    def to_package(self) -> RewardPackage:
        return RewardPackage(gold=self.gold, reputation=self.reputation, items=tuple(self.items))


class LocationProfile(TemplateModel):
    location_id: str = ""
    location_name: str = ""
    difficulty_multiplier: float = 1.0
    default_environment_tags: list[str] = Field(default_factory=list)

    def validation_warnings(self) -> list[str]:
        warnings = []
        if not self.location_id.strip():
            warnings.append("LocationProfile.location_id should not be empty.")
        if not self.location_name.strip():
            warnings.append("LocationProfile.location_name should not be empty.")
        if self.difficulty_multiplier <= 0:
            warnings.append("LocationProfile.difficulty_multiplier should be greater than zero.")
        return warnings


class QuestTemplate(TemplateModel):
    quest_id: str = ""
    display_name: str = ""
    category: QuestCategory = QuestCategory.HUNT
    base_rank: QuestRank = QuestRank.F
    recommended_power: int = 0
    reward_table: Optional[RewardTable] = None
    location_profile: Optional[LocationProfile] = None
    time_limit_days: int = 1

    def validation_warnings(self) -> list[str]:
        warnings = []
        if not self.quest_id.strip():
            warnings.append("QuestTemplate.quest_id should not be empty.")
        if self.time_limit_days <= 0:
            warnings.append("QuestTemplate.time_limit_days should be greater than zero.")
        if self.location_profile is not None:
            warnings.extend(self.location_profile.validation_warnings())
        return warnings


class AdventurerTemplate(TemplateModel):
    adventurer_id: str = ""
    name: str = ""
    base_role: RoleType = RoleType.UTILITY
    base_stats: StatBlock = Field(default_factory=StatBlock)
    default_traits: list[TraitTemplate] = Field(default_factory=list)

    def validation_warnings(self) -> list[str]:
        warnings = []
        if not self.adventurer_id.strip():
            warnings.append("AdventurerTemplate.adventurer_id should not be empty.")
        if self.base_stats.max_hp <= 0:
            warnings.append("AdventurerTemplate.base_stats.max_hp should be greater than zero.")
        for trait in self.default_traits:
            warnings.extend(trait.validation_warnings())
        return warnings


def build_base_reward(template: QuestTemplate) -> RewardPackage:
    """보상표가 있으면 그대로, 없으면 추천 전력과 랭크로 기본 보상 산출"""
    if template.reward_table is not None:
        return template.reward_table.to_package()
    return RewardPackage(
        gold=max(MIN_FALLBACK_GOLD, template.recommended_power * GOLD_PER_POWER),
        reputation=max(1, template.base_rank.ordinal + 1),
    )


def build_quest_instance(
    template: QuestTemplate, day_index: int, instance_id: Optional[str] = None
) -> QuestInstance:
    template.log_warnings()

    quest_id = instance_id or template.quest_id.strip() or uuid.uuid4().hex
    time_limit_days = max(1, template.time_limit_days)
    profile = template.location_profile

    return QuestInstance(
        quest_id=quest_id,
        template_id=template.quest_id or quest_id,
        title=template.display_name,
        category=template.category,
        base_difficulty=max(1.0, float(template.recommended_power)),
        issued_day=day_index,
        expire_day=day_index + time_limit_days,
        time_limit_days=time_limit_days,
        location_id=(profile.location_id or UNKNOWN_LOCATION_ID) if profile else UNKNOWN_LOCATION_ID,
        environment_tags=profile.default_environment_tags if profile else (),
        base_reward=build_base_reward(template),
    )


def build_adventurer_state(template: AdventurerTemplate) -> AdventurerState:
    template.log_warnings()

    return AdventurerState(
        adventurer_id=template.adventurer_id.strip() or uuid.uuid4().hex,
        name=template.name,
        role=template.base_role,
        stats=template.base_stats,
        level=1,
        experience=0,
        traits=[
            TraitRuntime(trait_id=t.trait_id, magnitude=1.0)
            for t in template.default_traits
            if t.trait_id
        ],
    )


def build_trait_catalog(*templates: AdventurerTemplate) -> dict[str, TraitTemplate]:
    """모험가 템플릿들의 기본 특성을 ID별 카탈로그로 모은다 (먼저 나온 정의 우선)"""
    catalog: dict[str, TraitTemplate] = {}
    for template in templates:
        for trait in template.default_traits:
            if trait.trait_id and trait.trait_id not in catalog:
                catalog[trait.trait_id] = trait
    return catalog


def build_location_multipliers(*templates: QuestTemplate) -> dict[str, float]:
    multipliers: dict[str, float] = {}
    for template in templates:
        profile = template.location_profile
        if profile is not None and profile.location_id:
            multipliers.setdefault(profile.location_id, profile.difficulty_multiplier)
    return multipliers
