"""모험가 런타임 상태

가용 상태 머신: IDLE → ASSIGNED → IN_PROGRESS, 부상 시 언제든 RECOVERY.
회복(recover)은 부상이 없으면 배정 중이어도 IDLE로 되돌린다.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Mapping, Optional

from guildhall.core.errors import InvalidArgumentError
from guildhall.core.guild.enums import AdventurerAvailability, RoleType
from guildhall.core.guild.models import (
    InjuryInfo,
    InjuryStatus,
    RecoveryPackage,
    StatBlock,
    TraitRuntime,
    TransitionResult,
)
from guildhall.core.logging import get_logger

if TYPE_CHECKING:
    from guildhall.core.guild.templates import TraitTemplate

logger = get_logger(__name__)

MAX_FATIGUE = 100
EXPERIENCE_PER_LEVEL = 100


def experience_for_next_level(level: int) -> int:
    """다음 레벨까지 필요한 경험치 (레벨 × 100)"""
    return max(1, level) * EXPERIENCE_PER_LEVEL


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


class AdventurerState:
    """로스터가 소유하는 가변 모험가 엔티티"""

    def __init__(
        self,
        adventurer_id: str,
        name: str,
        role: RoleType,
        stats: StatBlock,
        level: int = 1,
        experience: int = 0,
        traits: Iterable[TraitRuntime] = (),
    ) -> None:
        if not adventurer_id or not adventurer_id.strip():
            raise InvalidArgumentError("adventurer_id is required")

        self._adventurer_id = adventurer_id
        self._name = name
        self._role = role
        self.level = level
        self.experience = max(0, experience)
        self.stats = stats
        self._traits: tuple[TraitRuntime, ...] = tuple(traits)

        self.fatigue: int = 0
        self.injury = InjuryStatus()
        self.availability = AdventurerAvailability.IDLE
        self.last_quest_id: Optional[str] = None

    def __repr__(self) -> str:
        return (
            f"AdventurerState(id={self._adventurer_id!r}, "
            f"availability={self.availability.value}, fatigue={self.fatigue})"
        )

    @property
    def adventurer_id(self) -> str:
        return self._adventurer_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def role(self) -> RoleType:
        return self._role

    @property
    def traits(self) -> tuple[TraitRuntime, ...]:
        return self._traits

    # === 상태 변경 ===

    def apply_fatigue(self, delta: int) -> int:
        """피로 증감. 결과는 항상 [0, 100]. 가용 상태는 바꾸지 않는다."""
        self.fatigue = _clamp(self.fatigue + delta, 0, MAX_FATIGUE)
        return self.fatigue

    def apply_injury(self, info: InjuryInfo) -> None:
        """부상 적용. 배정/진행 중이어도 즉시 RECOVERY로 전환(인터럽트)."""
        self.injury = InjuryStatus(
            is_injured=True, severity=max(self.injury.severity, info.severity)
        )
        previous = self.availability
        self.availability = AdventurerAvailability.RECOVERY
        logger.debug(
            "Adventurer %s injured (severity=%d): %s -> recovery",
            self._adventurer_id,
            self.injury.severity,
            previous.value,
        )

    def recover(self, package: RecoveryPackage) -> None:
        """피로/HP 회복.

        피로 0 + 심각도 1 이하면 부상 완치.
        부상이 없으면 배정 여부와 관계없이 IDLE로 강제 복귀한다.
        """
        self.fatigue = _clamp(self.fatigue - package.fatigue_recovery, 0, MAX_FATIGUE)
        self.stats = self.stats.with_current_hp(self.stats.current_hp + package.hp_recovery)

        if self.fatigue == 0 and self.injury.is_injured and self.injury.severity <= 1:
            self.injury = InjuryStatus()
            logger.debug("Adventurer %s injury healed", self._adventurer_id)

        if not self.injury.is_injured:
            self.availability = AdventurerAvailability.IDLE
            self.last_quest_id = None

    def apply_reward_experience(self, exp: int) -> int:
        """경험치 적용 후 레벨업 처리. 반환: 오른 레벨 수"""
        self.experience = max(0, self.experience + exp)

        gained = 0
        while self.experience >= experience_for_next_level(self.level):
            self.experience -= experience_for_next_level(self.level)
            self.level += 1
            gained += 1

        if gained:
            logger.info(
                "Adventurer %s leveled up to %d (+%d)",
                self._adventurer_id,
                self.level,
                gained,
            )
        return gained

    # === 퀘스트 배정 ===

    def is_deployable(self) -> bool:
        return (
            self.availability == AdventurerAvailability.IDLE
            and self.fatigue < MAX_FATIGUE
            and not self.injury.is_injured
        )

    def assign_to_quest(self, quest_id: str) -> TransitionResult:
        current = self.availability
        target = AdventurerAvailability.ASSIGNED
        if not self.is_deployable():
            reason = (
                f"Adventurer {self._adventurer_id} is not deployable "
                f"(availability={current.value}, fatigue={self.fatigue}, "
                f"injured={self.injury.is_injured})"
            )
            logger.warning(reason)
            return TransitionResult.fail(current, target, reason)

        self.last_quest_id = quest_id
        self.availability = target
        return TransitionResult.ok(current, target)

    def mark_in_progress(self) -> TransitionResult:
        current = self.availability
        target = AdventurerAvailability.IN_PROGRESS
        if current != AdventurerAvailability.ASSIGNED:
            reason = f"Cannot transition {current.value} -> {target.value}"
            logger.warning("Adventurer %s: %s", self._adventurer_id, reason)
            return TransitionResult.fail(current, target, reason)

        self.availability = target
        return TransitionResult.ok(current, target)

    def release_from_quest(self) -> None:
        self.last_quest_id = None
        self.availability = (
            AdventurerAvailability.RECOVERY
            if self.injury.is_injured
            else AdventurerAvailability.IDLE
        )

    # === 조회 ===

    def effective_stats(
        self, trait_catalog: Optional[Mapping[str, TraitTemplate]] = None
    ) -> StatBlock:
        """특성 보너스를 반영한 능력치. 카탈로그에 없는 특성은 무시한다."""
        if not trait_catalog:
            return self.stats

        total = self.stats
        for trait in self._traits:
            template = trait_catalog.get(trait.trait_id)
            if template is None:
                continue
            total = total + template.stat_bonus().scaled(trait.magnitude)
        return total
