"""길드 도메인 값 타입 (불변, 동작 없음)"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping, Optional

from guildhall.core.errors import InvalidStateError
from guildhall.core.guild.enums import OutcomeGrade

if TYPE_CHECKING:
    from guildhall.config import Settings


@dataclass(frozen=True)
class StatBlock:
    """모험가 능력치 14종. 0 <= current_hp <= max_hp"""

    # 전투
    attack: int = 0
    defense: int = 0
    magic: int = 0
    support: int = 0
    # 탐험
    detection: int = 0
    mobility: int = 0
    survival: int = 0
    morale: int = 0
    # 내구
    max_hp: int = 0
    current_hp: int = 0
    stamina: int = 0
    stress_resist: int = 0
    injury_resist: int = 0
    carry_capacity: int = 0

    def __add__(self, other: StatBlock) -> StatBlock:
        if not isinstance(other, StatBlock):
            return NotImplemented
        return StatBlock(
            **{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)}
        )

    @property
    def hp_ratio(self) -> float:
        """현재 HP 비율. max_hp <= 0 이면 0.0"""
        if self.max_hp <= 0:
            return 0.0
        return self.current_hp / self.max_hp

    def scaled(self, factor: float) -> StatBlock:
        """모든 필드에 배율을 곱해 반올림한 사본 (특성 보너스 강도 적용용)"""
        return StatBlock(
            **{f.name: int(round(getattr(self, f.name) * factor)) for f in fields(self)}
        )

    def with_current_hp(self, hp: int) -> StatBlock:
        """current_hp만 [0, max_hp]로 클램프해 교체한 사본"""
        return replace(self, current_hp=max(0, min(hp, self.max_hp)))


@dataclass(frozen=True)
class RewardPackage:
    """퀘스트 보상: 골드, 명성, 아이템 ID 목록"""

    gold: int = 0
    reputation: int = 0
    items: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    def scaled(self, gold_factor: float, reputation_factor: float) -> RewardPackage:
        """골드/명성에 배율을 곱해 가장 가까운 정수로 반올림 (짝수 반올림)"""
        return RewardPackage(
            gold=int(round(self.gold * gold_factor)),
            reputation=int(round(self.reputation * reputation_factor)),
            items=self.items,
        )


@dataclass(frozen=True)
class InjuryInfo:
    severity: int
    description: str = ""
    adventurer_id: Optional[str] = None


@dataclass(frozen=True)
class InjuryPackage:
    injuries: tuple[InjuryInfo, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "injuries", tuple(self.injuries))

    def __len__(self) -> int:
        return len(self.injuries)

    def for_adventurer(self, adventurer_id: str) -> list[InjuryInfo]:
        return [i for i in self.injuries if i.adventurer_id == adventurer_id]


@dataclass(frozen=True)
class InjuryStatus:
    is_injured: bool = False
    severity: int = 0


@dataclass(frozen=True)
class FatiguePackage:
    """파티 전원에게 동일하게 적용되는 피로 증가량"""

    fatigue_delta: int = 0


@dataclass(frozen=True)
class RecoveryPackage:
    fatigue_recovery: int = 0
    hp_recovery: int = 0


@dataclass(frozen=True)
class TraitRuntime:
    trait_id: str
    magnitude: float = 1.0


@dataclass(frozen=True)
class ResolveOptions:
    enable_trait_effects: bool = True
    enable_injury_simulation: bool = True
    global_difficulty_multiplier: float = 1.0
    critical_success_bonus: float = 0.0

    @classmethod
    def preview(cls) -> ResolveOptions:
        """매칭 미리보기용: 부상 시뮬레이션 끔"""
        return cls(enable_injury_simulation=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> ResolveOptions:
        return cls(
            enable_trait_effects=settings.ENABLE_TRAIT_EFFECTS,
            enable_injury_simulation=settings.ENABLE_INJURY_SIMULATION,
            global_difficulty_multiplier=settings.GLOBAL_DIFFICULTY_MULTIPLIER,
            critical_success_bonus=settings.CRITICAL_SUCCESS_BONUS,
        )


@dataclass(frozen=True)
class ResolveLogEntry:
    message: str


@dataclass(frozen=True)
class MissionOutcome:
    quest_id: str
    party_id: str
    is_success: bool
    grade: OutcomeGrade
    success_chance: float
    roll_value: float
    rewards: RewardPackage = field(default_factory=RewardPackage)
    injuries: InjuryPackage = field(default_factory=InjuryPackage)
    resolved_day: int = 0


@dataclass(frozen=True)
class WorldStateSnapshot:
    """평가/판정 호출마다 새로 전달되는 세계 상태. 코어는 변경하지 않는다."""

    day_index: int = 0
    weather_severity: float = 0.0
    global_risk_level: float = 0.0
    location_risk_by_id: Mapping[str, float] = field(default_factory=dict)
    active_world_tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "location_risk_by_id",
            MappingProxyType(dict(self.location_risk_by_id or {})),
        )
        object.__setattr__(self, "active_world_tags", tuple(self.active_world_tags or ()))

    def __hash__(self) -> int:
        # MappingProxyType은 해시 불가
        return hash(
            (
                self.day_index,
                self.weather_severity,
                self.global_risk_level,
                frozenset(self.location_risk_by_id.items()),
                self.active_world_tags,
            )
        )

    def location_risk(self, location_id: Optional[str]) -> float:
        if not location_id or not location_id.strip():
            return 0.0
        return self.location_risk_by_id.get(location_id, 0.0)


@dataclass(frozen=True)
class TransitionResult:
    """상태 전이 결과. 실패 시 엔티티는 호출 전 상태 그대로다."""

    success: bool
    from_state: Optional[Enum] = None
    to_state: Optional[Enum] = None
    reason: str = ""

    @classmethod
    def ok(cls, from_state: Enum, to_state: Enum) -> TransitionResult:
        return cls(success=True, from_state=from_state, to_state=to_state)

    @classmethod
    def fail(cls, from_state: Enum, to_state: Enum, reason: str) -> TransitionResult:
        return cls(success=False, from_state=from_state, to_state=to_state, reason=reason)

    def __bool__(self) -> bool:
        return self.success

    def raise_if_failed(self) -> TransitionResult:
        if not self.success:
            raise InvalidStateError(self.reason)
        return self
