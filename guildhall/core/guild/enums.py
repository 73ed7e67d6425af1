"""길드 도메인 열거형"""

from enum import Enum


class QuestState(str, Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    ARCHIVED = "archived"


class QuestRank(str, Enum):
    """F가 최저, S가 최고"""

    F = "F"
    E = "E"
    D = "D"
    C = "C"
    B = "B"
    A = "A"
    S = "S"

    @property
    def ordinal(self) -> int:
        return list(QuestRank).index(self)


class OutcomeGrade(str, Enum):
    CRITICAL_SUCCESS = "critical_success"
    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    FAIL = "fail"


class RoleType(str, Enum):
    TANK = "tank"
    DEALER = "dealer"
    SUPPORT = "support"
    SCOUT = "scout"
    UTILITY = "utility"


class AdventurerAvailability(str, Enum):
    IDLE = "idle"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    RECOVERY = "recovery"


class QuestCategory(str, Enum):
    HUNT = "hunt"
    ESCORT = "escort"
    EXPLORE = "explore"
    DELIVERY = "delivery"
    SPECIAL = "special"
