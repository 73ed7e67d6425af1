"""길드 관리 Core 패키지"""

from guildhall.core.guild.adventurer import AdventurerState, experience_for_next_level
from guildhall.core.guild.assessment import (
    DefaultEnvironmentDifficultyModifier,
    DefaultQuestRiskModel,
    EnvironmentDifficultyModifier,
    LocationProfileModifier,
    QuestAssessmentService,
    QuestRiskModel,
    recommend_rank,
)
from guildhall.core.guild.board import QuestBoard
from guildhall.core.guild.enums import (
    AdventurerAvailability,
    OutcomeGrade,
    QuestCategory,
    QuestRank,
    QuestState,
    RoleType,
)
from guildhall.core.guild.models import (
    FatiguePackage,
    InjuryInfo,
    InjuryPackage,
    InjuryStatus,
    MissionOutcome,
    RecoveryPackage,
    ResolveLogEntry,
    ResolveOptions,
    RewardPackage,
    StatBlock,
    TraitRuntime,
    TransitionResult,
    WorldStateSnapshot,
)
from guildhall.core.guild.party import Party
from guildhall.core.guild.planner import AssignmentPlanner
from guildhall.core.guild.quest_instance import QuestInstance
from guildhall.core.guild.resolver import MissionResolver, ResolveRequest, ResolveResult
from guildhall.core.guild.roster import AdventurerRoster
from guildhall.core.guild.templates import (
    AdventurerTemplate,
    LocationProfile,
    QuestTemplate,
    RewardTable,
    TraitTemplate,
    build_adventurer_state,
    build_quest_instance,
)

__all__ = [
    # enums
    "QuestState",
    "QuestRank",
    "OutcomeGrade",
    "RoleType",
    "AdventurerAvailability",
    "QuestCategory",
    # models
    "StatBlock",
    "RewardPackage",
    "InjuryInfo",
    "InjuryPackage",
    "InjuryStatus",
    "FatiguePackage",
    "RecoveryPackage",
    "TraitRuntime",
    "ResolveOptions",
    "ResolveLogEntry",
    "MissionOutcome",
    "WorldStateSnapshot",
    "TransitionResult",
    # entities
    "AdventurerState",
    "experience_for_next_level",
    "AdventurerRoster",
    "Party",
    "QuestInstance",
    # services
    "EnvironmentDifficultyModifier",
    "QuestRiskModel",
    "DefaultEnvironmentDifficultyModifier",
    "DefaultQuestRiskModel",
    "LocationProfileModifier",
    "QuestAssessmentService",
    "recommend_rank",
    "QuestBoard",
    "AssignmentPlanner",
    "MissionResolver",
    "ResolveRequest",
    "ResolveResult",
    # templates
    "TraitTemplate",
    "RewardTable",
    "LocationProfile",
    "QuestTemplate",
    "AdventurerTemplate",
    "build_quest_instance",
    "build_adventurer_state",
]
