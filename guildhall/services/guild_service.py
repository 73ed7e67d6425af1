"""길드 Service: 보드/로스터/플래너/판정기 조합, 판정 결과 반영, EventBus 통지

판정기(MissionResolver)는 순수 계산만 하므로
퀘스트 상태 전이와 모험가 피로/부상/경험치 반영은 여기서 수행한다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Union

from guildhall.config import Settings
from guildhall.config import settings as default_settings
from guildhall.core.errors import InvalidArgumentError, InvalidStateError, NotFoundError
from guildhall.core.event_bus import EventBus
from guildhall.core.events import MissionResolvedEvent, QuestArchivedEvent, QuestAssignedEvent
from guildhall.core.guild.adventurer import AdventurerState
from guildhall.core.guild.assessment import QuestAssessmentService
from guildhall.core.guild.board import QuestBoard
from guildhall.core.guild.enums import AdventurerAvailability, OutcomeGrade, QuestState
from guildhall.core.guild.models import (
    RecoveryPackage,
    ResolveOptions,
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
    QuestTemplate,
    TraitTemplate,
    build_adventurer_state,
    build_quest_instance,
)

logger = logging.getLogger(__name__)

# 등급별 멤버당 경험치
EXPERIENCE_BY_GRADE: dict[OutcomeGrade, int] = {
    OutcomeGrade.CRITICAL_SUCCESS: 30,
    OutcomeGrade.SUCCESS: 20,
    OutcomeGrade.PARTIAL_SUCCESS: 10,
    OutcomeGrade.FAIL: 3,
}

# 일일 회복 대상: 배정/진행 중인 모험가는 제외
RESTING_STATES = frozenset({AdventurerAvailability.IDLE, AdventurerAvailability.RECOVERY})


@dataclass
class DayReport:
    """advance_day 결과 요약"""

    day_index: int
    archived_quest_ids: list[str] = field(default_factory=list)
    recovered_adventurer_ids: list[str] = field(default_factory=list)
    reassessed_count: int = 0


class GuildService:
    """길드 운영 루프 조합"""

    def __init__(
        self,
        event_bus: EventBus,
        settings: Optional[Settings] = None,
        board: Optional[QuestBoard] = None,
        roster: Optional[AdventurerRoster] = None,
        resolver: Optional[MissionResolver] = None,
        planner: Optional[AssignmentPlanner] = None,
        trait_catalog: Optional[Mapping[str, TraitTemplate]] = None,
    ) -> None:
        if event_bus is None:
            raise InvalidArgumentError("event_bus is required")
        self._bus = event_bus
        self._settings = settings or default_settings

        self._board = board or QuestBoard(QuestAssessmentService())
        self._roster = roster or AdventurerRoster()
        self._resolver = resolver or MissionResolver(
            trait_catalog=trait_catalog,
            clamp_injury_penalty=self._settings.CLAMP_INJURY_PENALTY,
        )
        self._planner = planner or AssignmentPlanner.from_settings(
            self._resolver, self._settings
        )
        # 퀘스트별 배정 시점 멤버 ID
        self._assigned_members: dict[str, tuple[str, ...]] = {}
        self._default_options = ResolveOptions.from_settings(self._settings)
        self._daily_recovery = RecoveryPackage(
            fatigue_recovery=self._settings.DAILY_FATIGUE_RECOVERY,
            hp_recovery=self._settings.DAILY_HP_RECOVERY,
        )

    @property
    def event_bus(self) -> EventBus:
        return self._bus

    @property
    def board(self) -> QuestBoard:
        return self._board

    @property
    def roster(self) -> AdventurerRoster:
        return self._roster

    @property
    def planner(self) -> AssignmentPlanner:
        return self._planner

    # === 등록 ===

    def register_quest(
        self,
        quest: Union[QuestInstance, QuestTemplate],
        world: WorldStateSnapshot,
    ) -> QuestInstance:
        if isinstance(quest, QuestTemplate):
            quest = build_quest_instance(quest, world.day_index)
        self._board.add_quest(quest, world)
        return quest

    def register_adventurer(
        self, adventurer: Union[AdventurerState, AdventurerTemplate]
    ) -> AdventurerState:
        if isinstance(adventurer, AdventurerTemplate):
            adventurer = build_adventurer_state(adventurer)
        self._roster.add(adventurer)
        logger.info("Adventurer registered: %s", adventurer.adventurer_id)
        return adventurer

    def get_quest(self, quest_id: str) -> QuestInstance:
        quest = self._board.find_by_id(quest_id)
        if quest is None:
            raise NotFoundError(f"Quest not found: {quest_id}")
        return quest

    def form_party(self, party_id: str, adventurer_ids: Iterable[str]) -> Party:
        """로스터의 모험가 참조로 파티 구성. 없는 ID는 NotFoundError."""
        members = []
        for adventurer_id in adventurer_ids:
            adventurer = self._roster.find_by_id(adventurer_id)
            if adventurer is None:
                raise NotFoundError(f"Adventurer not found: {adventurer_id}")
            members.append(adventurer)
        return Party(party_id, members)

    # === 배정 ===

    def assign(self, quest_id: str, party: Party, day_index: int) -> TransitionResult:
        """배정 조건 확인 후 퀘스트와 멤버를 ASSIGNED로 전이.

        실패 시 어떤 상태도 바뀌지 않는다.
        """
        quest = self.get_quest(quest_id)
        problems = self._planner.explain(quest, party)
        if problems:
            reason = "; ".join(problems)
            logger.info("Assignment rejected: quest=%s party=%s (%s)", quest_id, party.party_id, reason)
            return TransitionResult.fail(quest.state, QuestState.ASSIGNED, reason)

        assigned: list[AdventurerState] = []
        for member in party:
            member_result = member.assign_to_quest(quest_id)
            if not member_result:
                for done in assigned:
                    done.release_from_quest()
                return TransitionResult.fail(quest.state, QuestState.ASSIGNED, member_result.reason)
            assigned.append(member)

        result = quest.assign_to_party(party.party_id)
        if not result:
            for done in assigned:
                done.release_from_quest()
            return result
        self._assigned_members[quest_id] = tuple(party.member_ids)

        self._bus.publish(
            QuestAssignedEvent(
                quest_id=quest_id,
                party_id=party.party_id,
                member_ids=tuple(party.member_ids),
                day_index=day_index,
            )
        )
        logger.info("Quest %s assigned to party %s", quest_id, party.party_id)
        return result

    # === 판정 & 반영 ===

    def resolve_mission(
        self,
        quest_id: str,
        party: Party,
        world: WorldStateSnapshot,
        seed: int,
        options: Optional[ResolveOptions] = None,
    ) -> ResolveResult:
        quest = self.get_quest(quest_id)
        if quest.assigned_party_id != party.party_id:
            raise InvalidArgumentError(
                f"Party {party.party_id} is not assigned to quest {quest_id}"
            )
        expected = self._assigned_members.get(quest_id, ())
        if tuple(party.member_ids) != expected:
            raise InvalidStateError(
                f"Party {party.party_id} members changed since assignment: "
                f"expected {list(expected)}, got {party.member_ids}"
            )
        if quest.state == QuestState.ASSIGNED:
            quest.mark_in_progress().raise_if_failed()
            for member in party:
                if member.availability == AdventurerAvailability.ASSIGNED:
                    member.mark_in_progress()
        elif quest.state != QuestState.IN_PROGRESS:
            raise InvalidStateError(
                f"Quest {quest_id} cannot be resolved from {quest.state.value}"
            )

        result = self._resolver.resolve(
            ResolveRequest(
                quest=quest,
                party=party,
                world=world,
                day_index=world.day_index,
                seed=seed,
                options=options or self._default_options,
            )
        )
        quest.resolve(result.outcome).raise_if_failed()
        self._assigned_members.pop(quest_id, None)
        self._apply_to_members(party, result)

        self._bus.publish(
            MissionResolvedEvent(
                quest_id=quest_id,
                party_id=party.party_id,
                grade=result.grade,
                rewards=result.rewards,
                injuries=result.injuries,
                fatigue_delta=result.fatigue.fatigue_delta,
                resolved_day=world.day_index,
            )
        )
        logger.info(
            "Mission resolved: quest=%s grade=%s chance=%.3f roll=%.3f",
            quest_id,
            result.grade.value,
            result.final_success_chance,
            result.outcome.roll_value,
        )
        return result

    def _apply_to_members(self, party: Party, result: ResolveResult) -> None:
        experience = EXPERIENCE_BY_GRADE[result.grade]
        for member in party:
            member.apply_fatigue(result.fatigue.fatigue_delta)
            for injury in result.injuries.for_adventurer(member.adventurer_id):
                member.apply_injury(injury)
            member.apply_reward_experience(experience)
            member.release_from_quest()

    # === 보관 ===

    def archive_quest(self, quest_id: str, day_index: int) -> TransitionResult:
        """RESOLVED 퀘스트 보관, 또는 PENDING 퀘스트 취소"""
        quest = self.get_quest(quest_id)
        reason = "resolved" if quest.state == QuestState.RESOLVED else "cancelled"
        result = quest.archive()
        if result:
            self._bus.publish(
                QuestArchivedEvent(quest_id=quest_id, reason=reason, day_index=day_index)
            )
        return result

    # === 일일 진행 ===

    def advance_day(self, world: WorldStateSnapshot) -> DayReport:
        """만료 퀘스트 보관 → 휴식 중 모험가 회복 → 열린 퀘스트 재평가"""
        report = DayReport(day_index=world.day_index)

        for quest in self._board.archive_expired(world.day_index):
            report.archived_quest_ids.append(quest.quest_id)
            self._bus.publish(
                QuestArchivedEvent(
                    quest_id=quest.quest_id, reason="expired", day_index=world.day_index
                )
            )

        for adventurer in self._roster:
            if adventurer.availability in RESTING_STATES:
                adventurer.recover(self._daily_recovery)
                report.recovered_adventurer_ids.append(adventurer.adventurer_id)

        report.reassessed_count = self._board.reassess_open_quests(world)
        logger.info(
            "Day %d: archived=%d recovered=%d reassessed=%d",
            world.day_index,
            len(report.archived_quest_ids),
            len(report.recovered_adventurer_ids),
            report.reassessed_count,
        )
        return report
