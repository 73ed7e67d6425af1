"""퀘스트 보드: 활성 퀘스트 레지스트리

추가 시 평가를 먼저 적용한 뒤 저장한다. 조회 순서는 삽입 순서.
"""

from __future__ import annotations

from typing import Iterable, Optional

from guildhall.core.errors import AlreadyExistsError, InvalidArgumentError
from guildhall.core.guild.assessment import QuestAssessmentService
from guildhall.core.guild.enums import QuestState
from guildhall.core.guild.models import WorldStateSnapshot
from guildhall.core.guild.quest_instance import QuestInstance
from guildhall.core.logging import get_logger

logger = get_logger(__name__)


class QuestBoard:
    def __init__(self, assessment_service: QuestAssessmentService) -> None:
        if assessment_service is None:
            raise InvalidArgumentError("assessment_service is required")
        self._assessment = assessment_service
        self._quests: dict[str, QuestInstance] = {}

    def __len__(self) -> int:
        return len(self._quests)

    def __contains__(self, quest_id: object) -> bool:
        return quest_id in self._quests

    def add_quest(self, quest: QuestInstance, world: WorldStateSnapshot) -> None:
        if quest is None:
            raise InvalidArgumentError("quest is required")
        if quest.quest_id in self._quests:
            raise AlreadyExistsError(f"Quest already exists on board: {quest.quest_id}")

        self._assessment.apply_assessment(quest, world)
        self._quests[quest.quest_id] = quest
        logger.info(
            "Quest %s added (rank=%s, difficulty=%.1f)",
            quest.quest_id,
            quest.recommended_rank.value,
            quest.assessed_difficulty,
        )

    def add_quests(self, quests: Iterable[QuestInstance], world: WorldStateSnapshot) -> None:
        for quest in quests:
            self.add_quest(quest, world)

    def find_by_id(self, quest_id: str) -> Optional[QuestInstance]:
        return self._quests.get(quest_id)

    def get_all_quests(self) -> list[QuestInstance]:
        return list(self._quests.values())

    def get_open_quests(self) -> list[QuestInstance]:
        """PENDING / ASSIGNED / IN_PROGRESS 퀘스트 (삽입 순서)"""
        return [q for q in self._quests.values() if q.is_open]

    def remove_quest(self, quest_id: str) -> bool:
        return self._quests.pop(quest_id, None) is not None

    def reassess_open_quests(self, world: WorldStateSnapshot) -> int:
        """세계 상태 변화에 맞춰 열린 퀘스트를 재평가. 반환: 재평가 수"""
        open_quests = self.get_open_quests()
        for quest in open_quests:
            self._assessment.apply_assessment(quest, world)
        return len(open_quests)

    def archive_expired(self, day_index: int) -> list[QuestInstance]:
        """만료일이 지난 PENDING 퀘스트를 보관 처리"""
        archived: list[QuestInstance] = []
        for quest in self._quests.values():
            if quest.state == QuestState.PENDING and quest.is_expired(day_index):
                if quest.archive():
                    archived.append(quest)
        if archived:
            logger.info(
                "Archived %d expired quest(s) on day %d", len(archived), day_index
            )
        return archived
