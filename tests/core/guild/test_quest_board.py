"""QuestBoard 테스트"""

import pytest

from guildhall.core.errors import AlreadyExistsError, InvalidArgumentError
from guildhall.core.guild.board import QuestBoard
from guildhall.core.guild.enums import QuestRank, QuestState
from guildhall.core.guild.models import WorldStateSnapshot


@pytest.fixture()
def board(assessment):
    return QuestBoard(assessment)


class TestAddQuest:
    def test_requires_assessment_service(self):
        with pytest.raises(InvalidArgumentError):
            QuestBoard(None)

    def test_add_applies_assessment(self, board, quest_factory, world):
        quest = quest_factory()
        board.add_quest(quest, world)
        assert "q_001" in board
        assert board.find_by_id("q_001") is quest
        assert quest.version == 1
        assert quest.recommended_rank == QuestRank.E

    def test_duplicate_id_rejected(self, board, quest_factory, world):
        original = quest_factory()
        board.add_quest(original, world)

        duplicate = quest_factory(title="Another")
        with pytest.raises(AlreadyExistsError):
            board.add_quest(duplicate, world)

        assert len(board) == 1
        assert board.find_by_id("q_001") is original
        assert original.version == 1
        assert duplicate.version == 0

    def test_add_quests(self, board, quest_factory, world):
        board.add_quests([quest_factory("q1"), quest_factory("q2")], world)
        assert [q.quest_id for q in board.get_all_quests()] == ["q1", "q2"]

    def test_none_rejected(self, board, world):
        with pytest.raises(InvalidArgumentError):
            board.add_quest(None, world)


class TestQueries:
    def test_find_missing(self, board):
        assert board.find_by_id("nope") is None

    def test_open_quests_keep_insertion_order(self, board, quest_factory, world):
        for quest_id in ("q3", "q1", "q2"):
            board.add_quest(quest_factory(quest_id), world)
        board.find_by_id("q1").archive()
        assert [q.quest_id for q in board.get_open_quests()] == ["q3", "q2"]

    def test_assigned_quests_are_open(self, board, quest_factory, world):
        quest = quest_factory()
        board.add_quest(quest, world)
        quest.assign_to_party("p1")
        assert board.get_open_quests() == [quest]

    def test_remove(self, board, quest_factory, world):
        board.add_quest(quest_factory(), world)
        assert board.remove_quest("q_001")
        assert board.remove_quest("q_001") is False
        assert len(board) == 0


class TestMaintenance:
    def test_reassess_open_quests(self, board, quest_factory, world):
        open_quest, closed_quest = quest_factory("q1"), quest_factory("q2")
        board.add_quests([open_quest, closed_quest], world)
        closed_quest.archive()

        stormy = WorldStateSnapshot(day_index=1, weather_severity=2.0)
        assert board.reassess_open_quests(stormy) == 1
        assert open_quest.assessed_difficulty == pytest.approx(20.0 * 1.3)
        assert open_quest.version == 2
        assert closed_quest.assessed_difficulty == 20.0

    def test_archive_expired(self, board, quest_factory, world):
        board.add_quests(
            [
                quest_factory("old", expire_day=3),
                quest_factory("fresh", expire_day=9),
                quest_factory("busy", expire_day=3),
            ],
            world,
        )
        board.find_by_id("busy").assign_to_party("p1")

        archived = board.archive_expired(3)

        assert [q.quest_id for q in archived] == ["old"]
        assert board.find_by_id("old").state == QuestState.ARCHIVED
        assert board.find_by_id("fresh").state == QuestState.PENDING
        assert board.find_by_id("busy").state == QuestState.ASSIGNED

    def test_archive_expired_nothing_due(self, board, quest_factory, world):
        board.add_quest(quest_factory(expire_day=10), world)
        assert board.archive_expired(5) == []
