"""Shared test fixtures."""

import pytest

from guildhall.core.event_bus import EventBus
from guildhall.core.guild.adventurer import AdventurerState
from guildhall.core.guild.assessment import QuestAssessmentService
from guildhall.core.guild.enums import QuestCategory, RoleType
from guildhall.core.guild.models import RewardPackage, StatBlock, WorldStateSnapshot
from guildhall.core.guild.quest_instance import QuestInstance
from guildhall.core.guild.resolver import MissionResolver


def make_stats(**overrides) -> StatBlock:
    """Balanced mid-level stat block; keyword arguments override single fields."""
    values = dict(
        attack=10,
        defense=10,
        magic=5,
        support=5,
        detection=8,
        mobility=8,
        survival=8,
        morale=10,
        max_hp=100,
        current_hp=100,
        stamina=20,
        stress_resist=10,
        injury_resist=20,
        carry_capacity=30,
    )
    values.update(overrides)
    return StatBlock(**values)


def make_adventurer(adventurer_id: str = "adv_001", **kwargs) -> AdventurerState:
    defaults = {
        "name": f"Adventurer {adventurer_id}",
        "role": RoleType.DEALER,
        "stats": make_stats(),
        "level": 1,
    }
    defaults.update(kwargs)
    return AdventurerState(adventurer_id=adventurer_id, **defaults)


def make_quest(quest_id: str = "q_001", **kwargs) -> QuestInstance:
    defaults = {
        "template_id": "tpl_wolves",
        "title": "Cull the wolves",
        "category": QuestCategory.HUNT,
        "base_difficulty": 20.0,
        "issued_day": 0,
        "expire_day": 10,
        "time_limit_days": 10,
        "location_id": "loc_forest",
        "environment_tags": ("forest", "night"),
        "base_reward": RewardPackage(gold=100, reputation=10),
    }
    defaults.update(kwargs)
    return QuestInstance(quest_id=quest_id, **defaults)


@pytest.fixture()
def world() -> WorldStateSnapshot:
    """Neutral world: no weather, no risk, no tags."""
    return WorldStateSnapshot(day_index=0)


@pytest.fixture()
def assessment() -> QuestAssessmentService:
    return QuestAssessmentService()


@pytest.fixture()
def resolver() -> MissionResolver:
    return MissionResolver()


@pytest.fixture()
def bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def stats_factory():
    return make_stats


@pytest.fixture()
def adventurer_factory():
    return make_adventurer


@pytest.fixture()
def quest_factory():
    return make_quest
