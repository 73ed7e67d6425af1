"""MissionResolver 테스트"""

import random

import pytest

from guildhall.core.errors import InvalidArgumentError
from guildhall.core.guild.enums import AdventurerAvailability, OutcomeGrade
from guildhall.core.guild.models import (
    InjuryInfo,
    ResolveOptions,
    RewardPackage,
    TraitRuntime,
    WorldStateSnapshot,
)
from guildhall.core.guild.party import Party
from guildhall.core.guild.resolver import (
    MissionResolver,
    ResolveRequest,
    deadline_penalty,
    determine_grade,
    logistic_chance,
)
from guildhall.core.guild.templates import TraitTemplate

# 기본 능력치 모험가(레벨 1, 피로 0)의 개인 전력
BASELINE_MEMBER_POWER = 97.0 * 1.02


def _request(quest, party, seed=42, day_index=0, **option_overrides):
    return ResolveRequest(
        quest=quest,
        party=party,
        world=WorldStateSnapshot(day_index=day_index),
        day_index=day_index,
        seed=seed,
        options=ResolveOptions(**option_overrides),
    )


@pytest.fixture()
def party(adventurer_factory):
    return Party("p1", [adventurer_factory("a1"), adventurer_factory("a2")])


class TestFormulas:
    def test_logistic_midpoint(self):
        assert logistic_chance(1.0) == 0.5

    def test_logistic_is_monotonic(self):
        scores = [0.1, 0.5, 1.0, 1.5, 3.0]
        chances = [logistic_chance(s) for s in scores]
        assert chances == sorted(chances)

    @pytest.mark.parametrize(
        "expire_day, day_index, penalty",
        [(10, 0, 0.003), (1, 0, 0.03), (5, 5, 0.15), (5, 9, 0.15)],
    )
    def test_deadline_penalty(self, expire_day, day_index, penalty):
        assert deadline_penalty(expire_day, day_index) == pytest.approx(penalty)

    @pytest.mark.parametrize(
        "roll, grade",
        [
            (0.05, OutcomeGrade.CRITICAL_SUCCESS),
            (0.10, OutcomeGrade.CRITICAL_SUCCESS),
            (0.30, OutcomeGrade.SUCCESS),
            (0.50, OutcomeGrade.SUCCESS),
            (0.60, OutcomeGrade.PARTIAL_SUCCESS),
            (0.70, OutcomeGrade.PARTIAL_SUCCESS),
            (0.80, OutcomeGrade.FAIL),
            (0.99, OutcomeGrade.FAIL),
        ],
    )
    def test_grade_bands(self, roll, grade):
        assert determine_grade(0.5, roll) == grade

    def test_critical_bonus_widens_band(self):
        assert determine_grade(0.5, 0.3) == OutcomeGrade.SUCCESS
        assert determine_grade(0.5, 0.3, critical_success_bonus=0.25) == OutcomeGrade.CRITICAL_SUCCESS


class TestPartyPower:
    def test_member_power(self, resolver, adventurer_factory):
        assert resolver.calculate_member_power(adventurer_factory()) == pytest.approx(
            BASELINE_MEMBER_POWER
        )

    def test_party_synergy(self, resolver, party):
        assert resolver.calculate_party_power(party) == pytest.approx(
            2 * BASELINE_MEMBER_POWER * 1.06
        )

    def test_synergy_capped(self, resolver, adventurer_factory):
        big = Party("big", [adventurer_factory(f"a{i}") for i in range(8)])
        assert resolver.calculate_party_power(big) == pytest.approx(
            8 * BASELINE_MEMBER_POWER * 1.15
        )

    def test_empty_party_fallback(self, resolver):
        assert resolver.calculate_party_power(Party("empty")) == 10.0

    def test_fatigue_reduces_power(self, resolver, adventurer_factory):
        adv = adventurer_factory()
        adv.apply_fatigue(70)
        assert resolver.calculate_member_power(adv) == pytest.approx(BASELINE_MEMBER_POWER * 0.5)

    def test_injury_reduces_power(self, resolver, adventurer_factory):
        adv = adventurer_factory()
        adv.apply_injury(InjuryInfo(severity=5))
        assert resolver.calculate_member_power(adv) == pytest.approx(BASELINE_MEMBER_POWER * 0.4)

    def test_severe_injury_floors_at_one(self, resolver, adventurer_factory):
        adv = adventurer_factory()
        adv.apply_injury(InjuryInfo(severity=10))
        assert resolver.calculate_member_power(adv) == 1.0

    def test_trait_effects(self, adventurer_factory):
        catalog = {"brave": TraitTemplate(trait_id="brave", trait_name="Brave", attack_bonus=8)}
        resolver = MissionResolver(trait_catalog=catalog)
        adv = adventurer_factory(traits=[TraitRuntime("brave")])
        with_traits = resolver.calculate_member_power(adv, use_traits=True)
        without = resolver.calculate_member_power(adv, use_traits=False)
        assert without == pytest.approx(BASELINE_MEMBER_POWER)
        assert with_traits == pytest.approx((97.0 + 8 * 1.25) * 1.02)


class TestResolve:
    def test_score_one_gives_half_minus_deadline(self, resolver, adventurer_factory, stats_factory, quest_factory):
        # 전력 50 × 시너지 1.03 == 난이도 50 × 배율 1.03 → score 1.0
        member = adventurer_factory(
            "solo",
            level=0,
            stats=stats_factory(
                attack=20, defense=0, magic=0, support=0,
                detection=0, mobility=0, survival=0, morale=0,
                max_hp=1, current_hp=1, stamina=0,
            ),
        )
        quest = quest_factory(base_difficulty=50.0, expire_day=10)
        result = resolver.resolve(
            _request(quest, Party("p1", [member]), global_difficulty_multiplier=1.03)
        )
        assert result.final_success_chance == pytest.approx(0.497)
        assert "Score=1.00" in result.log_messages[1]

    def test_deterministic_for_same_seed(self, resolver, party, quest_factory):
        quest = quest_factory(base_difficulty=150.0)
        first = resolver.resolve(_request(quest, party, seed=7))
        second = resolver.resolve(_request(quest, party, seed=7))
        assert first == second
        assert first.consumed_seed == 7

    def test_chance_always_bounded(self, resolver, adventurer_factory, quest_factory):
        for size in range(0, 5):
            party = Party("p", [adventurer_factory(f"a{i}") for i in range(size)])
            for difficulty in (0.0, 1.0, 20.0, 100.0, 1000.0, 1e6):
                for expire_day in (0, 1, 30):
                    quest = quest_factory(base_difficulty=difficulty, expire_day=expire_day)
                    result = resolver.resolve(_request(quest, party, seed=size))
                    assert 0.05 <= result.final_success_chance <= 0.95

    def test_easy_quest_caps_high(self, resolver, party, quest_factory):
        result = resolver.resolve(_request(quest_factory(base_difficulty=1.0), party))
        assert result.final_success_chance == 0.95

    def test_impossible_quest_floors_low(self, resolver, party, quest_factory):
        result = resolver.resolve(_request(quest_factory(base_difficulty=1e6), party))
        assert result.final_success_chance == 0.05

    def test_outcome_fields(self, resolver, party, quest_factory):
        quest = quest_factory()
        result = resolver.resolve(_request(quest, party, seed=3, day_index=2))
        outcome = result.outcome
        assert outcome.quest_id == quest.quest_id
        assert outcome.party_id == "p1"
        assert outcome.grade == result.grade
        assert outcome.is_success == (result.grade != OutcomeGrade.FAIL)
        assert outcome.success_chance == result.final_success_chance
        assert outcome.resolved_day == 2
        assert 0.0 <= outcome.roll_value < 1.0
        assert outcome.rewards == result.rewards

    def test_does_not_mutate_inputs(self, resolver, party, quest_factory):
        quest = quest_factory(base_difficulty=300.0)
        version = quest.version
        resolver.resolve(_request(quest, party, seed=11))
        assert quest.version == version
        for member in party:
            assert member.fatigue == 0
            assert member.injury.is_injured is False
            assert member.availability == AdventurerAvailability.IDLE

    def test_log_order(self, resolver, party, quest_factory):
        result = resolver.resolve(_request(quest_factory(), party))
        messages = result.log_messages
        assert messages[0].startswith("Member a1: power=")
        assert messages[1].startswith("Member a2: power=")
        steps = ["Difficulty=", "Logistic=", "Roll=", "Rewards:"]
        positions = [
            next(i for i, m in enumerate(messages) if m.startswith(step)) for step in steps
        ]
        assert positions == sorted(positions)
        assert messages[-1].startswith("Rewards:")

    def test_empty_party_logged(self, resolver, quest_factory):
        result = resolver.resolve(_request(quest_factory(), Party("empty")))
        assert "Party has no members. Fallback power=10." in result.log_messages
        assert "PartyPower=10.00" in result.log_messages[1]

    def test_critical_bonus_forces_critical(self, resolver, party, quest_factory):
        quest = quest_factory(base_difficulty=500.0)
        for seed in range(10):
            result = resolver.resolve(_request(quest, party, seed=seed, critical_success_bonus=1.0))
            assert result.grade == OutcomeGrade.CRITICAL_SUCCESS
            assert len(result.injuries) == 0

    def test_injuries_disabled(self, resolver, party, quest_factory):
        quest = quest_factory(base_difficulty=500.0)
        for seed in range(20):
            result = resolver.resolve(
                _request(quest, party, seed=seed, enable_injury_simulation=False)
            )
            assert len(result.injuries) == 0

    def test_missing_quest_rejected(self, resolver, party):
        with pytest.raises(InvalidArgumentError):
            resolver.resolve(_request(None, party))

    def test_missing_party_rejected(self, resolver, quest_factory):
        with pytest.raises(InvalidArgumentError):
            resolver.resolve(_request(quest_factory(), None))


class TestPackages:
    @pytest.mark.parametrize(
        "grade, gold, reputation",
        [
            (OutcomeGrade.CRITICAL_SUCCESS, 150, 15),
            (OutcomeGrade.SUCCESS, 100, 10),
            (OutcomeGrade.PARTIAL_SUCCESS, 55, 6),
            (OutcomeGrade.FAIL, 10, 1),
        ],
    )
    def test_reward_by_grade(self, grade, gold, reputation):
        reward = MissionResolver.build_reward_package(
            RewardPackage(gold=100, reputation=10, items=("herb",)), grade
        )
        assert (reward.gold, reward.reputation) == (gold, reputation)
        assert reward.items == ("herb",)

    @pytest.mark.parametrize(
        "difficulty, grade, size, delta",
        [
            (20.0, OutcomeGrade.SUCCESS, 2, 87),
            (1.0, OutcomeGrade.FAIL, 4, 18),
            (5.0, OutcomeGrade.SUCCESS, 10, 22),
            (0.0, OutcomeGrade.CRITICAL_SUCCESS, 8, 3),
        ],
    )
    def test_fatigue_package(self, adventurer_factory, quest_factory, difficulty, grade, size, delta):
        party = Party("p", [adventurer_factory(f"a{i}") for i in range(size)])
        quest = quest_factory(base_difficulty=difficulty)
        assert MissionResolver.build_fatigue_package(party, quest, grade).fatigue_delta == delta

    def test_no_injuries_on_critical(self, party):
        package = MissionResolver.build_injury_package(
            party, OutcomeGrade.CRITICAL_SUCCESS, random.Random(0), True
        )
        assert len(package) == 0

    @pytest.mark.parametrize(
        "grade, low, high",
        [
            (OutcomeGrade.SUCCESS, 1, 2),
            (OutcomeGrade.PARTIAL_SUCCESS, 1, 3),
            (OutcomeGrade.FAIL, 2, 4),
        ],
    )
    def test_injury_severity_range(self, adventurer_factory, stats_factory, grade, low, high):
        party = Party(
            "p",
            [adventurer_factory(f"a{i}", stats=stats_factory(injury_resist=0)) for i in range(4)],
        )
        injuries = []
        for seed in range(100):
            injuries.extend(
                MissionResolver.build_injury_package(party, grade, random.Random(seed), True).injuries
            )
        assert injuries
        for injury in injuries:
            assert low <= injury.severity <= high
            assert injury.adventurer_id in party.member_ids
            assert injury.description.endswith("suffered mission injury.")

    def test_full_resist_prevents_injury(self, adventurer_factory, stats_factory):
        party = Party("p", [adventurer_factory("a1", stats=stats_factory(injury_resist=200))])
        for seed in range(50):
            package = MissionResolver.build_injury_package(
                party, OutcomeGrade.FAIL, random.Random(seed), True
            )
            assert len(package) == 0

    def test_trait_resist_prevents_injury(self, adventurer_factory, stats_factory):
        catalog = {
            "iron_skin": TraitTemplate(trait_id="iron_skin", trait_name="Iron Skin", injury_resist_bonus=200)
        }
        adv = adventurer_factory(
            "a1", stats=stats_factory(injury_resist=0), traits=[TraitRuntime("iron_skin")]
        )
        party = Party("p", [adv])

        with_trait = without_trait = 0
        for seed in range(200):
            with_trait += len(
                MissionResolver.build_injury_package(
                    party, OutcomeGrade.FAIL, random.Random(seed), True, trait_catalog=catalog
                )
            )
            without_trait += len(
                MissionResolver.build_injury_package(
                    party, OutcomeGrade.FAIL, random.Random(seed), True
                )
            )
        assert with_trait == 0
        assert without_trait > 0

    def test_resolve_applies_trait_resist_only_when_enabled(self, adventurer_factory, stats_factory, quest_factory):
        catalog = {
            "iron_skin": TraitTemplate(trait_id="iron_skin", trait_name="Iron Skin", injury_resist_bonus=200)
        }
        resolver = MissionResolver(trait_catalog=catalog)
        party = Party(
            "p",
            [
                adventurer_factory(
                    f"a{i}", stats=stats_factory(injury_resist=0), traits=[TraitRuntime("iron_skin")]
                )
                for i in range(4)
            ],
        )
        # 전력 대비 난이도가 매우 높아 대부분 실패
        quest = quest_factory(base_difficulty=5000.0)

        enabled = disabled = 0
        for seed in range(50):
            enabled += len(resolver.resolve(_request(quest, party, seed=seed)).injuries)
            disabled += len(
                resolver.resolve(_request(quest, party, seed=seed, enable_trait_effects=False)).injuries
            )
        assert enabled == 0
        assert disabled > 0
