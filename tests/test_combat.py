"""Tests for the hit/wound/save/damage pipeline."""

from __future__ import annotations

import logging
from math import sqrt

import pytest

from hammerstat import combat, statistics
from hammerstat.cache import BoundedCache
from hammerstat.combat import CombatMath
from hammerstat.errors import DomainError
from hammerstat.records import AttackerProfile, Bounds, DefenderProfile, TrialOutcome


def make_attacker(**overrides: int) -> AttackerProfile:
    """A 5 model unit with 3 attacks each hitting on 4+ (15 attacks)."""
    defaults = dict(models=5, flat_attacks=3, skill=4, strength=8, armor_pierce=2, flat_damage=2)
    defaults.update(overrides)
    return AttackerProfile(**defaults)


def make_defender(**overrides: int | None) -> DefenderProfile:
    defaults: dict = dict(models=10, toughness=4, armor_save=3, invulnerable_save=None, wounds=2)
    defaults.update(overrides)
    return DefenderProfile(**defaults)


class TestSuccessfulFaces:
    """Tests for the threshold -> successful faces mapping."""

    @pytest.mark.parametrize(
        "threshold, faces",
        [(2, 5), (3, 4), (4, 3), (5, 2), (6, 1)],
    )
    def test_in_range(self, threshold: int, faces: int) -> None:
        assert combat.successful_faces(threshold) == faces

    def test_above_six_never_succeeds(self) -> None:
        assert combat.successful_faces(7) == 0
        assert combat.successful_faces(12) == 0

    def test_below_two_always_succeeds(self) -> None:
        """Clamped to 6 faces, never more."""
        assert combat.successful_faces(1) == 6
        assert combat.successful_faces(0) == 6
        assert combat.successful_faces(-1) == 6

    def test_threshold_probability(self) -> None:
        assert combat.threshold_probability(4) == 0.5
        assert combat.threshold_probability(2) == pytest.approx(5 / 6)
        assert combat.threshold_probability(7) == 0.0
        assert combat.threshold_probability(0) == 1.0


class TestTotalAttacks:
    def test_models_times_attacks(self) -> None:
        assert combat.total_attacks(make_attacker(models=1, flat_attacks=8)) == 8
        assert combat.total_attacks(make_attacker(models=10, flat_attacks=2)) == 20
        assert combat.total_attacks(make_attacker()) == 15

    @pytest.mark.parametrize("models, attacks", [(0, 1), (-1, 1), (1, 0), (-2, -3)])
    def test_never_negative(self, models: int, attacks: int) -> None:
        attacker = make_attacker(models=models, flat_attacks=attacks)
        assert combat.total_attacks(attacker) == 0

    def test_zero_attacks_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="hammerstat.combat")
        combat.total_attacks(make_attacker(models=0))
        assert "treating as 0 attacks" in caplog.text


class TestWoundThreshold:
    @pytest.mark.parametrize(
        "strength, toughness, threshold",
        [
            (8, 4, 2),
            (9, 4, 2),
            (6, 4, 3),
            (5, 4, 3),
            (4, 4, 4),
            (3, 4, 5),
            (1, 4, 6),
            (2, 4, 6),
            (4, 5, 5),
            (4, 2, 2),
            (3, 5, 5),
            (2, 5, 6),
        ],
    )
    def test_ladder(self, strength: int, toughness: int, threshold: int) -> None:
        assert combat.wound_threshold(strength, toughness) == threshold


class TestAdjustedArmorSave:
    def test_armor_pierce_worsens_save(self) -> None:
        attacker = make_attacker(armor_pierce=1)
        assert combat.adjusted_armor_save(attacker, make_defender(armor_save=3)) == 4

    def test_invulnerable_used_when_better(self) -> None:
        attacker = make_attacker(armor_pierce=3)
        defender = make_defender(armor_save=2, invulnerable_save=4)
        assert combat.adjusted_armor_save(attacker, defender) == 4

    def test_armor_used_when_better(self) -> None:
        attacker = make_attacker(armor_pierce=0)
        defender = make_defender(armor_save=2, invulnerable_save=4)
        assert combat.adjusted_armor_save(attacker, defender) == 2

    def test_no_invulnerable(self) -> None:
        attacker = make_attacker(armor_pierce=4)
        assert combat.adjusted_armor_save(attacker, make_defender(armor_save=3)) == 7

    def test_invulnerable_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="hammerstat.combat")
        combat.adjusted_armor_save(make_attacker(armor_pierce=3), make_defender(armor_save=3, invulnerable_save=5))
        assert "invulnerable save 5+" in caplog.text


class TestStageProbabilities:
    @pytest.mark.parametrize("skill, expected", [(2, 5 / 6), (3, 2 / 3), (4, 0.5), (0, 1.0), (7, 0.0)])
    def test_hit(self, skill: int, expected: float) -> None:
        assert combat.probability_of_hit(make_attacker(skill=skill)) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "skill, strength, toughness, expected",
        [(4, 4, 4, 0.25), (3, 4, 4, 1 / 3), (2, 5, 4, 5 / 6 * 4 / 6)],
    )
    def test_wound(self, skill: int, strength: int, toughness: int, expected: float) -> None:
        attacker = make_attacker(skill=skill, strength=strength)
        defender = make_defender(toughness=toughness)
        assert combat.probability_of_wound(attacker, defender) == pytest.approx(expected)

    def test_failed_save(self) -> None:
        """S8 vs T4 wounds on 2+, Sv3 with AP1 saves on 4+."""
        attacker = make_attacker(skill=4, strength=8, armor_pierce=1)
        defender = make_defender(toughness=4, armor_save=3)
        hit = combat.probability_of_hit(attacker)
        assert combat.wound_threshold(8, 4) == 2
        assert combat.adjusted_armor_save(attacker, defender) == 4
        assert combat.probability_of_failed_save(attacker, defender) == pytest.approx(hit * 5 / 6 * 1 / 2)

    def test_no_save_means_every_wound_goes_through(self) -> None:
        attacker = make_attacker(armor_pierce=0)
        defender = make_defender(armor_save=7)
        assert combat.probability_of_failed_save(attacker, defender) == pytest.approx(
            combat.probability_of_wound(attacker, defender)
        )


class TestSummarizeStage:
    def test_bundle(self) -> None:
        stage = combat.summarize_stage("hits", 20, 0.5)
        assert stage.trials == 20
        assert stage.mean == 10.0
        assert stage.expected == 10
        assert stage.standard_deviation == pytest.approx(2.236, abs=1e-3)
        assert stage.expected_range == Bounds(8, 12)
        assert len(stage.distribution) == 21
        assert len(stage.at_least) == 21
        assert stage.at_least[0].probability == 1.0

    def test_no_trials(self) -> None:
        stage = combat.summarize_stage("wounds", 0, 0.5)
        assert stage.distribution == [TrialOutcome(0, 1.0)]
        assert stage.mean == 0.0
        assert stage.expected_range == Bounds(0, 0)

    def test_uses_cache(self) -> None:
        cache = BoundedCache(8)
        combat.summarize_stage("hits", 12, 0.5, cache)
        assert ("binomial", 12, 0.5) in cache
        assert ("upper_cumulative", 12, 0.5) in cache

    def test_negative_trials_reach_the_engine(self) -> None:
        """The pipeline doesn't validate; the engine does."""
        with pytest.raises(DomainError):
            statistics.probability_mass_function(-1, 0, 0.5)


class TestCombatMath:
    def test_end_to_end_hits(self) -> None:
        """10 models with 2 attacks at 4+: 20 attacks, half of them hit."""
        math = CombatMath(make_attacker(models=10, flat_attacks=2, skill=4))
        hits = math.hits()
        assert math.trials == 20
        assert hits.probability == 0.5
        assert hits.mean == 10.0
        assert hits.standard_deviation == pytest.approx(sqrt(5))

    @pytest.mark.parametrize(
        "models, attacks, skill, mean, deviation, expected",
        [
            (1, 8, 2, 6.6667, 1.0541, 6),
            (10, 2, 3, 13.3333, 2.1082, 13),
            (5, 3, 4, 7.5, 1.9365, 7),
        ],
    )
    def test_hit_statistics(
        self, models: int, attacks: int, skill: int, mean: float, deviation: float, expected: int
    ) -> None:
        hits = CombatMath(make_attacker(models=models, flat_attacks=attacks, skill=skill)).hits()
        assert hits.mean == pytest.approx(mean, abs=1e-4)
        assert hits.standard_deviation == pytest.approx(deviation, abs=1e-4)
        assert hits.expected == expected

    def test_hit_distribution(self) -> None:
        hits = CombatMath(make_attacker(models=1, flat_attacks=3, skill=4)).hits()
        assert [o.probability for o in hits.distribution] == pytest.approx([0.125, 0.375, 0.375, 0.125])
        assert [o.probability for o in hits.at_least] == pytest.approx([1.0, 0.875, 0.5, 0.125])

    def test_wounds_need_defender(self) -> None:
        math = CombatMath(make_attacker())
        with pytest.raises(ValueError, match="defender"):
            math.wounds()
        with pytest.raises(ValueError, match="defender"):
            math.report()

    def test_failed_saves_and_damage(self) -> None:
        """15 attacks at 4+, S8 vs T4 (2+), Sv3 with AP2 (5+), 2 damage."""
        math = CombatMath(make_attacker(), make_defender())
        failed = math.failed_saves()
        assert failed.probability == pytest.approx(0.5 * 5 / 6 * 4 / 6)
        assert failed.mean == pytest.approx(15 * 0.5 * 5 / 6 * 4 / 6)

        damage = math.damage()
        assert damage.damage_per_failed_save == 2
        assert damage.mean == pytest.approx(2 * failed.mean)
        assert damage.standard_deviation == pytest.approx(2 * failed.standard_deviation)
        assert damage.expected == 8
        assert damage.expected_range == Bounds(5, 11)

    def test_report(self) -> None:
        report = CombatMath(make_attacker(), make_defender()).report()
        assert [s.name for s in report.stages] == ["hits", "wounds", "failed_saves"]
        assert report.hits.probability >= report.wounds.probability >= report.failed_saves.probability
        assert report.hits.mean >= report.wounds.mean >= report.failed_saves.mean

    def test_zero_attack_unit(self) -> None:
        report = CombatMath(make_attacker(models=0), make_defender()).report()
        assert report.hits.distribution == [TrialOutcome(0, 1.0)]
        assert report.damage.mean == 0.0

    def test_session_cache(self) -> None:
        math = CombatMath(make_attacker(), make_defender(), cache_capacity=32)
        math.report()
        assert math.cache.capacity == 32
        assert len(math.cache) > 0
        math.clear_cache()
        assert len(math.cache) == 0

    def test_shared_cache(self) -> None:
        cache = BoundedCache(64)
        first = CombatMath(make_attacker(), make_defender(), cache=cache)
        second = CombatMath(make_attacker(skill=3), make_defender(), cache=cache)
        first.report()
        second.report()
        assert first.cache is second.cache
        assert ("binomial", 15, 0.5) in cache

    def test_default_capacity(self) -> None:
        assert CombatMath(make_attacker()).cache.capacity == CombatMath.cache_capacity

    def test_bad_capacity(self) -> None:
        with pytest.raises(DomainError):
            CombatMath(make_attacker(), cache_capacity=0)
