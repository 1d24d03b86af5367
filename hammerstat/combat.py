"""
The attack sequence: hit, wound, save, damage.

Each attack rolls a D6 to hit against the weapon's skill, then a D6 to wound
against a target number from the strength vs toughness table, then the
defender rolls a D6 save. An attack that gets all the way through deals the
weapon's flat damage. Every roll is independent, so for a given attacker and
defender each stage is a Bernoulli trial per attack whose probability is
the product of its own roll and every roll before it:

    hit          = P(skill roll)
    wound        = hit * P(wound roll)
    failed save  = wound * (1 - P(save roll))

With n total attacks, the number of hits, wounds and failed saves are each
Binomial(n, stage probability), which is what statistics.py knows how to
describe.

Thresholds outside 2..6 are clamped rather than rejected: a 1+ always
succeeds (a natural 1 is not modelled) and a 7+ never does. That is how a
defender with no armor save (7+) or a weapon with skill 0 are represented.
"""

from __future__ import annotations

import logging
from math import floor

from hammerstat import statistics
from hammerstat.cache import BoundedCache
from hammerstat.records import (
    AttackerProfile,
    CombatReport,
    DamageSummary,
    DefenderProfile,
    StageSummary,
)
from hammerstat.types import StageName

logger = logging.getLogger(__name__)

DIE_FACES = 6
"""Every roll in the sequence is a single D6."""

NO_SAVE = 7
"""Save value meaning the defender has no save at all."""


def successful_faces(threshold: int) -> int:
    """How many faces of a D6 meet or beat threshold, clamped to 0..6."""
    return max(0, min(DIE_FACES, DIE_FACES + 1 - threshold))


def threshold_probability(threshold: int) -> float:
    """Chance of rolling threshold or higher on a D6."""
    if threshold < 2 or threshold > DIE_FACES:
        logger.debug("threshold %d+ is clamped to %d successful faces", threshold, successful_faces(threshold))
    return statistics.probability_of_success(DIE_FACES, successful_faces(threshold))


def total_attacks(attacker: AttackerProfile) -> int:
    """Attacks made by the whole unit: models * attacks per model.

    A unit with no models, or a weapon with no attacks, makes 0 attacks;
    the count is never negative.
    """
    if attacker.models < 1 or attacker.attacks_per_model < 1:
        logger.debug(
            "attacker has %d models with %d attacks each, treating as 0 attacks",
            attacker.models,
            attacker.attacks_per_model,
        )
        return 0
    return attacker.models * attacker.attacks_per_model


def wound_threshold(strength: int, toughness: int) -> int:
    """The D6 roll needed to wound, from the strength vs toughness table."""
    if strength >= 2 * toughness:
        return 2
    elif strength > toughness:
        return 3
    elif strength == toughness:
        return 4
    elif strength > toughness / 2:
        return 5
    else:
        return 6


def adjusted_armor_save(attacker: AttackerProfile, defender: DefenderProfile) -> int:
    """The save the defender actually rolls against: the armor save worsened
    by armor pierce, or the invulnerable save if that is better (lower)."""
    pierced = defender.armor_save + attacker.armor_pierce
    if defender.invulnerable_save is None or pierced <= defender.invulnerable_save:
        return pierced

    logger.debug(
        "invulnerable save %d+ beats pierced armor save %d+",
        defender.invulnerable_save,
        pierced,
    )
    return defender.invulnerable_save


def probability_of_hit(attacker: AttackerProfile) -> float:
    return threshold_probability(attacker.skill)


def probability_of_wound(attacker: AttackerProfile, defender: DefenderProfile) -> float:
    """Chance that one attack both hits and wounds."""
    threshold = wound_threshold(attacker.strength, defender.toughness)
    return probability_of_hit(attacker) * threshold_probability(threshold)


def probability_of_failed_save(attacker: AttackerProfile, defender: DefenderProfile) -> float:
    """Chance that one attack hits, wounds, and is not saved."""
    saved = threshold_probability(adjusted_armor_save(attacker, defender))
    return probability_of_wound(attacker, defender) * (1 - saved)


def summarize_stage(
    name: StageName,
    trials: int,
    probability: float,
    cache: BoundedCache | None = None,
) -> StageSummary:
    """Describe one stage as Binomial(trials, probability).

    The same bundle (distribution, mean, standard deviation, expected range
    and the "at least k" table) is produced for hits, wounds and failed
    saves; only the probability differs.
    """
    mean = statistics.mean(trials, probability)
    deviation = statistics.standard_deviation(trials, probability)
    return StageSummary(
        name=name,
        trials=trials,
        probability=probability,
        distribution=statistics.distribution("binomial", trials, probability, cache),
        mean=mean,
        expected=floor(mean),
        standard_deviation=deviation,
        expected_range=statistics.expected_range(mean, deviation),
        at_least=statistics.distribution("upper_cumulative", trials, probability, cache),
    )


def summarize_damage(failed_saves: StageSummary, damage: int) -> DamageSummary:
    """Scale the failed-save stage by flat damage per failed save.

    Variable damage dice aren't compounded into a distribution; only the
    mean and spread are scaled.
    """
    mean = failed_saves.mean * damage
    deviation = failed_saves.standard_deviation * damage
    return DamageSummary(
        damage_per_failed_save=damage,
        mean=mean,
        expected=floor(mean),
        standard_deviation=deviation,
        expected_range=statistics.expected_range(mean, deviation),
    )


class CombatMath:
    """One attacker against one defender, with a cache for the session.

    The stage methods are cheap to call repeatedly: the distributions they
    build are memoized in ``self.cache``, keyed on (kind, trials,
    probability), so e.g. a wound stage that happens to have the same
    probability as a previous query's hit stage is not rebuilt.

    The defender is optional so that hit statistics can be asked for on
    their own; the other stages need one.
    """

    cache_capacity: int = 256
    """Default number of entries (coefficient rows and whole distributions)
    kept per session before the least recently used is dropped."""

    def __init__(
        self,
        attacker: AttackerProfile,
        defender: DefenderProfile | None = None,
        cache_capacity: int | None = None,
        cache: BoundedCache | None = None,
    ) -> None:
        """Pass ``cache`` to share one cache across several matchups (the
        UI keeps one per browser session); otherwise a fresh one of
        ``cache_capacity`` entries is created."""
        self.attacker = attacker
        self.defender = defender
        if cache_capacity is not None:
            self.cache_capacity = cache_capacity
        self.cache = cache if cache is not None else BoundedCache(self.cache_capacity)

    @property
    def trials(self) -> int:
        return total_attacks(self.attacker)

    def _require_defender(self) -> DefenderProfile:
        if self.defender is None:
            raise ValueError("a defender is required beyond the hit stage")
        return self.defender

    def hits(self) -> StageSummary:
        return summarize_stage("hits", self.trials, probability_of_hit(self.attacker), self.cache)

    def wounds(self) -> StageSummary:
        defender = self._require_defender()
        probability = probability_of_wound(self.attacker, defender)
        return summarize_stage("wounds", self.trials, probability, self.cache)

    def failed_saves(self) -> StageSummary:
        defender = self._require_defender()
        probability = probability_of_failed_save(self.attacker, defender)
        return summarize_stage("failed_saves", self.trials, probability, self.cache)

    def damage(self) -> DamageSummary:
        return summarize_damage(self.failed_saves(), self.attacker.flat_damage)

    def report(self) -> CombatReport:
        """Run every stage and collect the results."""
        defender = self._require_defender()
        failed_saves = self.failed_saves()
        return CombatReport(
            attacker=self.attacker,
            defender=defender,
            hits=self.hits(),
            wounds=self.wounds(),
            failed_saves=failed_saves,
            damage=summarize_damage(failed_saves, self.attacker.flat_damage),
        )

    def clear_cache(self) -> None:
        self.cache.clear()
