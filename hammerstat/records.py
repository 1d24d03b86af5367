"""Records passed into and out of the combat calculator.

The attacker and defender profiles are plain attribute bags describing a
unit and its weapon. Everything else here is produced by the statistics
engine or the combat pipeline and is treated as an immutable value.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from hammerstat.errors import DomainError
from hammerstat.types import DiceType, StageName


@dataclass(frozen=True)
class TrialOutcome:
    """One point of a distribution over the number of successes."""

    successes: int
    """Number of successful trials, k."""

    probability: float
    """P(X = k) for a mass distribution, P(X <= k) or P(X >= k) for the
    cumulative kinds."""

    def __str__(self) -> str:
        return f"P({self.successes}) = {self.probability:.4f}"


@dataclass(frozen=True)
class Bounds:
    """An inclusive [lower, upper] pair, e.g. the expected range of a
    stage."""

    lower: int | float
    upper: int | float

    def __post_init__(self) -> None:
        if self.lower > self.upper:
            raise DomainError(
                f"lower bound {self.lower} exceeds upper bound {self.upper}"
            )

    def contains(self, value: int | float) -> bool:
        return self.lower <= value <= self.upper

    def __str__(self) -> str:
        return f"{self.lower}-{self.upper}"


@dataclass
class AttackerProfile:
    """The attacking unit and the weapon every model in it uses."""

    models: int = 1
    """Number of models firing or fighting."""

    flat_attacks: int = 1
    """Fixed attacks per model (the "+1" in "D6+1", or the whole
    characteristic when it has no dice)."""

    variable_attacks_scalar: int = 0
    """Number of attack dice per model (the "2" in "2D6")."""

    variable_attacks_type: DiceType = "D6"

    torrent: bool = False
    """Torrent weapons hit automatically on the table; recorded but not
    applied by the calculator, which always rolls to hit on skill."""

    skill: int = 4
    """Weapon or ballistic skill: the D6 roll needed to hit."""

    strength: int = 4

    armor_pierce: int = 0
    """How much worse the defender's armor save gets, as a positive
    number (AP -1 is stored as 1)."""

    flat_damage: int = 1
    """Damage dealt by each failed save."""

    variable_damage_scalar: int = 0
    """Number of damage dice per failed save. Recorded but not used: the
    calculator only handles flat damage."""

    variable_damage_type: DiceType = "D6"

    @property
    def attacks_per_model(self) -> int:
        return self.flat_attacks


@dataclass
class DefenderProfile:
    """The unit receiving the attacks."""

    name: str = ""
    models: int = 1
    toughness: int = 4

    armor_save: int = 7
    """The D6 roll needed to save before armor pierce; 7 means no save."""

    invulnerable_save: int | None = None
    """Save unaffected by armor pierce, or None for no invulnerable save."""

    feel_no_pain: int | None = None
    damage_reduction: int = 0
    wounds: int = 1
    hit_modifier: int = 0


@dataclass
class StageSummary:
    """Everything the calculator reports for one stage of the attack
    sequence: hits, wounds or failed saves."""

    name: StageName
    trials: int
    """Total attacks; every stage is a Bernoulli trial per attack."""

    probability: float
    """Chance that a single attack gets through this stage, compounded
    with every stage before it."""

    distribution: list[TrialOutcome]
    mean: float

    expected: int
    """floor(mean)."""

    standard_deviation: float
    expected_range: Bounds

    at_least: list[TrialOutcome] = field(default_factory=list)
    """Upper-cumulative distribution: P(at least k successes)."""


@dataclass
class DamageSummary:
    """Flat damage derived from the failed-save stage."""

    damage_per_failed_save: int
    mean: float
    expected: int
    standard_deviation: float
    expected_range: Bounds


@dataclass
class CombatReport:
    """Top-level result of running an attacker against a defender."""

    attacker: AttackerProfile
    defender: DefenderProfile
    hits: StageSummary
    wounds: StageSummary
    failed_saves: StageSummary
    damage: DamageSummary

    @property
    def stages(self) -> list[StageSummary]:
        return [self.hits, self.wounds, self.failed_saves]
