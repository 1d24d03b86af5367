"""
Exact binomial statistics.

Every stage of an attack sequence is n independent trials (one per attack)
that each succeed with the same probability p, so the number of successes
follows a binomial distribution. This module turns (n, p) into:

- the probability mass function P(X = k), using exact binomial coefficients;
- whole distributions: mass, lower cumulative P(X <= k) and upper cumulative
  P(X >= k), one TrialOutcome per k in 0..n;
- summary statistics: mean, mode, standard deviation, expected range.

Out-of-domain arguments raise DomainError. A few inputs are deliberately
*not* errors: distributions for n < 1 or p outside (0, 1) collapse to a
single certain outcome, and the summary statistics return 0 for n < 1 or
p < 0. Callers such as the combat pipeline rely on those degenerate answers
when a unit has no attacks or a roll can never fail.

Nothing in here logs; every function is a pure function of its arguments
(plus the optional cache, which only ever short-circuits work).
"""

from __future__ import annotations

from fractions import Fraction
from itertools import accumulate
from math import exp, floor, log, sqrt

from hammerstat.cache import BoundedCache
from hammerstat.combinatorics import binomial_coefficient, binomial_coefficients
from hammerstat.errors import DomainError, InvalidCombinationError
from hammerstat.records import Bounds, TrialOutcome
from hammerstat.types import DistributionKind


def _check_trials(trial_count: int) -> None:
    if trial_count < 1:
        raise DomainError(f"trial count must be at least 1, got {trial_count}")


def _check_probability(probability: float) -> None:
    # Written this way round so that NaN fails too.
    if not 0 <= probability <= 1:
        raise DomainError(f"probability must be within [0, 1], got {probability}")


def _weighted(coefficient: int, probability: float, successes: int, failures: int) -> float:
    """coefficient * p**successes * (1-p)**failures as a float.

    C(n, k) stops fitting in a float somewhere past n = 1000. When it does,
    do the product in log space instead; the result itself is always <= 1.
    """
    failure = 1 - probability
    try:
        scale = float(coefficient)
    except OverflowError:
        if (successes and probability == 0) or (failures and failure == 0):
            return 0.0
        total = log(coefficient)
        if successes:
            total += successes * log(probability)
        if failures:
            total += failures * log(failure)
        return exp(total)
    return scale * probability**successes * failure**failures


def _mass_row(trial_count: int, probability: float, cache: BoundedCache | None = None) -> list[float]:
    """[P(X = 0), ..., P(X = n)] with certain outcomes for p <= 0 and p >= 1."""
    n = max(trial_count, 0)
    if probability <= 0:
        return [1.0] + [0.0] * n
    if probability >= 1:
        return [0.0] * n + [1.0]
    _check_probability(probability)

    row = binomial_coefficients(n, cache)
    return [_weighted(c, probability, k, n - k) for k, c in enumerate(row)]


def probability_of_success(possible_outcomes: int, successful_outcomes: int) -> float:
    """Chance of a single trial succeeding when successful_outcomes of
    possible_outcomes equally likely results count as a success, e.g.
    probability_of_success(6, 3) for a 4+ on a D6."""
    if possible_outcomes < 1:
        raise DomainError(f"possible outcomes must be at least 1, got {possible_outcomes}")
    if successful_outcomes < 0:
        raise DomainError(f"successful outcomes must not be negative, got {successful_outcomes}")
    if successful_outcomes > possible_outcomes:
        raise InvalidCombinationError(
            f"{successful_outcomes} successful outcomes out of only "
            f"{possible_outcomes} possible"
        )
    return float(Fraction(successful_outcomes, possible_outcomes))


def probability_of_multiple_successes(probability: float, trial_count: int) -> float:
    """Chance that all trial_count independent trials succeed."""
    _check_probability(probability)
    _check_trials(trial_count)
    return probability**trial_count


def probability_mass_function(
    trial_count: int,
    success_count: int,
    probability: float,
    cache: BoundedCache | None = None,
) -> float:
    """P(X = success_count) for X ~ Binomial(trial_count, probability).

    The coefficient is computed exactly and narrowed to a float only here.
    If a cache is given it memoizes the coefficient under
    (trial_count, success_count).
    """
    _check_trials(trial_count)
    if success_count < 0:
        raise DomainError(f"success count must not be negative, got {success_count}")
    _check_probability(probability)
    if success_count > trial_count:
        return 0.0

    key = (trial_count, success_count)
    found, coefficient = cache.try_get(key) if cache is not None else (False, None)
    if not found:
        coefficient = binomial_coefficient(trial_count, success_count)
        if cache is not None:
            cache.add(key, coefficient)

    return _weighted(coefficient, probability, success_count, trial_count - success_count)


def binomial_distribution(
    trial_count: int, probability: float, cache: BoundedCache | None = None
) -> list[TrialOutcome]:
    """The mass distribution P(X = k) for k = 0..trial_count.

    Degenerate inputs short-circuit to a single certain outcome rather than
    a full row: no trials or p <= 0 means exactly 0 successes, and p >= 1
    means every trial succeeds.
    """
    if trial_count < 1:
        return [TrialOutcome(0, 1.0)]
    if probability <= 0:
        return [TrialOutcome(0, 1.0)]
    if probability >= 1:
        return [TrialOutcome(trial_count, 1.0)]

    masses = _mass_row(trial_count, probability, cache)
    return [TrialOutcome(k, p) for k, p in enumerate(masses)]


def lower_cumulative_distribution(
    trial_count: int, probability: float, cache: BoundedCache | None = None
) -> list[TrialOutcome]:
    """P(X <= k) for k = 0..trial_count, from one pass over the mass row."""
    if trial_count < 1:
        return [TrialOutcome(0, 1.0)]

    totals = list(accumulate(_mass_row(trial_count, probability, cache)))
    totals[-1] = 1.0
    return [TrialOutcome(k, min(total, 1.0)) for k, total in enumerate(totals)]


def upper_cumulative_distribution(
    trial_count: int, probability: float, cache: BoundedCache | None = None
) -> list[TrialOutcome]:
    """P(X >= k) for k = 0..trial_count: the chance of at least k
    successes."""
    if trial_count < 1:
        return [TrialOutcome(0, 1.0)]

    masses = _mass_row(trial_count, probability, cache)
    totals = list(accumulate(reversed(masses)))[::-1]
    totals[0] = 1.0
    return [TrialOutcome(k, min(total, 1.0)) for k, total in enumerate(totals)]


def lower_cumulative_probability(
    trial_count: int,
    success_count: int,
    probability: float,
    cache: BoundedCache | None = None,
) -> float:
    """P(X <= success_count)."""
    _check_trials(trial_count)
    if success_count < 0:
        raise DomainError(f"success count must not be negative, got {success_count}")
    _check_probability(probability)
    if success_count >= trial_count:
        return 1.0
    return min(sum(_mass_row(trial_count, probability, cache)[: success_count + 1]), 1.0)


def upper_cumulative_probability(
    trial_count: int,
    success_count: int,
    probability: float,
    cache: BoundedCache | None = None,
) -> float:
    """P(X >= success_count)."""
    _check_trials(trial_count)
    if success_count < 0:
        raise DomainError(f"success count must not be negative, got {success_count}")
    _check_probability(probability)
    if success_count > trial_count:
        return 0.0
    if success_count == 0:
        return 1.0
    return min(sum(_mass_row(trial_count, probability, cache)[success_count:]), 1.0)


_BUILDERS = {
    "binomial": binomial_distribution,
    "lower_cumulative": lower_cumulative_distribution,
    "upper_cumulative": upper_cumulative_distribution,
}


def distribution(
    kind: DistributionKind,
    trial_count: int,
    probability: float,
    cache: BoundedCache | None = None,
) -> list[TrialOutcome]:
    """Build a distribution of the given kind, memoized in cache under
    (kind, trial_count, probability)."""
    if kind not in _BUILDERS:
        raise ValueError(f"unknown distribution kind: {kind!r}")
    if cache is None:
        return _BUILDERS[kind](trial_count, probability)

    key = (kind, trial_count, probability)
    found, result = cache.try_get(key)
    if not found:
        result = _BUILDERS[kind](trial_count, probability, cache)
        cache.add(key, result)
    # The cached list is shared; hand out a copy.
    return list(result)


def mean(trial_count: int, probability: float) -> float:
    """n * p, or 0 when there are no trials or p is negative."""
    if trial_count < 1 or probability < 0:
        return 0.0
    return trial_count * probability


def mode(trial_count: int, probability: float) -> int:
    """The most likely number of successes, round((n + 1) * p).

    Same degenerate policy as mean(). Capped at n, since (n + 1) * p
    reaches n + 1 when p = 1.
    """
    if trial_count < 1 or probability < 0:
        return 0
    return min(trial_count, round((trial_count + 1) * probability))


def standard_deviation(trial_count: int, probability: float) -> float:
    """sqrt(n * p * (1 - p)), or 0 for the same degenerate inputs as
    mean() and for p > 1."""
    if trial_count < 1 or probability < 0 or probability > 1:
        return 0.0
    return sqrt(trial_count * probability * (1 - probability))


def expected_range(mean_value: float, deviation: float) -> Bounds:
    """The whole-number range one standard deviation either side of the
    mean: [floor(mean) - floor(sd), floor(mean) + floor(sd)]."""
    center = floor(mean_value)
    spread = floor(deviation)
    return Bounds(center - spread, center + spread)
