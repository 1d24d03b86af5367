"""
Exact factorials and binomial coefficients.

Everything here works on Python ints, so C(200, 100) (a 60 digit number) is
exact. Converting to float is left to the caller, which knows whether the
value is about to be multiplied by something tiny.
"""

from __future__ import annotations

from functools import lru_cache
from math import factorial as _math_factorial

from hammerstat.cache import BoundedCache
from hammerstat.errors import DomainError


@lru_cache(maxsize=1024)
def factorial(n: int) -> int:
    """n! for n >= 0. Results are memoized per n."""
    if n < 0:
        raise DomainError(f"factorial is not defined for negative numbers, got {n}")
    return _math_factorial(n)


def binomial_coefficient(population_size: int, combination_size: int) -> int:
    """The number of ways to choose combination_size items from
    population_size, or 0 when there are more to choose than exist."""
    if population_size < 0:
        raise DomainError(f"population size must not be negative, got {population_size}")
    if combination_size < 0:
        raise DomainError(f"combination size must not be negative, got {combination_size}")
    if combination_size > population_size:
        return 0

    return factorial(population_size) // (
        factorial(combination_size) * factorial(population_size - combination_size)
    )


def binomial_coefficients(n: int, cache: BoundedCache | None = None) -> tuple[int, ...]:
    """The full row (C(n, 0), C(n, 1), ..., C(n, n)).

    Built with the multiplicative recurrence C(n, k+1) = C(n, k) * (n-k)/(k+1),
    which stays exact in integer arithmetic and costs O(n) instead of three
    factorials per entry.
    """
    if n < 0:
        raise DomainError(f"population size must not be negative, got {n}")

    if cache is not None:
        found, row = cache.try_get(("row", n))
        if found:
            return row

    coefficients = [1]
    for k in range(n):
        coefficients.append(coefficients[-1] * (n - k) // (k + 1))
    row = tuple(coefficients)

    if cache is not None:
        cache.add(("row", n), row)
    return row
