"""Exceptions raised by the combinatorics and statistics layers.

Both subclass ValueError, so code that already guards its inputs with
``except ValueError`` keeps working.
"""


class DomainError(ValueError):
    """An argument lies outside the mathematically valid domain: a
    negative count, a probability outside [0, 1], a cache capacity
    below 1, or bounds whose lower end exceeds the upper."""


class InvalidCombinationError(ValueError):
    """The arguments are each in range but impossible together, e.g.
    more successful outcomes than possible outcomes."""
