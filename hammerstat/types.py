"""
Domain-specific type aliases for the hammerstat combat calculator.

Like the rest of the package these aren't checked at runtime. They keep
signatures self-documenting: a parameter typed as DistributionKind is one
of the three distribution shapes the engine knows how to build, not an
arbitrary string.
"""

from typing import Literal, TypeAlias

# Dice used for variable attack and damage characteristics ("D3+1",
# "2D6"). Carried on the attacker profile for display only.
DiceType: TypeAlias = Literal["D3", "D6"]

DICE_FACES: dict[DiceType, int] = {"D3": 3, "D6": 6}

# The shape of a distribution over the number of successes k:
DistributionKind: TypeAlias = Literal[
    "binomial",  # P(X = k)
    "lower_cumulative",  # P(X <= k)
    "upper_cumulative",  # P(X >= k)
]

# The four chained stages of an attack sequence.
StageName: TypeAlias = Literal["hits", "wounds", "failed_saves", "damage"]
