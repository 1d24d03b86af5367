#!/usr/bin/env python3
"""Print the report for a sample matchup: ten marines shooting bolters at a
squad of heavily armored terminators.

Usage:
    python tools/demo_combat.py [--verbose]

--verbose turns on the pipeline's debug logging (clamped thresholds,
invulnerable saves taking over, etc).
"""

import logging
import sys

from hammerstat.combat import CombatMath
from hammerstat.records import AttackerProfile, DefenderProfile
from hammerstat.renderers import TextRenderer


def main() -> None:
    if "--verbose" in sys.argv[1:]:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    marines = AttackerProfile(
        models=10, flat_attacks=2, skill=3, strength=4, armor_pierce=0, flat_damage=1,
    )
    terminators = DefenderProfile(
        name="Terminators", models=5, toughness=5, armor_save=2, invulnerable_save=4, wounds=3,
    )
    report = CombatMath(marines, terminators).report()
    print("\n".join(TextRenderer().render_report(report)))


if __name__ == "__main__":
    main()
