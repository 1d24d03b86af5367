"""Renderers that convert calculator records into text output.

The TextRenderer produces terminal-friendly lines for the demo script and
the code block in the Streamlit UI. Both consume the same CombatReport, so
anything shown in one can be shown in the other.
"""

from __future__ import annotations

from hammerstat.records import (
    AttackerProfile,
    CombatReport,
    DamageSummary,
    DefenderProfile,
    StageSummary,
    TrialOutcome,
)

STAGE_TITLES = {
    "hits": "Hits",
    "wounds": "Wounds",
    "failed_saves": "Failed saves",
}


def dice_expression(scalar: int, dice: str, flat: int) -> str:
    """Format a characteristic like "2D6+1", "D3" or "4"."""
    if scalar <= 0:
        return str(flat)
    expr = dice if scalar == 1 else f"{scalar}{dice}"
    return f"{expr}+{flat}" if flat else expr


class TextRenderer:
    """Renders a CombatReport to a list of lines.

    ``distribution_limit`` caps how many rows of each "at least k" table
    are printed; rows past the point where the chance drops below
    ``min_probability`` are skipped as well, since a 40 attack unit
    otherwise prints 41 rows per stage, most of them 0.0000.
    """

    def __init__(self, distribution_limit: int | None = 12, min_probability: float = 0.0005) -> None:
        self.distribution_limit = distribution_limit
        self.min_probability = min_probability

    def render_report(self, report: CombatReport) -> list[str]:
        lines: list[str] = []
        lines.append(self.render_attacker(report.attacker))
        lines.append(self.render_defender(report.defender))
        for stage in report.stages:
            lines.append("")
            lines.extend(self.render_stage(stage))
        lines.append("")
        lines.extend(self.render_damage(report.damage))
        return lines

    def render_attacker(self, attacker: AttackerProfile) -> str:
        attacks = dice_expression(
            attacker.variable_attacks_scalar,
            attacker.variable_attacks_type,
            attacker.flat_attacks,
        )
        damage = dice_expression(
            attacker.variable_damage_scalar,
            attacker.variable_damage_type,
            attacker.flat_damage,
        )
        skill = "N/A (torrent)" if attacker.torrent else f"{attacker.skill}+"
        return (
            f"Attacker: {attacker.models} models, A{attacks} {skill} "
            f"S{attacker.strength} AP-{attacker.armor_pierce} D{damage}"
        )

    def render_defender(self, defender: DefenderProfile) -> str:
        name = f"{defender.name}: " if defender.name else ""
        invulnerable = (
            f" {defender.invulnerable_save}++" if defender.invulnerable_save is not None else ""
        )
        return (
            f"Defender: {name}{defender.models} models, T{defender.toughness} "
            f"Sv{defender.armor_save}+{invulnerable} W{defender.wounds}"
        )

    def render_stage(self, stage: StageSummary) -> list[str]:
        title = STAGE_TITLES.get(stage.name, stage.name)
        lines = [
            f"{title}: {stage.probability:.4f} per attack over {stage.trials} attacks",
            f"    mean {stage.mean:.4f}, expected {stage.expected}, "
            f"std dev {stage.standard_deviation:.4f}, range {stage.expected_range}",
            "    at least:",
        ]
        lines.extend(f"        {row}" for row in self.render_distribution(stage.at_least))
        return lines

    def render_damage(self, damage: DamageSummary) -> list[str]:
        return [
            f"Damage: {damage.damage_per_failed_save} per failed save",
            f"    mean {damage.mean:.4f}, expected {damage.expected}, "
            f"std dev {damage.standard_deviation:.4f}, range {damage.expected_range}",
        ]

    def render_distribution(self, distribution: list[TrialOutcome]) -> list[str]:
        rows = [o for o in distribution if o.probability >= self.min_probability]
        if self.distribution_limit is not None:
            rows = rows[: self.distribution_limit]
        return [str(o) for o in rows]
