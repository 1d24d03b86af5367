"""Streamlit combat calculator UI.

Run with: PYTHONPATH=. streamlit run ui/app.py
"""

from __future__ import annotations

import streamlit as st

from hammerstat.cache import BoundedCache
from hammerstat.combat import NO_SAVE, CombatMath
from hammerstat.records import AttackerProfile, DefenderProfile, StageSummary
from hammerstat.renderers import STAGE_TITLES, TextRenderer
from hammerstat.types import DICE_FACES

DICE_TYPES = tuple(DICE_FACES)
SAVE_RANGE = range(2, NO_SAVE + 1)


def build_attacker(config: dict) -> AttackerProfile:
    """Build an AttackerProfile from the sidebar's attacker config dict."""
    return AttackerProfile(
        models=config["models"],
        flat_attacks=config["attacks"],
        variable_attacks_scalar=config.get("attack_dice", 0),
        variable_attacks_type=config.get("attack_dice_type", "D6"),
        torrent=config.get("torrent", False),
        skill=config["skill"],
        strength=config["strength"],
        armor_pierce=config.get("armor_pierce", 0),
        flat_damage=config.get("damage", 1),
        variable_damage_scalar=config.get("damage_dice", 0),
        variable_damage_type=config.get("damage_dice_type", "D6"),
    )


def build_defender(config: dict) -> DefenderProfile:
    """Build a DefenderProfile from the sidebar's defender config dict.

    Saves are entered as 2..7 where 7 means "none"; an invulnerable save
    of 7 becomes None.
    """
    for key in ("armor_save", "invulnerable_save", "feel_no_pain"):
        value = config.get(key, NO_SAVE)
        if value not in SAVE_RANGE:
            raise ValueError(f"{key} must be between 2 and {NO_SAVE}, got {value}")

    invulnerable = config.get("invulnerable_save", NO_SAVE)
    feel_no_pain = config.get("feel_no_pain", NO_SAVE)
    return DefenderProfile(
        name=config.get("name", ""),
        models=config.get("models", 1),
        toughness=config["toughness"],
        armor_save=config.get("armor_save", NO_SAVE),
        invulnerable_save=None if invulnerable == NO_SAVE else invulnerable,
        feel_no_pain=None if feel_no_pain == NO_SAVE else feel_no_pain,
        wounds=config.get("wounds", 1),
    )


def session_cache() -> BoundedCache:
    """One cache per browser session, reused across reruns."""
    if "cache" not in st.session_state:
        st.session_state["cache"] = BoundedCache(CombatMath.cache_capacity)
    return st.session_state["cache"]


def attacker_config() -> dict:
    st.sidebar.subheader("Attacker")
    config: dict = {
        "models": st.sidebar.number_input("Models", min_value=0, max_value=100, value=10, key="atk_models"),
        "attacks": st.sidebar.number_input("Attacks per model", min_value=0, max_value=40, value=2),
        "skill": st.sidebar.number_input("Skill", min_value=1, max_value=NO_SAVE, value=3),
        "strength": st.sidebar.number_input("Strength", min_value=1, max_value=20, value=4),
        "armor_pierce": st.sidebar.number_input("Armor pierce", min_value=0, max_value=6, value=0),
        "damage": st.sidebar.number_input("Damage", min_value=0, max_value=20, value=1),
    }
    with st.sidebar.expander("Variable characteristics (display only)"):
        config["attack_dice"] = st.number_input("Attack dice", min_value=0, max_value=6, value=0)
        config["attack_dice_type"] = st.selectbox("Attack dice type", DICE_TYPES, index=1)
        config["damage_dice"] = st.number_input("Damage dice", min_value=0, max_value=6, value=0)
        config["damage_dice_type"] = st.selectbox("Damage dice type", DICE_TYPES, index=1)
        config["torrent"] = st.checkbox("Torrent")
    return config


def defender_config() -> dict:
    st.sidebar.subheader("Defender")
    return {
        "name": st.sidebar.text_input("Name", value="Target"),
        "models": st.sidebar.number_input("Models", min_value=1, max_value=100, value=5, key="def_models"),
        "toughness": st.sidebar.number_input("Toughness", min_value=1, max_value=20, value=4),
        "armor_save": st.sidebar.selectbox("Armor save", SAVE_RANGE, index=1),
        "invulnerable_save": st.sidebar.selectbox(
            "Invulnerable save (7 = none)", SAVE_RANGE, index=len(SAVE_RANGE) - 1,
        ),
        "wounds": st.sidebar.number_input("Wounds", min_value=1, max_value=30, value=1),
    }


def show_stage(stage: StageSummary) -> None:
    st.markdown(f"**{STAGE_TITLES[stage.name]}**")
    cols = st.columns(4)
    cols[0].metric("Per attack", f"{stage.probability:.1%}")
    cols[1].metric("Mean", f"{stage.mean:.2f}")
    cols[2].metric("Std dev", f"{stage.standard_deviation:.2f}")
    cols[3].metric("Expected range", str(stage.expected_range))
    st.bar_chart({"P(at least k)": [o.probability for o in stage.at_least]})


def main() -> None:
    st.set_page_config(page_title="Hammerstat Combat Calculator", layout="wide")
    st.title("Hammerstat Combat Calculator")

    st.sidebar.header("Profiles")
    attacker = build_attacker(attacker_config())
    st.sidebar.divider()
    defender = build_defender(defender_config())

    report = CombatMath(attacker, defender, cache=session_cache()).report()

    for stage in report.stages:
        show_stage(stage)
        st.divider()

    st.subheader("Damage")
    cols = st.columns(3)
    cols[0].metric("Mean", f"{report.damage.mean:.2f}")
    cols[1].metric("Std dev", f"{report.damage.standard_deviation:.2f}")
    cols[2].metric("Expected range", str(report.damage.expected_range))

    st.subheader("Report")
    st.code("\n".join(TextRenderer().render_report(report)))


if __name__ == "__main__":
    main()
