"""Spell table: cost, cooldown, targeting shape and base power per spell."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from .state import PieceType, SpellType


class TargetShape(Enum):
    ENEMY_SINGLE = "enemy_single"
    ALLY_SINGLE = "ally_single"
    SELF = "self"
    ENEMY_ALL = "enemy_all"

    @property
    def targets_enemy(self) -> bool:
        return self in (TargetShape.ENEMY_SINGLE, TargetShape.ENEMY_ALL)


@dataclass(frozen=True)
class SpellSpec:
    spell: SpellType
    piece_type: PieceType
    target: TargetShape
    mana_cost: int
    cooldown: int = 0
    base_damage: int = 0

    @property
    def is_cooldown_gated(self) -> bool:
        return self.cooldown > 0


MANA_REGEN = 6
STALL_LIMIT = 30
BLASTWAVE_MAX_TARGETS = 5

SHIELD_WALL_DURATION = 2
POWER_INFUSION_DURATION = 2
BLEED_DURATION = 3
BLEED_POWER = 12
INCREASED_DAMAGE_VALUE = 10
CLEANSE_DELAY = 1
HEAL_AMOUNT = 7

INCREASED_DAMAGE_MULTIPLIER = 1.10
POWER_INFUSION_MULTIPLIER = 1.20
SHIELD_WALL_MULTIPLIER = 0.70

SPELLS: Dict[SpellType, SpellSpec] = {
    spec.spell: spec
    for spec in (
        SpellSpec(SpellType.THUNDERCLAP, PieceType.TANK, TargetShape.ENEMY_SINGLE, 2, base_damage=7),
        SpellSpec(SpellType.SHIELD_WALL, PieceType.TANK, TargetShape.SELF, 4),
        SpellSpec(SpellType.STUN, PieceType.TANK, TargetShape.ENEMY_SINGLE, 5, base_damage=1),
        SpellSpec(SpellType.REND, PieceType.TANK, TargetShape.ENEMY_SINGLE, 6, cooldown=3, base_damage=5),
        SpellSpec(SpellType.SMITE, PieceType.HEALER, TargetShape.ENEMY_SINGLE, 2, base_damage=6),
        SpellSpec(SpellType.FLASH_HEAL, PieceType.HEALER, TargetShape.ALLY_SINGLE, 4),
        SpellSpec(SpellType.POWER_INFUSION, PieceType.HEALER, TargetShape.ALLY_SINGLE, 3),
        SpellSpec(SpellType.CLEANSE, PieceType.HEALER, TargetShape.ALLY_SINGLE, 4, cooldown=3),
        SpellSpec(SpellType.FIREBALL, PieceType.DPS, TargetShape.ENEMY_SINGLE, 3, base_damage=9),
        SpellSpec(SpellType.BLASTWAVE, PieceType.DPS, TargetShape.ENEMY_ALL, 5, base_damage=7),
        SpellSpec(SpellType.SPECIAL_ST, PieceType.DPS, TargetShape.ENEMY_SINGLE, 7, cooldown=3, base_damage=12),
        SpellSpec(SpellType.SPECIAL_AOE, PieceType.DPS, TargetShape.ENEMY_ALL, 8, cooldown=3, base_damage=10),
    )
}

# Generation order of each piece type's repertoire.
REPERTOIRES: Dict[PieceType, Tuple[SpellType, ...]] = {
    PieceType.TANK: (SpellType.THUNDERCLAP, SpellType.SHIELD_WALL, SpellType.STUN, SpellType.REND),
    PieceType.HEALER: (SpellType.SMITE, SpellType.FLASH_HEAL, SpellType.POWER_INFUSION, SpellType.CLEANSE),
    PieceType.DPS: (SpellType.FIREBALL, SpellType.BLASTWAVE, SpellType.SPECIAL_ST, SpellType.SPECIAL_AOE),
}

# PieceState field holding each cooldown-gated spell's counter.
COOLDOWN_FIELDS: Dict[SpellType, str] = {
    SpellType.REND: "cooldown_rend",
    SpellType.CLEANSE: "cooldown_cleanse",
    SpellType.SPECIAL_ST: "cooldown_special_st",
    SpellType.SPECIAL_AOE: "cooldown_special_aoe",
}

MAX_COOLDOWN_SUM = sum(spec.cooldown for spec in SPELLS.values())


def _check_tables() -> None:
    castable = [spell for spell in SpellType if spell != SpellType.PASS]
    missing = [spell.name for spell in castable if spell not in SPELLS]
    if missing:
        raise RuntimeError(f"Spells without a table entry: {missing}")
    for piece_type in PieceType:
        if piece_type not in REPERTOIRES:
            raise RuntimeError(f"Piece type {piece_type.name} has no repertoire.")
        for spell in REPERTOIRES[piece_type]:
            if SPELLS[spell].piece_type != piece_type:
                raise RuntimeError(f"{spell.name} listed in the {piece_type.name} repertoire.")
    gated = {spell for spell, spec in SPELLS.items() if spec.is_cooldown_gated}
    if gated != set(COOLDOWN_FIELDS):
        raise RuntimeError("Cooldown-gated spells and cooldown fields are out of sync.")


_check_tables()


def spell_spec(spell: SpellType) -> SpellSpec:
    try:
        return SPELLS[spell]
    except KeyError:
        raise ValueError(f"{spell.name} is not a castable spell.") from None


def spells_for(piece_type: PieceType) -> Tuple[SpellType, ...]:
    return REPERTOIRES[piece_type]


def cooldown_field(spell: SpellType) -> Optional[str]:
    return COOLDOWN_FIELDS.get(spell)
