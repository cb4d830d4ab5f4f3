from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Tuple

import numpy as np

from .spells import (
    BLASTWAVE_MAX_TARGETS,
    BLEED_DURATION,
    BLEED_POWER,
    CLEANSE_DELAY,
    HEAL_AMOUNT,
    INCREASED_DAMAGE_MULTIPLIER,
    INCREASED_DAMAGE_VALUE,
    MANA_REGEN,
    POWER_INFUSION_DURATION,
    POWER_INFUSION_MULTIPLIER,
    SHIELD_WALL_DURATION,
    SHIELD_WALL_MULTIPLIER,
    STALL_LIMIT,
    SpellSpec,
    TargetShape,
    cooldown_field,
    spell_spec,
    spells_for,
)
from .state import (
    AOE_TARGET_INDEX,
    GameResult,
    GameState,
    Move,
    PieceState,
    PieceType,
    Player,
    PlayerState,
    SpellType,
)

ROSTER_SIZE = 8
STARTING_MANA = 20
DEFAULT_ROSTER: Tuple[PieceType, ...] = (
    PieceType.TANK,
    PieceType.TANK,
    PieceType.HEALER,
    PieceType.HEALER,
    PieceType.DPS,
    PieceType.DPS,
    PieceType.DPS,
    PieceType.DPS,
)
BASE_HP = {PieceType.TANK: 27, PieceType.HEALER: 18, PieceType.DPS: 22}


def make_default_player(mana: int = STARTING_MANA) -> PlayerState:
    pieces = [
        PieceState(id=index, type=piece_type, hp=BASE_HP[piece_type], max_hp=BASE_HP[piece_type])
        for index, piece_type in enumerate(DEFAULT_ROSTER)
    ]
    return PlayerState(pieces=tuple(pieces), mana=mana)


def initialize_game_state(player1_starts: bool = True) -> GameState:
    return GameState(
        player1=make_default_player(),
        player2=make_default_player(),
        is_player1_turn=player1_starts,
        moves_since_last_kill=0,
        current_piece_index=0,
        round_starter_is_p1=player1_starts,
        round_number=1,
    )


# ----------------------------------------------------------------------
# Move generation
# ----------------------------------------------------------------------
def find_actor(state: GameState, player: Player) -> Optional[int]:
    """Index of the unit due to act for ``player``, scanning forward from the activation slot."""
    pieces = state.player_state(player).pieces
    count = len(pieces)
    if count == 0:
        return None
    index = state.current_piece_index % count
    for _ in range(count):
        if pieces[index].is_ready:
            return index
        index = (index + 1) % count
    return None


def generate_legal_moves(state: GameState, acting_player: Player) -> List[Move]:
    acting_player = Player(acting_player)
    actor_index = find_actor(state, acting_player)
    if actor_index is None:
        return []

    own = state.player_state(acting_player)
    actor = own.pieces[actor_index]
    moves: List[Move] = []
    for spell in spells_for(actor.type):
        spec = spell_spec(spell)
        if not _is_spell_available(actor, spec, own.mana):
            continue
        for target_player, target_index in _valid_targets(spec, actor_index, state, acting_player):
            moves.append(Move(acting_player, actor_index, spell, target_player, target_index))

    moves.append(Move.pass_move(acting_player, actor_index))
    return moves


def _is_spell_available(piece: PieceState, spec: SpellSpec, mana: int) -> bool:
    if mana < spec.mana_cost:
        return False
    field_name = cooldown_field(spec.spell)
    if field_name is not None and getattr(piece, field_name) != 0:
        return False
    return True


def _valid_targets(
    spec: SpellSpec,
    self_index: int,
    state: GameState,
    acting_player: Player,
) -> List[Tuple[Player, int]]:
    enemy_player = acting_player.opponent
    if spec.target == TargetShape.ENEMY_SINGLE:
        return [(enemy_player, index) for index, _ in state.player_state(enemy_player).living()]
    if spec.target == TargetShape.ALLY_SINGLE:
        return [(acting_player, index) for index, _ in state.player_state(acting_player).living()]
    if spec.target == TargetShape.SELF:
        return [(acting_player, self_index)]
    return [(enemy_player, AOE_TARGET_INDEX)]


# ----------------------------------------------------------------------
# State transition
# ----------------------------------------------------------------------
def apply_move(
    state: GameState,
    move: Move,
    *,
    rng: Optional[np.random.Generator] = None,
) -> GameState:
    """Return the successor of ``state`` after ``move``; ``state`` itself is never modified.

    ``rng`` drives Blastwave's target sampling. A fresh generator is used when
    it is omitted, so pass a seeded one wherever results must be reproducible.
    """
    acting_player = Player(move.acting_player)
    own = state.player_state(acting_player)
    enemy = state.player_state(acting_player.opponent)

    piece_died = False
    if move.is_pass:
        # A pass forfeits every remaining activation of the side, not just the actor's.
        own = replace(
            own,
            pieces=tuple(
                replace(piece, has_acted_this_round=True)
                if piece.hp > 0 and not piece.has_acted_this_round
                else piece
                for piece in own.pieces
            ),
        )
    else:
        spec = _validate_move(own, enemy, move)
        caster = replace(own.pieces[move.piece_index], has_acted_this_round=True)
        field_name = cooldown_field(spec.spell)
        if field_name is not None:
            caster = replace(caster, **{field_name: spec.cooldown})
        own = replace(own, mana=own.mana - spec.mana_cost).with_piece(move.piece_index, caster)
        own, enemy, piece_died = _resolve_spell(spec, move, caster, own, enemy, rng)

    player1 = own if acting_player == Player.ONE else enemy
    player2 = enemy if acting_player == Player.ONE else own

    round_ended = all_acted(player1) and all_acted(player2)
    roster_size = len(own.pieces)
    if round_ended:
        next_slot = 0
        next_starter = not state.round_starter_is_p1
        next_round = state.round_number + 1
        player1 = tick_round(player1, MANA_REGEN)
        player2 = tick_round(player2, MANA_REGEN)
    else:
        next_slot = (state.current_piece_index + 1) % roster_size
        next_starter = state.round_starter_is_p1
        next_round = state.round_number

    # Even slots belong to the round starter, odd slots to the other side.
    next_turn_is_p1 = next_starter if next_slot % 2 == 0 else not next_starter

    return replace(
        state,
        player1=player1,
        player2=player2,
        is_player1_turn=next_turn_is_p1,
        moves_since_last_kill=0 if piece_died else state.moves_since_last_kill + 1,
        current_piece_index=next_slot,
        round_starter_is_p1=next_starter,
        round_number=next_round,
    )


def all_acted(player_state: PlayerState) -> bool:
    return all(piece.has_acted_this_round for piece in player_state.pieces if piece.hp > 0)


def _validate_move(own: PlayerState, enemy: PlayerState, move: Move) -> SpellSpec:
    if not 0 <= move.piece_index < len(own.pieces):
        raise ValueError(f"Piece index {move.piece_index} out of range.")
    caster = own.pieces[move.piece_index]
    if caster.hp <= 0:
        raise ValueError("A dead piece cannot cast.")

    spec = spell_spec(move.spell)
    if spec.piece_type != caster.type:
        raise ValueError(f"{caster.type.name} cannot cast {move.spell.name}.")
    if own.mana < spec.mana_cost:
        raise ValueError(f"Not enough mana for {move.spell.name}.")
    field_name = cooldown_field(spec.spell)
    if field_name is not None and getattr(caster, field_name) != 0:
        raise ValueError(f"{move.spell.name} is on cooldown.")

    acting_player = Player(move.acting_player)
    expected = acting_player.opponent if spec.target.targets_enemy else acting_player
    if move.target_player is not None and Player(move.target_player) != expected:
        raise ValueError(f"{move.spell.name} must target player {int(expected)}.")
    if spec.target == TargetShape.SELF:
        if move.target_index not in (None, move.piece_index):
            raise ValueError(f"{move.spell.name} can only target the caster.")
    elif spec.target == TargetShape.ENEMY_ALL:
        if move.target_index not in (None, AOE_TARGET_INDEX):
            raise ValueError(f"{move.spell.name} hits the whole enemy side; no target index allowed.")
    else:
        side = enemy if spec.target.targets_enemy else own
        if move.target_player is None:
            raise ValueError(f"{move.spell.name} must target player {int(expected)}.")
        if move.target_index is None or not 0 <= move.target_index < len(side.pieces):
            raise ValueError(f"Target index {move.target_index} out of range.")
        if side.pieces[move.target_index].hp <= 0:
            raise ValueError("Cannot target a dead piece.")
    return spec


# ----------------------------------------------------------------------
# Spell effects
# ----------------------------------------------------------------------
def calculate_damage(target: PieceState, attacker: PieceState, base_damage: int) -> int:
    damage = float(base_damage)
    if target.increased_damage_taken > 0:
        damage *= INCREASED_DAMAGE_MULTIPLIER
    if attacker.power_infusion_duration > 0:
        damage *= POWER_INFUSION_MULTIPLIER
    if target.shield_wall_duration > 0:
        damage *= SHIELD_WALL_MULTIPLIER
    return round(damage)


def _strike(target: PieceState, attacker: PieceState, base_damage: int) -> Tuple[PieceState, bool]:
    damage = calculate_damage(target, attacker, base_damage)
    new_hp = max(0, target.hp - damage)
    died = target.hp > 0 and new_hp == 0
    return replace(target, hp=new_hp), died


def _resolve_spell(
    spec: SpellSpec,
    move: Move,
    caster: PieceState,
    own: PlayerState,
    enemy: PlayerState,
    rng: Optional[np.random.Generator],
) -> Tuple[PlayerState, PlayerState, bool]:
    spell = spec.spell
    piece_died = False

    if spec.target == TargetShape.ENEMY_SINGLE:
        target, piece_died = _strike(enemy.pieces[move.target_index], caster, spec.base_damage)
        if spell == SpellType.STUN:
            target = replace(target, is_stunned=True)
        elif spell == SpellType.REND:
            target = replace(
                target,
                bleed_duration=BLEED_DURATION,
                bleed_power=BLEED_POWER,
                increased_damage_taken=INCREASED_DAMAGE_VALUE,
            )
        enemy = enemy.with_piece(move.target_index, target)

    elif spec.target == TargetShape.SELF:
        if spell == SpellType.SHIELD_WALL:
            own = own.with_piece(move.piece_index, replace(caster, shield_wall_duration=SHIELD_WALL_DURATION))

    elif spec.target == TargetShape.ALLY_SINGLE:
        target = own.pieces[move.target_index]
        if spell == SpellType.FLASH_HEAL:
            target = replace(target, hp=target.hp + min(HEAL_AMOUNT, target.max_hp - target.hp))
        elif spell == SpellType.POWER_INFUSION:
            target = replace(target, power_infusion_duration=POWER_INFUSION_DURATION)
        elif spell == SpellType.CLEANSE:
            target = replace(target, cleanse_duration=CLEANSE_DELAY)
        own = own.with_piece(move.target_index, target)

    else:
        living = [index for index, _ in enemy.living()]
        if spell == SpellType.BLASTWAVE:
            living = _sample_targets(living, BLASTWAVE_MAX_TARGETS, rng)
        for index in living:
            target, died = _strike(enemy.pieces[index], caster, spec.base_damage)
            piece_died = piece_died or died
            enemy = enemy.with_piece(index, target)

    return own, enemy, piece_died


def _sample_targets(candidates: List[int], limit: int, rng: Optional[np.random.Generator]) -> List[int]:
    if not candidates:
        return []
    rng = rng if rng is not None else np.random.default_rng()
    chosen = rng.choice(len(candidates), size=min(limit, len(candidates)), replace=False)
    return [candidates[int(i)] for i in chosen]


# ----------------------------------------------------------------------
# Round bookkeeping
# ----------------------------------------------------------------------
def tick_round(player_state: PlayerState, mana_to_add: int) -> PlayerState:
    return PlayerState(
        pieces=tuple(_tick_piece(piece) for piece in player_state.pieces),
        mana=player_state.mana + mana_to_add,
    )


def _tick_piece(piece: PieceState) -> PieceState:
    hp = piece.hp
    bleed_duration = piece.bleed_duration
    bleed_power = piece.bleed_power
    if bleed_duration > 0 and hp > 0:
        hp = max(0, hp - bleed_power)
        bleed_duration = max(0, bleed_duration - 1)
        if bleed_duration == 0:
            bleed_power = 0
    increased_damage = INCREASED_DAMAGE_VALUE if bleed_duration > 0 else 0

    # Stun only survives the tick while the unit's own shield wall is still up.
    stunned = piece.is_stunned and piece.shield_wall_duration != 0

    cleanse = piece.cleanse_duration
    if cleanse == CLEANSE_DELAY:
        stunned = False
        bleed_duration = 0
        bleed_power = 0
        increased_damage = 0
        cleanse = 0
    elif cleanse > 0:
        cleanse -= 1

    return replace(
        piece,
        hp=hp,
        is_stunned=stunned,
        has_acted_this_round=False,
        shield_wall_duration=max(0, piece.shield_wall_duration - 1),
        power_infusion_duration=max(0, piece.power_infusion_duration - 1),
        bleed_duration=bleed_duration,
        bleed_power=bleed_power,
        increased_damage_taken=increased_damage,
        cleanse_duration=cleanse,
        cooldown_rend=max(0, piece.cooldown_rend - 1),
        cooldown_cleanse=max(0, piece.cooldown_cleanse - 1),
        cooldown_special_st=max(0, piece.cooldown_special_st - 1),
        cooldown_special_aoe=max(0, piece.cooldown_special_aoe - 1),
    )


# ----------------------------------------------------------------------
# Terminal detection
# ----------------------------------------------------------------------
def is_terminal(state: GameState) -> Tuple[bool, GameResult]:
    p1_alive = state.player1.living_count() > 0
    p2_alive = state.player2.living_count() > 0

    if not p1_alive and not p2_alive:
        return True, GameResult.TIE
    if not p1_alive:
        return True, GameResult.PLAYER2_WIN
    if not p2_alive:
        return True, GameResult.PLAYER1_WIN
    if state.moves_since_last_kill >= STALL_LIMIT:
        hp1 = state.player1.hp_total()
        hp2 = state.player2.hp_total()
        if hp1 == hp2:
            return True, GameResult.TIE
        return True, GameResult.PLAYER1_WIN if hp1 > hp2 else GameResult.PLAYER2_WIN
    return False, GameResult.ONGOING


def game_result(state: GameState) -> GameResult:
    return is_terminal(state)[1]
