from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Iterable, Optional, Tuple


class Player(IntEnum):
    ONE = 1
    TWO = 2

    @property
    def opponent(self) -> "Player":
        return Player.TWO if self is Player.ONE else Player.ONE


class PieceType(Enum):
    TANK = "tank"
    HEALER = "healer"
    DPS = "dps"


class SpellType(Enum):
    # Tank
    THUNDERCLAP = "thunderclap"
    SHIELD_WALL = "shield_wall"
    STUN = "stun"
    REND = "rend"
    # Healer
    FLASH_HEAL = "flash_heal"
    POWER_INFUSION = "power_infusion"
    SMITE = "smite"
    CLEANSE = "cleanse"
    # DPS
    FIREBALL = "fireball"
    BLASTWAVE = "blastwave"
    SPECIAL_ST = "special_st"
    SPECIAL_AOE = "special_aoe"
    PASS = "pass"


class GameResult(Enum):
    ONGOING = "ongoing"
    PLAYER1_WIN = "player1_win"
    PLAYER2_WIN = "player2_win"
    TIE = "tie"


@dataclass(frozen=True)
class PieceState:
    id: int
    type: PieceType
    hp: int
    max_hp: int
    is_stunned: bool = False
    has_acted_this_round: bool = False
    shield_wall_duration: int = 0
    power_infusion_duration: int = 0
    bleed_duration: int = 0
    bleed_power: int = 0
    increased_damage_taken: int = 0
    cleanse_duration: int = 0
    cooldown_rend: int = 0
    cooldown_cleanse: int = 0
    cooldown_special_st: int = 0
    cooldown_special_aoe: int = 0

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    @property
    def is_ready(self) -> bool:
        """Alive, not stunned and still holding its activation for this round."""
        return self.hp > 0 and not self.is_stunned and not self.has_acted_this_round

    @property
    def cooldown_sum(self) -> int:
        return self.cooldown_rend + self.cooldown_cleanse + self.cooldown_special_st + self.cooldown_special_aoe


@dataclass(frozen=True)
class PlayerState:
    pieces: Tuple[PieceState, ...]
    mana: int

    def __post_init__(self) -> None:
        # Accept any sequence but always store an immutable tuple.
        object.__setattr__(self, "pieces", tuple(self.pieces))

    def __len__(self) -> int:
        return len(self.pieces)

    def living(self) -> Iterable[Tuple[int, PieceState]]:
        for index, piece in enumerate(self.pieces):
            if piece.hp > 0:
                yield index, piece

    def living_count(self) -> int:
        return sum(1 for piece in self.pieces if piece.hp > 0)

    def hp_total(self) -> int:
        return sum(max(0, piece.hp) for piece in self.pieces)

    def with_piece(self, index: int, piece: PieceState) -> "PlayerState":
        pieces = list(self.pieces)
        pieces[index] = piece
        return replace(self, pieces=tuple(pieces))


@dataclass(frozen=True)
class GameState:
    player1: PlayerState
    player2: PlayerState
    is_player1_turn: bool  # whose activation is next
    moves_since_last_kill: int = 0  # stall clock for the tiebreak rule
    current_piece_index: int = 0  # activation slot within the round
    round_starter_is_p1: bool = True
    round_number: int = 1

    @property
    def current_player(self) -> Player:
        return Player.ONE if self.is_player1_turn else Player.TWO

    def player_state(self, player: Player) -> PlayerState:
        return self.player1 if player == Player.ONE else self.player2

    def replace_player(self, player: Player, player_state: PlayerState) -> "GameState":
        if player == Player.ONE:
            return replace(self, player1=player_state)
        return replace(self, player2=player_state)

    def __repr__(self) -> str:
        def side(ps: PlayerState) -> str:
            return " ".join(f"{p.type.value[0].upper()}{p.hp}" for p in ps.pieces)

        return (
            f"GameState(round={self.round_number}, slot={self.current_piece_index}, "
            f"turn={self.current_player.name}, stall={self.moves_since_last_kill})\n"
            f"P1 [{self.player1.mana}]: {side(self.player1)}\n"
            f"P2 [{self.player2.mana}]: {side(self.player2)}"
        )


@dataclass(frozen=True)
class Move:
    acting_player: Player
    piece_index: int
    spell: SpellType
    target_player: Optional[Player] = None
    target_index: Optional[int] = None

    @staticmethod
    def pass_move(acting_player: Player, piece_index: int = 0) -> "Move":
        return Move(acting_player, piece_index, SpellType.PASS)

    @property
    def is_pass(self) -> bool:
        return self.spell == SpellType.PASS

    def as_tuple(self) -> Tuple[int, int, str, Optional[int], Optional[int]]:
        target_player = int(self.target_player) if self.target_player is not None else None
        return (int(self.acting_player), self.piece_index, self.spell.value, target_player, self.target_index)


AOE_TARGET_INDEX = -1
