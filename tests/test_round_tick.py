from squadbattle.core import (
    GameState,
    Move,
    PieceState,
    PieceType,
    Player,
    PlayerState,
    SpellType,
    apply_move,
    make_default_player,
    tick_round,
)


def tank(index=0, hp=27, max_hp=27, **kwargs):
    return PieceState(id=index, type=PieceType.TANK, hp=hp, max_hp=max_hp, **kwargs)


def test_tick_of_clean_side_only_adds_mana():
    side = make_default_player(mana=4)
    ticked = tick_round(side, 6)
    assert ticked.mana == 10
    assert ticked.pieces == side.pieces
    assert tick_round(ticked, 0).pieces == side.pieces


def test_tick_clears_acted_flag_even_on_dead_units():
    side = PlayerState(pieces=(tank(0, has_acted_this_round=True), tank(1, hp=0, has_acted_this_round=True)), mana=0)
    ticked = tick_round(side, 6)
    assert [p.has_acted_this_round for p in ticked.pieces] == [False, False]
    assert ticked.pieces[1].hp == 0


def test_rend_bleeds_for_exactly_three_ticks():
    attacker = PlayerState(pieces=(tank(0),), mana=20)
    defender = PlayerState(pieces=(tank(0, hp=100, max_hp=100),), mana=20)
    state = GameState(player1=attacker, player2=defender, is_player1_turn=True)

    state = apply_move(state, Move(Player.ONE, 0, SpellType.REND, Player.TWO, 0))
    side = state.player2
    hp_after_hit = side.pieces[0].hp
    assert hp_after_hit == 95

    side = tick_round(side, 0)
    assert side.pieces[0].hp == hp_after_hit - 12
    assert side.pieces[0].increased_damage_taken == 10
    side = tick_round(side, 0)
    side = tick_round(side, 0)

    victim = side.pieces[0]
    assert victim.hp == hp_after_hit - 36
    assert (victim.bleed_duration, victim.bleed_power, victim.increased_damage_taken) == (0, 0, 0)

    assert tick_round(side, 0).pieces[0].hp == hp_after_hit - 36


def test_bleed_never_takes_hp_below_zero():
    side = PlayerState(pieces=(tank(0, hp=5, bleed_duration=2, bleed_power=12, increased_damage_taken=10),), mana=0)
    ticked = tick_round(side, 0)
    assert ticked.pieces[0].hp == 0
    assert ticked.pieces[0].bleed_duration == 1


def test_stun_wears_off_without_shield_wall():
    side = PlayerState(pieces=(tank(0, is_stunned=True),), mana=0)
    assert tick_round(side, 0).pieces[0].is_stunned is False


def test_stun_lingers_while_own_shield_wall_is_up():
    side = PlayerState(pieces=(tank(0, is_stunned=True, shield_wall_duration=2),), mana=0)

    first = tick_round(side, 0)
    assert first.pieces[0].is_stunned is True
    assert first.pieces[0].shield_wall_duration == 1

    second = tick_round(first, 0)
    assert second.pieces[0].is_stunned is True
    assert second.pieces[0].shield_wall_duration == 0

    third = tick_round(second, 0)
    assert third.pieces[0].is_stunned is False


def test_cleanse_triggers_on_next_tick():
    afflicted = tank(
        0,
        hp=20,
        is_stunned=True,
        shield_wall_duration=2,
        bleed_duration=3,
        bleed_power=12,
        increased_damage_taken=10,
        cleanse_duration=1,
    )
    ticked = tick_round(PlayerState(pieces=(afflicted,), mana=0), 0).pieces[0]

    # The bleed for this tick still lands before the cleanse wipes it.
    assert ticked.hp == 8
    assert ticked.is_stunned is False
    assert (ticked.bleed_duration, ticked.bleed_power, ticked.increased_damage_taken) == (0, 0, 0)
    assert ticked.cleanse_duration == 0


def test_durations_and_cooldowns_count_down_to_zero():
    piece = PieceState(
        id=0,
        type=PieceType.DPS,
        hp=22,
        max_hp=22,
        power_infusion_duration=1,
        cooldown_special_st=3,
        cooldown_special_aoe=1,
    )
    ticked = tick_round(PlayerState(pieces=(piece,), mana=0), 0).pieces[0]
    assert ticked.power_infusion_duration == 0
    assert ticked.cooldown_special_st == 2
    assert ticked.cooldown_special_aoe == 0

    again = tick_round(PlayerState(pieces=(ticked,), mana=0), 0).pieces[0]
    assert again.power_infusion_duration == 0
    assert again.cooldown_special_aoe == 0
    assert again.cooldown_special_st == 1
