"""
Tests for the per-action evaluators.

Scores are checked exactly where the board makes the arithmetic easy to
follow; otherwise by the reasoning entries that must be present.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
import logging
import random

from tactician.constants import INVALID_SCORE
from tactician.evaluators import (
    AbilityAction, AbilityEvaluator, CardEvaluator, CombinedEvaluator, DeployAction, DeployEvaluator,
    MoveAction, MoveEvaluator, PlayCardAction, SectionAttackAction, SectionAttackEvaluator,
    UnitAttackAction, UnitAttackEvaluator, default_evaluator, evaluate_card_play,
)
from tactician.models import (
    Affinity, Condition, ConditionalEffect, DamageType, SectionRef, Side, StatMod, TargetType,
    UnitDefinition, UnitTypeRef, Upgrade, UpgradeRef,
)
from tests.board_builder import BoardBuilder, card, exhausted

logger = logging.getLogger(__name__)


def has_reason(action_or_eval, prefix: str) -> bool:
    return any(r.startswith(prefix) for r in action_or_eval.reasoning)


# =============================================================================
# DEPLOYMENT
# =============================================================================

class TestDeployEvaluator:
    """Lane delta, strategic fit and affordability"""

    def setup_method(self):
        self.evaluator = DeployEvaluator()

    def test_cheap_unit_into_empty_lane(self):
        """Impact 23 + balanced-lane +10 + dominance roll 10..30"""
        ctx = BoardBuilder().with_pool("Dart").with_budget(3).context()
        result = self.evaluator.evaluate(DeployAction("Dart", 0), ctx)

        assert 43 <= result.score <= 63
        assert has_reason(result, "Impact (+23.0)")
        assert has_reason(result, "Cheap unit for balanced lane")
        assert has_reason(result, "Dominates lane")

    def test_dominance_roll_uses_context_rng(self):
        board = BoardBuilder().with_pool("Dart").with_budget(3)
        first = self.evaluator.evaluate(DeployAction("Dart", 0), board.context(random.Random(5)))
        second = self.evaluator.evaluate(DeployAction("Dart", 0), board.context(random.Random(5)))
        assert first.score == second.score

    def test_not_enough_resources(self):
        ctx = BoardBuilder().with_pool("Mammoth").with_budget(1).context()
        result = self.evaluator.evaluate(DeployAction("Mammoth", 0), ctx)
        assert result.score == INVALID_SCORE
        assert result.reasoning == ["Not enough resources (1 < 3)"]

    def test_first_turn_uses_initial_budget(self):
        ctx = BoardBuilder().with_turn(1).with_budget(0, initial=3).context()
        result = self.evaluator.evaluate(DeployAction("Mammoth", 1), ctx)
        assert result.score != INVALID_SCORE

    def test_energy_reserved_for_cards(self):
        """Paying the class out of energy must leave enough for the priciest card"""
        board = (
            BoardBuilder()
            .with_budget(1)
            .with_energy(3)
            .with_hand(card("big_hit", "DAMAGE", cost=3, value=3, target_type=TargetType.UNIT))
        )
        result = self.evaluator.evaluate(DeployAction("Talon", 0), board.context())
        assert result.is_invalid
        assert result.reasoning[0].startswith("Reserving energy")

    def test_copy_limit(self):
        board = BoardBuilder().with_budget(5).with_deployed("Dart", 99)
        result = self.evaluator.evaluate(DeployAction("Dart", 0), board.context())
        assert result.reasoning[0].startswith("Deployment limit reached")

    def test_no_ready_copies(self):
        board = BoardBuilder().with_budget(5).with_ready_copies("Dart", 0)
        result = self.evaluator.evaluate(DeployAction("Dart", 0), board.context())
        assert result.reasoning == ["No copies available"]

    def test_ready_copies_left(self):
        board = BoardBuilder().with_budget(5).with_ready_copies("Dart", 1)
        assert not self.evaluator.evaluate(DeployAction("Dart", 0), board.context()).is_invalid

    def test_limit_upgrade_raises_deployment_limit(self):
        drone = UnitDefinition("Drone", unit_class=1, attack=1, speed=2, hull=1, limit=2)
        board = BoardBuilder().define(drone).with_budget(5).with_deployed("Drone", 2)
        result = self.evaluator.evaluate(DeployAction("Drone", 0), board.context())
        assert result.reasoning == ["Deployment limit reached (2/2)"]

        board.with_upgrades(Upgrade("Hangar", "Drone", mod=StatMod("limit", 1)))
        assert not self.evaluator.evaluate(DeployAction("Drone", 0), board.context()).is_invalid

    def test_strategic_fit_uses_upgraded_stats(self):
        """Talon is speed 3; a +1 speed upgrade makes it a fast unit for a losing lane"""
        board = BoardBuilder().with_budget(5).own_section(0, hull=4)
        plain = self.evaluator.evaluate(DeployAction("Talon", 0), board.context())
        assert not has_reason(plain, "Fast unit for losing lane")

        board.with_upgrades(Upgrade("Thrusters", "Talon", mod=StatMod("speed", 1)))
        upgraded = self.evaluator.evaluate(DeployAction("Talon", 0), board.context())
        assert has_reason(upgraded, "Fast unit for losing lane (+15.0)")

    def test_cpu_limit_ignores_tokens(self):
        blocked = BoardBuilder().with_budget(5).with_cpu_limit(1).friendly("Dart", lane=2)
        assert self.evaluator.evaluate(DeployAction("Dart", 0), blocked.context()).is_invalid

        tokens_only = BoardBuilder().with_budget(5).with_cpu_limit(1).friendly("Jammer", lane=2)
        assert not self.evaluator.evaluate(DeployAction("Dart", 0), tokens_only.context()).is_invalid

    def test_max_per_lane(self):
        board = BoardBuilder().with_budget(5).friendly("Skipper", lane=0)
        result = self.evaluator.evaluate(DeployAction("Skipper", 0), board.context())
        assert result.reasoning == ["Max per lane reached (1/1)"]
        assert not self.evaluator.evaluate(DeployAction("Skipper", 1), board.context()).is_invalid

    def test_ion_stacking_guard(self):
        """A second ION unit needs shielded targets to strip"""
        board = BoardBuilder().with_budget(5).friendly("Ion Lancer", lane=0)
        result = self.evaluator.evaluate(DeployAction("Ion Lancer", 0), board.context())
        assert result.is_invalid
        assert result.reasoning[0].startswith("ION stacking")

    def test_lane_less_candidate_is_invalid(self):
        ctx = BoardBuilder().with_budget(5).context()
        assert self.evaluator.evaluate(DeployAction("Dart"), ctx).reasoning == ["No lane selected"]

    def test_overkill_against_degraded_section(self):
        board = (
            BoardBuilder()
            .with_budget(5)
            .friendly("Mammoth", lane=0)
            .enemy_section(0, hull=4)
        )
        result = self.evaluator.evaluate(DeployAction("Dart", 0), board.context())
        assert has_reason(result, "Overkill: enemy section damaged")
        assert result.score < 0

    def test_mark_on_deploy(self):
        board = BoardBuilder().with_budget(5).enemy("Dart", lane=1)
        result = self.evaluator.evaluate(DeployAction("Scanner", 1), board.context())
        assert has_reason(result, "Marks an enemy on deploy (+15.0)")

    def test_unknown_unit_raises(self):
        from tactician.errors import UnknownUnitError
        ctx = BoardBuilder().with_budget(5).context()
        with pytest.raises(UnknownUnitError):
            self.evaluator.evaluate(DeployAction("Ghost", 0), ctx)


# =============================================================================
# CARDS
# =============================================================================

DESTROY = card("obliterate", "DESTROY", cost=2, target_type=TargetType.UNIT, affinity=Affinity.ENEMY)
ZAP = card("zap", "DAMAGE", cost=1, value=2, target_type=TargetType.UNIT, affinity=Affinity.ENEMY)


class TestCardEvaluator:
    """evaluate_card_play per effect type"""

    def test_destroy_single_target(self):
        """Resource 40 + priority 63 (ready 25, class 10, attack 8, lethal 20) - cost 8"""
        board = BoardBuilder().with_energy(5).enemy("Mammoth", lane=0, unit_id="mammoth")
        ctx = board.context()
        result = evaluate_card_play(DESTROY, ctx.enemy.find_unit("mammoth"), ctx)
        assert result.score == pytest.approx(95)
        assert has_reason(result, "Cost 2 (-8.0)")

    def test_damage_single_target_lethal(self):
        """Base 16 + lethal 65 + priority 48 - cost 4"""
        board = BoardBuilder().with_energy(5).enemy("Dart", lane=0, unit_id="dart")
        ctx = board.context()
        result = evaluate_card_play(ZAP, ctx.enemy.find_unit("dart"), ctx)
        assert result.score == pytest.approx(125)

    def test_cost_weight_from_strategy(self, tmp_path):
        import json
        from tactician.strategy_config import StrategyConfig
        from tactician.context import EvaluationContext

        path = tmp_path / "cheap.json"
        path.write_text(json.dumps({"evaluator_weights": {"card": {"cost_weight": 0}}}))
        board = BoardBuilder().enemy("Mammoth", lane=0, unit_id="mammoth")
        ctx = EvaluationContext.build(board.build(), board.catalog, strategy=StrategyConfig(str(path)))

        result = evaluate_card_play(DESTROY, ctx.enemy.find_unit("mammoth"), ctx)
        assert result.score == pytest.approx(103)

    def test_unknown_effect_is_neutral(self):
        ctx = BoardBuilder().context()
        result = evaluate_card_play(card("mystery", "TELEPORT_SHIP"), None, ctx)
        assert result.score == 0
        assert result.reasoning == ["Unscored effect TELEPORT_SHIP"]

    def test_gain_energy_enables_card(self):
        board = (
            BoardBuilder()
            .with_energy(2)
            .with_hand(card("surge", "GAIN_ENERGY", cost=0, value=2),
                       card("finisher", "DESTROY", cost=4, target_type=TargetType.UNIT))
        )
        result = evaluate_card_play(card("surge", "GAIN_ENERGY", cost=0, value=2), None, board.context())
        assert result.score == 80

    def test_gain_energy_enables_nothing(self):
        ctx = BoardBuilder().with_energy(2).context()
        assert evaluate_card_play(card("surge", "GAIN_ENERGY", cost=0, value=2), None, ctx).score == 1

    def test_draw_values_leftover_energy(self):
        ctx = BoardBuilder().with_energy(4).context()
        assert evaluate_card_play(card("scan", "DRAW", cost=1, value=1), None, ctx).score == 16

    def test_heal_shields(self):
        board = BoardBuilder().friendly("Talon", lane=0, unit_id="talon", shields=0)
        ctx = board.context()
        result = evaluate_card_play(card("patch", "HEAL_SHIELDS", value=2, target_type=TargetType.UNIT),
                                    ctx.friendly.find_unit("talon"), ctx)
        assert result.score == 5

    def test_attack_buff_with_go_again(self):
        """class 2 x 10 + 1 x 8, go again +40, cost -4"""
        board = BoardBuilder().friendly("Talon", lane=0, unit_id="talon")
        ctx = board.context()
        overcharge = card("overcharge", "MODIFY_STAT", cost=1, target_type=TargetType.UNIT,
                          affinity=Affinity.FRIENDLY, mod=StatMod("attack", 1), go_again=True)
        result = evaluate_card_play(overcharge, ctx.friendly.find_unit("talon"), ctx)
        assert result.score == pytest.approx(64)

    def test_buff_on_exhausted_unit(self):
        board = BoardBuilder().friendly("Talon", lane=0, unit_id="talon", is_exhausted=True)
        ctx = board.context()
        overcharge = card("overcharge", "MODIFY_STAT", cost=1, target_type=TargetType.UNIT,
                          mod=StatMod("attack", 1))
        assert evaluate_card_play(overcharge, ctx.friendly.find_unit("talon"), ctx).score == -1

    def test_speed_buff_outpaces_interceptor(self):
        board = (
            BoardBuilder()
            .friendly("Talon", lane=0, unit_id="talon")   # speed 3
            .enemy("Dart", lane=0)                        # speed 4
        )
        ctx = board.context()
        boost = card("boost", "MODIFY_STAT", cost=0, target_type=TargetType.UNIT, mod=StatMod("speed", 2))
        result = evaluate_card_play(boost, ctx.friendly.find_unit("talon"), ctx)
        assert has_reason(result, "Outpaces interceptors (+60.0)")

    def test_tokens_invalid_when_every_lane_jammed(self):
        board = BoardBuilder()
        for lane in range(3):
            board.friendly("Jammer", lane=lane)
        result = evaluate_card_play(card("decoys", "CREATE_TOKENS", cost=1), None, board.context())
        assert result.is_invalid

    def test_tokens_scaled_by_free_lanes(self):
        board = (
            BoardBuilder()
            .friendly("Mammoth", lane=0)
            .friendly("Jammer", lane=1)
        )
        result = evaluate_card_play(card("decoys", "CREATE_TOKENS", cost=1), None, board.context())
        # (30 + 3 CPU x 5 + 15 - 4) x 2/3
        assert result.score == pytest.approx(56 * 2 / 3)

    def test_lane_wipe_counts_both_sides(self):
        board = (
            BoardBuilder()
            .enemy("Mammoth", lane=0)
            .friendly("Dart", lane=0)
        )
        ctx = board.context()
        from tactician.models import LaneRef
        wipe = card("nova", "DESTROY", cost=3, target_type=TargetType.LANE, scope="LANE")
        result = evaluate_card_play(wipe, LaneRef(0, Side.ENEMY), ctx)
        # enemy (5 + 15) x 1.5 = 30, own (2 + 5) x 1.5 = 10.5
        assert result.score == pytest.approx((30 - 10.5) * 4 - 12)

    def test_card_evaluator_routes_actions(self):
        board = BoardBuilder().enemy("Dart", lane=0, unit_id="dart")
        ctx = board.context()
        scored = CardEvaluator().score(PlayCardAction(ZAP, ctx.enemy.find_unit("dart")), ctx)
        assert scored.score == pytest.approx(125)
        assert scored.reasoning[0] == "Base damage (+16.0)"


READY = card("rally", "READY_UNIT", cost=1, target_type=TargetType.UNIT, affinity=Affinity.FRIENDLY)


class TestReadyUnitCard:
    """Readying an exhausted friendly unit"""

    def test_ready_target_invalid(self):
        ctx = BoardBuilder().friendly("Talon", lane=0, unit_id="talon").context()
        result = evaluate_card_play(READY, ctx.friendly.find_unit("talon"), ctx)
        assert result.is_invalid
        assert result.reasoning == ["Talon is already ready"]

    def test_readied_unit_attacks_unchecked(self):
        """Ship 24 + attack 24 + intercepts 20 + unchecked 25 - cost 4"""
        board = (
            BoardBuilder()
            .friendly("Talon", lane=0, unit_id="talon", is_exhausted=True)   # speed 3
            .enemy("Mammoth", lane=0)                                         # speed 1
        )
        ctx = board.context()
        result = evaluate_card_play(READY, ctx.friendly.find_unit("talon"), ctx)
        assert has_reason(result, "Attacks unchecked (+25.0)")
        assert result.score == pytest.approx(89)

    def test_readied_unit_outpaces_interceptor(self):
        board = (
            BoardBuilder()
            .friendly("Mammoth", lane=0)                                            # speed 1
            .friendly("Dogfighter", lane=0, unit_id="dogfighter", is_exhausted=True)  # speed 5
            .enemy("Talon", lane=0)                                                 # speed 3
        )
        ctx = board.context()
        result = evaluate_card_play(READY, ctx.friendly.find_unit("dogfighter"), ctx)
        assert has_reason(result, "Outpaces 1 enemy interceptor(s) (+20.0)")
        assert has_reason(result, "Attacks unchecked")

    def test_no_projection_bonus_when_still_interceptable(self):
        board = (
            BoardBuilder()
            .friendly("Mammoth", lane=0, unit_id="mammoth", is_exhausted=True)
            .enemy("Dart", lane=0)
        )
        ctx = board.context()
        result = evaluate_card_play(READY, ctx.friendly.find_unit("mammoth"), ctx)
        assert not has_reason(result, "Attacks unchecked")
        assert not has_reason(result, "Outpaces")


# =============================================================================
# SPECIAL DAMAGE CARDS
# =============================================================================

class TestSpecialDamageCards:
    """Overflow, splash and scaling damage"""

    def test_overflow_to_ship(self):
        """3 damage into a 1/1 Dart: 24 + lethal 65 + overflow 1 x 12 - cost 8"""
        board = BoardBuilder().enemy("Dart", lane=0, unit_id="dart")
        ctx = board.context()
        overflow = card("breach", "OVERFLOW_DAMAGE", cost=2, value=3, target_type=TargetType.UNIT)
        result = evaluate_card_play(overflow, ctx.enemy.find_unit("dart"), ctx)
        assert has_reason(result, "Overflows 1 to ship (+12.0)")
        assert result.score == pytest.approx(93)

    def test_overflow_marked_bonus(self):
        board = BoardBuilder().enemy("Dart", lane=0, unit_id="dart", is_marked=True)
        ctx = board.context()
        overflow = card("breach", "OVERFLOW_DAMAGE", cost=2, value=3, target_type=TargetType.UNIT,
                        marked_bonus=2)
        result = evaluate_card_play(overflow, ctx.enemy.find_unit("dart"), ctx)
        assert result.reasoning[0] == "Marked target (+2 damage)"
        assert has_reason(result, "Overflows 3 to ship (+36.0)")
        assert result.score == pytest.approx(133)

    def test_piercing_overflow_ignores_shields(self):
        """2 piercing into Talon (hull 2, shields 1): 16 + lethal 80 + bypass 4 - cost 4"""
        board = BoardBuilder().enemy("Talon", lane=0, unit_id="talon")
        ctx = board.context()
        lance = card("lance", "OVERFLOW_DAMAGE", cost=1, value=2, target_type=TargetType.UNIT,
                     damage_type=DamageType.PIERCING)
        result = evaluate_card_play(lance, ctx.enemy.find_unit("talon"), ctx)
        assert not has_reason(result, "Overflows")
        assert result.score == pytest.approx(96)

    def test_overflow_needs_enemy_unit(self):
        ctx = BoardBuilder().friendly("Dart", lane=0, unit_id="dart").context()
        overflow = card("breach", "OVERFLOW_DAMAGE", cost=2, value=3, target_type=TargetType.UNIT)
        assert evaluate_card_play(overflow, ctx.friendly.find_unit("dart"), ctx).is_invalid

    def test_splash_hits_adjacent_units(self):
        board = (
            BoardBuilder()
            .enemy("Dart", lane=0)
            .enemy("Talon", lane=0, unit_id="talon")
            .enemy("Mammoth", lane=0)
            .enemy("Dart", lane=1)
        )
        ctx = board.context()
        burst = card("burst", "SPLASH_DAMAGE", cost=2, value=2, target_type=TargetType.UNIT, splash_value=1)
        result = evaluate_card_play(burst, ctx.enemy.find_unit("talon"), ctx)
        # primary 16 + lethal 80, Dart 8 + lethal 65, Mammoth 8, three hits 45, cost 8
        assert has_reason(result, "Splash lethal Dart (+65.0)")
        assert not has_reason(result, "Splash lethal Mammoth")
        assert has_reason(result, "Multi-hit (3 targets) (+45.0)")
        assert result.score == pytest.approx(214)

    def test_splash_condition_bonus(self):
        board = (
            BoardBuilder()
            .enemy("Dart", lane=0, unit_id="dart", is_marked=True)
            .enemy("Talon", lane=0)
        )
        ctx = board.context()
        burst = card("burst", "SPLASH_DAMAGE", cost=2, value=2, target_type=TargetType.UNIT, splash_value=1,
                     bonus_condition=Condition("TARGET_IS_MARKED"), bonus_value=1)
        result = evaluate_card_play(burst, ctx.enemy.find_unit("dart"), ctx)
        # primary 3: 24 + lethal 65, Talon splash 2: 16 + lethal 80, two hits 30, cost 8
        assert result.reasoning[0] == "Condition met (+1 damage)"
        assert result.score == pytest.approx(207)

    def test_damage_scales_with_ready_units(self):
        board = (
            BoardBuilder()
            .friendly("Talon", lane=0)
            .friendly("Dart", lane=0)
            .friendly("Mammoth", lane=0, is_exhausted=True)
            .enemy("Talon", lane=0, unit_id="talon")
            .enemy("Dart", lane=1, unit_id="lonely")
        )
        ctx = board.context()
        volley = card("volley", "DAMAGE_SCALING", cost=1, target_type=TargetType.UNIT,
                      scaling_source="READY_UNITS_IN_LANE")
        result = evaluate_card_play(volley, ctx.enemy.find_unit("talon"), ctx)
        assert result.reasoning[0] == "Scaled damage 2 (+16.0)"
        assert result.score == pytest.approx(92)

        empty = evaluate_card_play(volley, ctx.enemy.find_unit("lonely"), ctx)
        assert empty.reasoning[0] == "Scales to no damage"
        assert empty.score == -4


# =============================================================================
# STATUS EFFECT CARDS
# =============================================================================

def status_card(effect_type, affinity=Affinity.ENEMY, **kwargs):
    return card(effect_type.lower(), effect_type, cost=1, target_type=TargetType.UNIT, affinity=affinity,
                **kwargs)


class TestStatusEffectCards:
    """Cannot move / attack / intercept, does not ready, clear status, exhaust"""

    def test_cannot_move(self):
        board = (
            BoardBuilder()
            .enemy("Talon", lane=0, unit_id="talon")
            .enemy("Skipper", lane=1, unit_id="skipper")
            .enemy("Talon", lane=2, unit_id="tired", is_exhausted=True)
            .enemy("Dart", lane=2, unit_id="stuck", cannot_move=True)
        )
        ctx = board.context()
        snare = status_card("APPLY_CANNOT_MOVE")
        assert evaluate_card_play(snare, ctx.enemy.find_unit("talon"), ctx).score == pytest.approx(20)

        skipper = evaluate_card_play(snare, ctx.enemy.find_unit("skipper"), ctx)
        assert has_reason(skipper, "Denies ON_MOVE ability (+15.0)")
        assert skipper.score == pytest.approx(19)

        tired = evaluate_card_play(snare, ctx.enemy.find_unit("tired"), ctx)
        assert has_reason(tired, "Target exhausted (-12.0)")
        assert tired.score == pytest.approx(8)

        assert evaluate_card_play(snare, ctx.enemy.find_unit("stuck"), ctx).is_invalid

    def test_cannot_attack_guardian(self):
        """Attack 10 + Guardian 30 + class 3 15 - cost 4"""
        board = BoardBuilder().enemy("Bulwark", lane=0, unit_id="bulwark")
        ctx = board.context()
        result = evaluate_card_play(status_card("APPLY_CANNOT_ATTACK"), ctx.enemy.find_unit("bulwark"), ctx)
        assert has_reason(result, "Guardian (+30.0)")
        assert result.score == pytest.approx(51)

    def test_cannot_attack_exhausted_target(self):
        """(40 + 15) x 0.6 - cost 4"""
        board = BoardBuilder().enemy("Mammoth", lane=0, unit_id="mammoth", is_exhausted=True)
        ctx = board.context()
        result = evaluate_card_play(status_card("APPLY_CANNOT_ATTACK"), ctx.enemy.find_unit("mammoth"), ctx)
        assert result.score == pytest.approx(29)

    def test_cannot_intercept_frees_attackers(self):
        """Speed 5 x 6 + Dogfighter 20 + one ready attacker 15 - cost 4"""
        board = (
            BoardBuilder()
            .friendly("Talon", lane=0)
            .friendly("Dart", lane=0, is_exhausted=True)
            .enemy("Dogfighter", lane=0, unit_id="dogfighter")
        )
        ctx = board.context()
        result = evaluate_card_play(status_card("APPLY_CANNOT_INTERCEPT"),
                                    ctx.enemy.find_unit("dogfighter"), ctx)
        assert has_reason(result, "Frees 1 attacker(s) (+15.0)")
        assert result.score == pytest.approx(61)

    def test_does_not_ready(self):
        board = (
            BoardBuilder()
            .enemy("Mammoth", lane=0, unit_id="ready")
            .enemy("Mammoth", lane=1, unit_id="tired", is_exhausted=True)
            .enemy("Sniper", lane=2, unit_id="sniper")
        )
        ctx = board.context()
        hold = status_card("APPLY_DOES_NOT_READY")

        # 4 x 8 x 0.7 + class 12 + ready 10 - cost 4
        ready = evaluate_card_play(hold, ctx.enemy.find_unit("ready"), ctx)
        assert has_reason(ready, "Currently ready (+10.0)")
        assert ready.score == pytest.approx(40.4)

        tired = evaluate_card_play(hold, ctx.enemy.find_unit("tired"), ctx)
        assert tired.score == pytest.approx((22.4 + 12) * 0.7 - 4)

        sniper = evaluate_card_play(hold, ctx.enemy.find_unit("sniper"), ctx)
        assert has_reason(sniper, "Powerful ability (+10.0)")

    def test_clear_status(self):
        """Two statuses 50 + mark 15 + class 2 20 - cost 4"""
        board = (
            BoardBuilder()
            .friendly("Talon", lane=0, unit_id="talon", cannot_move=True, cannot_attack=True, is_marked=True)
            .friendly("Dart", lane=1, unit_id="clean")
            .enemy("Talon", lane=0, unit_id="enemy", cannot_move=True)
        )
        ctx = board.context()
        cleanse = status_card("CLEAR_ALL_STATUS", affinity=Affinity.FRIENDLY)

        result = evaluate_card_play(cleanse, ctx.friendly.find_unit("talon"), ctx)
        assert has_reason(result, "Clears 2 status effect(s) (+50.0)")
        assert result.score == pytest.approx(81)

        clean = evaluate_card_play(cleanse, ctx.friendly.find_unit("clean"), ctx)
        assert clean.reasoning == ["Dart has no status effects"]
        assert evaluate_card_play(cleanse, ctx.enemy.find_unit("enemy"), ctx).is_invalid

    def test_exhaust_interceptor(self):
        """Attack 8 + interceptor 30 + frees Talon 10 - cost 4"""
        board = (
            BoardBuilder()
            .friendly("Talon", lane=0)                     # speed 3
            .enemy("Dart", lane=0, unit_id="dart")         # speed 4
            .enemy("Mammoth", lane=1, unit_id="tired", is_exhausted=True)
        )
        ctx = board.context()
        stun = status_card("EXHAUST_UNIT")
        result = evaluate_card_play(stun, ctx.enemy.find_unit("dart"), ctx)
        assert has_reason(result, "Interceptor (+30.0)")
        assert has_reason(result, "Frees 1 attacker(s) from interception (+10.0)")
        assert result.score == pytest.approx(44)

        tired = evaluate_card_play(stun, ctx.enemy.find_unit("tired"), ctx)
        assert tired.reasoning == ["Mammoth is already exhausted"]


# =============================================================================
# UPGRADE CARDS
# =============================================================================

def refit(cost=2, **effect_kwargs):
    return card("refit", "MODIFY_UNIT_BASE", cost=cost, target_type=TargetType.UNIT_TYPE,
                affinity=Affinity.FRIENDLY, **effect_kwargs)


class TestUpgradeCards:
    """Permanent unit type upgrades and removing enemy upgrades"""

    def test_upgrade_deployed_type(self):
        """+1 attack 40, class 16, deployed 30, ready 8, two copies left 20, last slot 12, cost 8"""
        board = (
            BoardBuilder()
            .with_pool("Talon")
            .with_deployed("Talon", 97)
            .friendly("Talon", lane=0)
            .friendly("Talon", lane=1, is_exhausted=True)
        )
        ctx = board.context()
        result = evaluate_card_play(refit(mod=StatMod("attack", 1)), UnitTypeRef("Talon", Side.FRIENDLY), ctx)
        assert has_reason(result, "2 deployed (+30.0)")
        assert has_reason(result, "1 ready (+8.0)")
        assert has_reason(result, "2 copies left to deploy (+20.0)")
        assert result.score == pytest.approx(118)

    def test_upgrade_type_not_deployed_at_limit(self):
        """+1 speed 35, heavy hitter 15, class 24, none deployed -30, at limit -20, last slot 12, cost 8"""
        ctx = BoardBuilder().with_pool("Mammoth").with_deployed("Mammoth", 99).context()
        result = evaluate_card_play(refit(mod=StatMod("speed", 1)), UnitTypeRef("Mammoth", Side.FRIENDLY), ctx)
        assert has_reason(result, "None deployed (-30.0)")
        assert has_reason(result, "At deployment limit (-20.0)")
        assert result.score == pytest.approx(28)

    def test_duplicate_keyword_invalid(self):
        board = (
            BoardBuilder()
            .define(UnitDefinition("Gunship", unit_class=2, attack=3, speed=2, hull=3, upgrade_slots=2))
            .with_pool("Gunship")
            .with_upgrades(Upgrade("Armor Piercing", "Gunship", keyword="PIERCING"))
        )
        result = evaluate_card_play(refit(keyword="PIERCING"), UnitTypeRef("Gunship", Side.FRIENDLY),
                                    board.context())
        assert result.reasoning == ["Gunship already upgraded with PIERCING"]

    def test_no_slots_left(self):
        board = BoardBuilder().with_pool("Talon").with_upgrades(
            Upgrade("Thrusters", "Talon", mod=StatMod("speed", 1)))
        result = evaluate_card_play(refit(mod=StatMod("attack", 1)), UnitTypeRef("Talon", Side.FRIENDLY),
                                    board.context())
        assert result.reasoning == ["Talon has no upgrade slots left"]

    def test_enemy_type_invalid(self):
        ctx = BoardBuilder().context()
        result = evaluate_card_play(refit(mod=StatMod("attack", 1)), UnitTypeRef("Talon", Side.ENEMY), ctx)
        assert result.is_invalid

    def test_destroy_upgrade(self):
        ctx = BoardBuilder().context()
        scrap = card("scrap", "DESTROY_UPGRADE", cost=1, target_type=TargetType.UPGRADE, affinity=Affinity.ENEMY)

        cannons = UpgradeRef(Upgrade("Cannons", "Mammoth", mod=StatMod("attack", 2)), Side.ENEMY)
        assert evaluate_card_play(scrap, cannons, ctx).score == pytest.approx(36)

        plating = UpgradeRef(Upgrade("Plating", "Mammoth", keyword="GUARDIAN"), Side.ENEMY)
        result = evaluate_card_play(scrap, plating, ctx)
        assert result.reasoning[0] == "Removes GUARDIAN (+25.0)"
        assert result.score == pytest.approx(21)

        own = UpgradeRef(Upgrade("Cannons", "Mammoth", mod=StatMod("attack", 2)), Side.FRIENDLY)
        assert evaluate_card_play(scrap, own, ctx).is_invalid


# =============================================================================
# CONDITIONAL EFFECTS
# =============================================================================

class TestConditionalEffects:
    """Extra effects added when their condition holds for the target"""

    def _board(self):
        return (
            BoardBuilder()
            .enemy("Dart", lane=0, unit_id="dart")
            .enemy("Mammoth", lane=1, unit_id="mammoth")
        )

    def test_stat_condition(self):
        ctx = self._board().context()
        weak_spot = ConditionalEffect("PRE", Condition("TARGET_STAT_LTE", stat="attack", value=1), "DRAW", 1)
        zap = card("zap", "DAMAGE", cost=1, value=2, target_type=TargetType.UNIT, affinity=Affinity.ENEMY,
                   conditionals=(weak_spot,))

        dart = evaluate_card_play(zap, ctx.enemy.find_unit("dart"), ctx)
        assert dart.reasoning[-1] == "If target_stat_lte: DRAW (+10.0)"
        assert dart.score == pytest.approx(evaluate_card_play(ZAP, ctx.enemy.find_unit("dart"), ctx).score + 10)

        mammoth = evaluate_card_play(zap, ctx.enemy.find_unit("mammoth"), ctx)
        assert mammoth.score == pytest.approx(evaluate_card_play(ZAP, ctx.enemy.find_unit("mammoth"), ctx).score)

    def test_on_destroy(self):
        ctx = self._board().context()
        follow_up = ConditionalEffect("POST", Condition("ON_DESTROY"), "GO_AGAIN")
        zap = card("zap", "DAMAGE", cost=1, value=2, target_type=TargetType.UNIT, affinity=Affinity.ENEMY,
                   conditionals=(follow_up,))

        dart = evaluate_card_play(zap, ctx.enemy.find_unit("dart"), ctx)
        assert has_reason(dart, "If on_destroy: GO_AGAIN (+40.0)")
        assert dart.score == pytest.approx(evaluate_card_play(ZAP, ctx.enemy.find_unit("dart"), ctx).score + 40)

        mammoth = evaluate_card_play(zap, ctx.enemy.find_unit("mammoth"), ctx)
        assert not has_reason(mammoth, "If on_destroy")

    def test_not_applied_to_invalid_play(self):
        ctx = self._board().context()
        follow_up = ConditionalEffect("PRE", Condition("TARGET_IS_READY"), "GO_AGAIN")
        stun = card("stun", "EXHAUST_UNIT", cost=1, target_type=TargetType.UNIT, affinity=Affinity.ENEMY,
                    conditionals=(follow_up,))
        result = evaluate_card_play(stun, exhausted(ctx.enemy.find_unit("dart")), ctx)
        assert result.is_invalid
        assert result.reasoning == ["Dart is already exhausted"]


# =============================================================================
# ATTACKS
# =============================================================================

class TestUnitAttackEvaluator:

    def setup_method(self):
        self.evaluator = UnitAttackEvaluator()

    def _attack(self, board, attacker_id, target_id):
        ctx = board.context()
        action = UnitAttackAction(ctx.friendly.find_unit(attacker_id), ctx.enemy.find_unit(target_id))
        return self.evaluator.evaluate(action, ctx)

    def test_favorable_trade_not_lethal(self):
        """class 30 + favorable 20 + ready 10"""
        board = (
            BoardBuilder()
            .friendly("Talon", lane=0, unit_id="talon")
            .enemy("Mammoth", lane=0, unit_id="mammoth")
        )
        assert self._attack(board, "talon", "mammoth").score == 60

    def test_lethal_adds_lane_impact(self):
        """class 20 + ready 10 + lethal 20 + lane 21 x 0.5"""
        board = (
            BoardBuilder()
            .friendly("Mammoth", lane=0, unit_id="mammoth")
            .enemy("Talon", lane=0, unit_id="talon")
        )
        result = self._attack(board, "mammoth", "talon")
        assert result.score == pytest.approx(60.5)
        assert has_reason(result, "Lethal (+20.0)")

    def test_retaliation_kills_attacker(self):
        board = (
            BoardBuilder()
            .friendly("Dart", lane=0, unit_id="dart")
            .enemy("Spiker", lane=0, unit_id="spiker")
        )
        assert has_reason(self._attack(board, "dart", "spiker"), "Retaliation kills attacker (3) (-50.0)")

    def test_anti_ship_attacking_unit_penalized(self):
        board = (
            BoardBuilder()
            .friendly("Bomber", lane=0, unit_id="bomber")
            .enemy("Dart", lane=0, unit_id="dart")
        )
        assert has_reason(self._attack(board, "bomber", "dart"), "Anti-ship unit attacking a unit (-100.0)")

    def test_piercing_bonus(self):
        board = (
            BoardBuilder()
            .friendly("Lancer", lane=0, unit_id="lancer")
            .enemy("Bulwark", lane=0, unit_id="bulwark")
        )
        assert has_reason(self._attack(board, "lancer", "bulwark"), "Piercing bypass (+24.0)")


class TestSectionAttackEvaluator:

    def setup_method(self):
        self.evaluator = SectionAttackEvaluator()

    def _attack(self, board, attacker_id, lane=0):
        ctx = board.context()
        target = SectionRef(ctx.enemy_section(lane), lane, Side.ENEMY)
        return self.evaluator.evaluate(SectionAttackAction(ctx.friendly.find_unit(attacker_id), target), ctx)

    def test_anti_ship_damage_into_open_section(self):
        """ship damage 3 x 8 + no shields 40"""
        board = BoardBuilder().friendly("Bomber", lane=0, unit_id="bomber")
        assert self._attack(board, "bomber").score == 64

    def test_threshold_crossing_bonus(self):
        board = BoardBuilder().friendly("Bomber", lane=0, unit_id="bomber").enemy_section(0, hull=7)
        result = self._attack(board, "bomber")
        assert result.score == 72
        assert has_reason(result, "Pushes section to damaged")

    def test_shield_break_and_high_attack(self):
        board = BoardBuilder().friendly("Talon", lane=0, unit_id="talon").enemy_section(0, shields=2)
        assert self._attack(board, "talon").score == 69

    def test_critical_section_bonus(self):
        board = BoardBuilder().friendly("Dart", lane=0, unit_id="dart").enemy_section(0, hull=1, critical=1)
        assert has_reason(self._attack(board, "dart"), "Critical section (+30.0)")


# =============================================================================
# MOVEMENT / ABILITIES
# =============================================================================

class TestMoveEvaluator:

    def test_reinforcing_damaged_section(self):
        """Lane deltas cancel out; -10 move cost, +25 for defending a damaged section"""
        board = (
            BoardBuilder()
            .friendly("Talon", lane=0, unit_id="talon")
            .enemy("Mammoth", lane=1)
            .own_section(1, hull=4)
        )
        ctx = board.context()
        talon = ctx.friendly.find_unit("talon")
        result = MoveEvaluator().evaluate(MoveAction(talon, 0, 1), ctx)
        assert result.score == pytest.approx(15)
        assert has_reason(result, "Defends damaged section")

    def test_plain_move_costs(self):
        board = BoardBuilder().friendly("Talon", lane=0, unit_id="talon").enemy("Mammoth", lane=1)
        ctx = board.context()
        result = MoveEvaluator().evaluate(MoveAction(ctx.friendly.find_unit("talon"), 0, 1), ctx)
        assert result.score == pytest.approx(-10)

    def test_on_move_trigger(self):
        board = BoardBuilder().friendly("Skipper", lane=0, unit_id="skipper")
        ctx = board.context()
        result = MoveEvaluator().evaluate(MoveAction(ctx.friendly.find_unit("skipper"), 0, 1), ctx)
        assert has_reason(result, "Afterburn: +1 attack on move (+15.0)")


class TestAbilityEvaluator:

    def setup_method(self):
        self.evaluator = AbilityEvaluator()

    def _ability(self, ctx, unit_id):
        unit = ctx.friendly.find_unit(unit_id)
        return unit, ctx.definition(unit).active_abilities[0]

    def test_heal_damaged_unit(self):
        """1 hull x 8 + class 2 x 5 - energy 4"""
        board = (
            BoardBuilder()
            .friendly("Mender", lane=0, unit_id="mender")
            .friendly("Talon", lane=0, unit_id="talon", hull=1)
        )
        ctx = board.context()
        mender, repair = self._ability(ctx, "mender")
        result = self.evaluator.evaluate(AbilityAction(mender, repair, ctx.friendly.find_unit("talon")), ctx)
        assert result.score == 14

    def test_heal_undamaged_unit_invalid(self):
        board = BoardBuilder().friendly("Mender", lane=0, unit_id="mender").friendly("Talon", lane=0, unit_id="talon")
        ctx = board.context()
        mender, repair = self._ability(ctx, "mender")
        result = self.evaluator.evaluate(AbilityAction(mender, repair, ctx.friendly.find_unit("talon")), ctx)
        assert result.is_invalid

    def test_cross_lane_lethal_damage(self):
        """16 + lethal 65 + reach 20 - energy 4"""
        board = BoardBuilder().friendly("Sniper", lane=0, unit_id="sniper").enemy("Dart", lane=2, unit_id="dart")
        ctx = board.context()
        sniper, shot = self._ability(ctx, "sniper")
        result = self.evaluator.evaluate(AbilityAction(sniper, shot, ctx.enemy.find_unit("dart")), ctx)
        assert result.score == 97

    def test_purge_token(self):
        board = BoardBuilder().friendly("Inhibitor", lane=1, unit_id="inhibitor")
        ctx = board.context()
        inhibitor, purge = self._ability(ctx, "inhibitor")
        assert self.evaluator.evaluate(AbilityAction(inhibitor, purge, inhibitor), ctx).score == 10


# =============================================================================
# ROUTING
# =============================================================================

class TestCombinedEvaluator:

    def test_every_kind_has_an_evaluator(self):
        board = (
            BoardBuilder()
            .with_budget(3)
            .friendly("Talon", lane=0, unit_id="talon")
            .enemy("Dart", lane=0, unit_id="dart")
        )
        ctx = board.context()
        talon, dart = ctx.friendly.find_unit("talon"), ctx.enemy.find_unit("dart")
        actions = [
            DeployAction("Dart", 1),
            PlayCardAction(ZAP, dart),
            UnitAttackAction(talon, dart),
            SectionAttackAction(talon, SectionRef(ctx.enemy_section(0), 0, Side.ENEMY)),
            MoveAction(talon, 0, 1),
        ]
        scored = default_evaluator().score_all(actions, ctx)
        assert [type(a) for a in scored] == [type(a) for a in actions]
        assert all(a.reasoning for a in scored)
        assert not any("No evaluator" in r for a in scored for r in a.reasoning)

    def test_unhandled_action_keeps_zero_score(self):
        ctx = BoardBuilder().context()
        scored = CombinedEvaluator([CardEvaluator()]).score_all([DeployAction("Dart", 0)], ctx)
        assert scored[0].score == 0
        assert scored[0].reasoning == ("No evaluator for action",)

    def test_disabled_evaluator_skipped(self):
        ctx = BoardBuilder().with_budget(3).context()
        deploy = DeployEvaluator()
        deploy.enabled = False
        scored = CombinedEvaluator([deploy]).score_all([DeployAction("Dart", 0)], ctx)
        assert scored[0].reasoning == ("No evaluator for action",)
