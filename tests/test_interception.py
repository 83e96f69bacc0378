"""
Tests for interception.py

The defending side is always state.player (friendly); the attacker is an
enemy unit already on the board.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from tactician.constants import INVALID_SCORE
from tactician.interception import judge_interception, max_blockable_threat, protection_value, respond_to_attack
from tactician.models import AttackContext, SectionRef, Side
from tests.board_builder import BoardBuilder


def attack_on_section(ctx, attacker_id, lane=0) -> AttackContext:
    attacker = ctx.enemy.find_unit(attacker_id)
    return AttackContext(attacker=attacker, target=SectionRef(ctx.own_section(lane), lane, Side.FRIENDLY), lane=lane)


def interceptors(ctx, *unit_ids):
    return [ctx.friendly.find_unit(u) for u in unit_ids]


class TestJudgeInterception:
    """Trade and sacrifice bands"""

    def test_excellent_sacrifice(self):
        """Hull 2 vs attack 3 dies; protecting 10 with impact 4 is a 2.5 ratio"""
        verdict = judge_interception(survives=False, interceptor_impact=4,
                                     attacker_impact=20, protection_value=10)
        assert verdict.accept
        assert verdict.score == 60
        assert verdict.reason == "Excellent sacrifice (ratio 2.50)"

    def test_good_sacrifice(self):
        verdict = judge_interception(False, 10, 20, 15)
        assert verdict.accept and verdict.score == 45

    def test_bad_sacrifice_declined(self):
        verdict = judge_interception(False, 10, 20, 10)
        assert not verdict.accept
        assert verdict.score == INVALID_SCORE

    @pytest.mark.parametrize("impact,expected", [(4, 90), (10, 70)])
    def test_surviving_trades(self, impact, expected):
        verdict = judge_interception(True, impact, 20, 0)
        assert verdict.accept and verdict.score == expected

    def test_protection_worth_it(self):
        verdict = judge_interception(True, 20, 20, 31)
        assert verdict.accept and verdict.score == 50
        assert not judge_interception(True, 20, 20, 30).accept

    def test_zero_impact_attacker(self):
        """Nothing to trade against: only protection can justify it"""
        assert not judge_interception(True, 5, 0, 0).accept


class TestRespondToAttack:

    def test_no_interceptors_declines(self):
        ctx = BoardBuilder().enemy("Talon", lane=0, unit_id="talon").context()
        decision = respond_to_attack(attack_on_section(ctx, "talon"), [], ctx)
        assert decision.declined
        assert len(decision.trace) == 1
        assert decision.trace[0].reasoning == ("No interceptors available",)
        assert decision.trace[0].score == INVALID_SCORE

    def test_sacrifice_with_dogfight_bonus(self):
        """Dogfighter dies (3 vs 3) but protects 45 at impact 13.5; dogfight adds 2 x 5"""
        board = (
            BoardBuilder()
            .friendly("Dogfighter", lane=0, unit_id="dog")
            .enemy("Talon", lane=0, unit_id="talon")
        )
        ctx = board.context()
        decision = respond_to_attack(attack_on_section(ctx, "talon"), interceptors(ctx, "dog"), ctx)

        assert decision.interceptor.id == "dog"
        entry = decision.trace[-1]
        assert entry.chosen
        assert entry.score == 70
        assert any(r.startswith("Excellent sacrifice") for r in entry.reasoning)

    def test_surviving_interceptor_worth_protection(self):
        board = (
            BoardBuilder()
            .friendly("Mammoth", lane=0, unit_id="mammoth")
            .enemy("Talon", lane=0, unit_id="talon")
        )
        ctx = board.context()
        decision = respond_to_attack(attack_on_section(ctx, "talon"), interceptors(ctx, "mammoth"), ctx)
        assert decision.interceptor.id == "mammoth"
        assert decision.trace[-1].score == 50

    def test_cheapest_interceptor_tried_first(self):
        board = (
            BoardBuilder()
            .friendly("Mammoth", lane=0, unit_id="mammoth")
            .friendly("Dart", lane=0, unit_id="dart")
            .enemy("Talon", lane=0, unit_id="talon")
        )
        ctx = board.context()
        decision = respond_to_attack(attack_on_section(ctx, "talon"), interceptors(ctx, "mammoth", "dart"), ctx)
        assert decision.interceptor.id == "dart"
        assert [t.interceptor.id for t in decision.trace] == ["dart"]

    def test_saved_for_bigger_threat(self):
        """A bigger blockable threat in the lane reserves every interceptor"""
        board = (
            BoardBuilder()
            .friendly("Dogfighter", lane=0, unit_id="dog")
            .friendly("Dart", lane=0, unit_id="dart")
            .enemy("Dart", lane=0, unit_id="scout")
            .enemy("Talon", lane=0, unit_id="talon")
        )
        ctx = board.context()
        attack = attack_on_section(ctx, "scout")
        assert max_blockable_threat(attack, interceptors(ctx, "dog", "dart"), ctx) == 3

        decision = respond_to_attack(attack, interceptors(ctx, "dog", "dart"), ctx)
        assert decision.declined
        assert len(decision.trace) == 2
        for entry in decision.trace:
            assert not entry.chosen
            assert any(r.startswith("Saving for bigger threat") for r in entry.reasoning)

    def test_exhausted_threat_does_not_reserve(self):
        board = (
            BoardBuilder()
            .friendly("Dogfighter", lane=0, unit_id="dog")
            .enemy("Dart", lane=0, unit_id="scout")
            .enemy("Talon", lane=0, unit_id="talon", is_exhausted=True)
        )
        ctx = board.context()
        assert max_blockable_threat(attack_on_section(ctx, "scout"), interceptors(ctx, "dog"), ctx) == 0

    def test_unit_target_protection_is_its_impact(self):
        board = (
            BoardBuilder()
            .friendly("Mammoth", lane=0, unit_id="mammoth")
            .enemy("Talon", lane=0, unit_id="talon")
        )
        ctx = board.context()
        attack = AttackContext(ctx.enemy.find_unit("talon"), ctx.friendly.find_unit("mammoth"), 0)
        assert protection_value(attack, 3, ctx) == pytest.approx(24.5)

    def test_shielded_section_protection(self):
        ctx = BoardBuilder().own_section(0, shields=2).enemy("Talon", lane=0, unit_id="talon").context()
        assert protection_value(attack_on_section(ctx, "talon"), 3, ctx) == 15

    def test_not_worth_it_declines(self):
        """Mammoth survives a Dart hit but the trade ratio is poor and little is protected"""
        board = (
            BoardBuilder()
            .friendly("Mammoth", lane=0, unit_id="mammoth")
            .enemy("Dart", lane=0, unit_id="dart")
        )
        ctx = board.context()
        decision = respond_to_attack(attack_on_section(ctx, "dart"), interceptors(ctx, "mammoth"), ctx)
        assert decision.declined
        assert decision.trace[-1].score == INVALID_SCORE
        assert decision.trace[-1].label == "Intercept with Mammoth [mammoth]"
