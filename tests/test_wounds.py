"""Tests for wound and impairment bookkeeping."""

import pytest

from chiwar.engine.types import CharacterKind, WoundStorage
from chiwar.engine.wounds import (
    calculate_heal,
    calculate_impairment,
    calculate_wound_result,
    wound_storage_for,
)


class TestImpairment:
    """Tests for impairment thresholds."""

    @pytest.mark.parametrize(
        "wounds,expected",
        [(0, 0), (24, 0), (25, 1), (29, 1), (30, 2), (34, 2), (35, 3), (50, 3)],
    )
    def test_thresholds(self, wounds, expected):
        assert calculate_impairment(wounds) == expected


class TestWoundResult:
    """Tests for applying wounds."""

    def test_adds_to_current(self, make_combatant):
        result = calculate_wound_result(make_combatant("Ray"), 6, current_wounds=20)
        assert result.target == "Ray"
        assert result.previous_wounds == 20
        assert result.new_wounds == 26
        assert result.previous_impairment == 0
        assert result.new_impairment == 1
        assert result.impairment_change == 1

    def test_crossing_several_thresholds(self, make_combatant):
        result = calculate_wound_result(make_combatant("Ray"), 11, current_wounds=24)
        assert result.new_wounds == 35
        assert result.impairment_change == 3

    def test_no_change_below_threshold(self, make_combatant):
        result = calculate_wound_result(make_combatant("Ray"), 5)
        assert result.new_wounds == 5
        assert result.impairment_change == 0


class TestHeal:
    """Tests for healing."""

    def test_reduces_wounds(self):
        assert calculate_heal(12, 5) == 7

    def test_floors_at_zero(self):
        assert calculate_heal(5, 10) == 0


class TestWoundStorage:
    """Tests for where wounds are stored."""

    def test_pc_uses_action_value(self, make_combatant):
        pc = make_combatant("Ray", character_kind=CharacterKind.PC)
        assert wound_storage_for(pc) is WoundStorage.ACTION_VALUE

    @pytest.mark.parametrize("kind", [CharacterKind.NPC, CharacterKind.BOSS, CharacterKind.FEATURED_FOE, None])
    def test_others_use_slot_count(self, make_combatant, kind):
        assert wound_storage_for(make_combatant("Foe", character_kind=kind)) is WoundStorage.SLOT_COUNT
