"""세트 카탈로그 검증 + 세트 보너스 평가 테스트"""

from __future__ import annotations

import pytest

from warband.core.gear.enums import BonusStat, CharacterClass, SetQuality
from warband.core.gear.models import GearPiece, GearSet
from warband.core.gear.set_bonus import (
    GearSetDefinition,
    SetBonusTier,
    StatGrant,
    count_set_bonuses,
    evaluate_set_bonuses,
    is_set_complete,
    missing_fields,
)

STORM_SET = {
    "name": "Storm Set",
    "quality": "epic",
    "classes": ["Warrior", "Paladin"],
    "pieces": [
        {"slot": "Head", "name": "Storm Helm"},
        {"slot": "Chest", "name": "Storm Chestplate"},
        {"slot": "Boots", "name": "Storm Treads"},
        {
            "slot": "Gloves",
            "name": "Storm Gauntlets",
            "dropLocation": {"type": "raid", "name": "Sky Citadel", "droppedBy": "Zephyr"},
        },
    ],
    "bonuses": [
        {
            "pieces": 2,
            "stats": [
                {"stat": "Str", "value": 10},
                {"stat": "Int", "value": 10, "forClasses": ["Paladin"]},
            ],
        },
        {"pieces": 4, "specialBonus": "Lightning strikes on hit"},
    ],
    "dropLocations": [{"type": "raid", "name": "Sky Citadel"}],
}


def _storm() -> GearSetDefinition:
    return GearSetDefinition.from_dict(STORM_SET)


def _gear(*pieces: GearPiece) -> GearSet:
    return GearSet.from_pieces(pieces)


def _piece(slot: str, set_name: str | None, name: str | None = None) -> GearPiece:
    return GearPiece(slot=slot, item_name=name, item_level=60, set_bonus_name=set_name)


# ── 카탈로그 ──────────────────────────────────────────────────


class TestDefinition:
    def test_from_dict(self):
        storm = _storm()
        assert storm.quality == SetQuality.EPIC
        assert storm.classes == (CharacterClass.WARRIOR, CharacterClass.PALADIN)
        assert len(storm.pieces) == 4
        assert storm.pieces[3].drop_location.dropped_by == "Zephyr"
        assert storm.bonuses[1].special_bonus == "Lightning strikes on hit"

    def test_tier_complete_with_stats_or_special(self):
        assert SetBonusTier(2, stats=(StatGrant(BonusStat.STR, 5),)).is_complete
        assert SetBonusTier(2, special_bonus="Proc").is_complete
        assert not SetBonusTier(2).is_complete
        assert not SetBonusTier(2, special_bonus="   ").is_complete

    def test_stat_grant_class_filter(self):
        grant = StatGrant(BonusStat.INT, 10, for_classes=(CharacterClass.MAGE,))
        assert grant.applies_to(CharacterClass.MAGE)
        assert not grant.applies_to(CharacterClass.ROGUE)
        assert StatGrant(BonusStat.STA, 5).applies_to(CharacterClass.ROGUE)


class TestMissingFields:
    def test_complete_set(self):
        assert missing_fields(STORM_SET) == []
        assert is_set_complete(STORM_SET)

    def test_empty_input(self):
        assert missing_fields({}) == ["name", "quality", "classes", "pieces", "bonuses"]

    def test_piece_paths(self):
        raw = dict(STORM_SET, pieces=[{"slot": "Head", "name": ""}, {"name": "X"}])
        assert missing_fields(raw) == ["pieces[0].name", "pieces[1].slot"]

    def test_incomplete_tier(self):
        raw = dict(STORM_SET, bonuses=[{"pieces": 2, "stats": []}])
        assert missing_fields(raw) == ["bonuses[0].stats"]

    @pytest.mark.parametrize("pieces", [0, 9, None])
    def test_pieces_required_range(self, pieces):
        raw = dict(STORM_SET, bonuses=[{"pieces": pieces, "specialBonus": "x"}])
        assert missing_fields(raw) == ["bonuses[0].pieces"]


# ── 평가 ──────────────────────────────────────────────────────


class TestEvaluateMatched:
    def test_active_tiers_and_equipped_pieces(self):
        gear = _gear(
            _piece("Head", "Storm Set"),
            _piece("Chest", "Storm Set"),
            _piece("Boots", "Storm Set"),
        )
        [result] = evaluate_set_bonuses(gear, [_storm()], "Warrior")

        assert not result.fallback
        assert result.quality == "epic"
        assert result.equipped_count == 3
        assert result.total_pieces == 4
        assert [p.equipped for p in result.pieces] == [True, True, True, False]
        assert [b.active for b in result.bonuses] == [True, False]
        assert len(result.active_bonuses) == 1

    def test_stats_filtered_by_class(self):
        gear = _gear(_piece("Head", "Storm Set"), _piece("Chest", "Storm Set"))

        [warrior] = evaluate_set_bonuses(gear, [_storm()], CharacterClass.WARRIOR)
        [paladin] = evaluate_set_bonuses(gear, [_storm()], CharacterClass.PALADIN)

        assert [s.stat for s in warrior.bonuses[0].stats] == [BonusStat.STR]
        assert [s.stat for s in paladin.bonuses[0].stats] == [
            BonusStat.STR,
            BonusStat.INT,
        ]

    def test_class_filter_applies_to_inactive_tier(self):
        valorous = GearSetDefinition.from_dict(
            {
                "name": "Valorous",
                "quality": "rare",
                "classes": ["Warrior", "Mage"],
                "pieces": [
                    {"slot": slot, "name": f"Valorous {slot}"}
                    for slot in ("Head", "Chest", "Pants", "Boots")
                ],
                "bonuses": [
                    {"pieces": 2, "stats": [{"stat": "Sta", "value": 20}]},
                    {
                        "pieces": 4,
                        "stats": [{"stat": "Int", "value": 30, "forClasses": ["Mage"]}],
                    },
                ],
            }
        )
        gear = _gear(
            _piece("Head", "Valorous"),
            _piece("Chest", "Valorous"),
            _piece("Pants", "Valorous"),
        )

        [result] = evaluate_set_bonuses(gear, [valorous], CharacterClass.WARRIOR)

        assert result.equipped_count == 3
        assert result.bonuses[0].active
        assert [(s.stat, s.value) for s in result.bonuses[0].stats] == [
            (BonusStat.STA, 20)
        ]
        assert not result.bonuses[1].active
        assert result.bonuses[1].stats == ()

    def test_name_match_is_case_sensitive(self):
        gear = _gear(_piece("Head", "storm set"))
        [result] = evaluate_set_bonuses(gear, [_storm()], "Warrior")
        assert result.fallback

    def test_first_definition_with_name_wins(self):
        rare_storm = GearSetDefinition.from_dict(dict(STORM_SET, quality="rare"))
        gear = _gear(_piece("Head", "Storm Set"))
        [result] = evaluate_set_bonuses(gear, [rare_storm, _storm()], "Warrior")
        assert result.quality == "rare"


class TestEvaluateFallback:
    def test_unknown_set_falls_back(self):
        gear = _gear(
            _piece("Neck", "Mystery Set", name="Odd Amulet"),
            _piece("Back", "Mystery Set"),
        )
        [result] = evaluate_set_bonuses(gear, [_storm()], "Rogue")

        assert result.fallback
        assert result.quality == "epic"
        assert result.equipped_count == 2
        assert result.total_pieces == 2
        assert result.bonuses == ()
        assert [(p.name, p.equipped) for p in result.pieces] == [
            ("Odd Amulet", True),
            ("Back", True),
        ]

    def test_empty_catalog_only_fallbacks(self):
        gear = _gear(_piece("Head", "Storm Set"), _piece("Neck", "Other"))
        results = evaluate_set_bonuses(gear, [], "Mage")
        assert all(r.fallback for r in results)

    def test_no_set_pieces(self):
        assert evaluate_set_bonuses(GearSet.empty(), [_storm()], "Mage") == []


class TestOrdering:
    def test_sorted_by_count_desc_stable(self):
        gear = _gear(
            _piece("Head", "A"),
            _piece("Neck", "B"),
            _piece("Shoulders", "B"),
            _piece("Chest", "C"),
        )
        results = evaluate_set_bonuses(gear, [], "Hunter")
        assert [r.set_name for r in results] == ["B", "A", "C"]

    def test_count_set_bonuses(self):
        gear = _gear(_piece("Head", "A"), _piece("Neck", "A"), _piece("Back", "B"))
        assert count_set_bonuses(gear) == {"A": 2, "B": 1}
