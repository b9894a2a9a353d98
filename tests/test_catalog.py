"""Tests for action catalog construction."""
import pytest

from combat_ai.core.ai.catalog import BASELINE_KINDS, CandidateKind, build_action_catalog
from combat_ai.core.ai.spell_lists import is_healing_spell, is_offensive_spell
from combat_ai.models.combatant import load_combatant

from conftest import make_combatant


class TestBuildActionCatalog:
    """Tests for build_action_catalog."""

    def test_baseline_always_present(self):
        """Dodge, Dash, Disengage and Hide are always available."""
        catalog = build_action_catalog(make_combatant())
        assert len(catalog) == 4
        assert [c.kind for c in catalog] == list(BASELINE_KINDS)
        assert [c.name for c in catalog] == ["Dodge", "Dash", "Disengage", "Hide"]

    def test_stat_block_actions(self, sample_goblin):
        """Each available action becomes an attack candidate."""
        catalog = build_action_catalog(load_combatant(sample_goblin))
        assert [c.name for c in catalog.attacks()] == ["Scimitar", "Shortbow"]
        assert [c.name for c in catalog.ranged_attacks()] == ["Shortbow"]

    def test_recharge_pending_excluded(self, sample_dragon):
        """A recharge action that hasn't recharged is not offered."""
        catalog = build_action_catalog(load_combatant(sample_dragon))
        assert [c.name for c in catalog.attacks()] == ["Bite"]

    def test_legendary_off_turn(self, sample_dragon):
        """Legendary actions are offered outside the monster's own turn."""
        catalog = build_action_catalog(load_combatant(sample_dragon))
        legendary = catalog.of_kind(CandidateKind.LEGENDARY)
        assert [c.name for c in legendary] == ["Tail Attack", "Crushing Sweep"]
        assert legendary[1].cost == 2

    def test_legendary_not_on_own_turn(self, sample_dragon):
        """Legendary actions are not offered on the monster's own turn."""
        sample_dragon["isActive"] = True
        catalog = build_action_catalog(load_combatant(sample_dragon))
        assert catalog.has(CandidateKind.LEGENDARY) is False

    def test_spells_need_slots(self):
        """Cantrips are always offered, leveled spells only with slots left."""
        monster = make_combatant(spellcasting={
            "cantrips": ["fire bolt"],
            "spells": {"1": ["magic missile"], "3": ["fireball"]},
            "slots": {"1": 0, "3": 1},
        })
        catalog = build_action_catalog(monster)
        assert [(c.spell, c.level) for c in catalog.spells()] == [("fire bolt", 0), ("fireball", 3)]

    def test_highest_level_spell(self, sample_priest):
        """The highest level matching spell is chosen."""
        catalog = build_action_catalog(load_combatant(sample_priest))
        assert catalog.highest_level_spell(is_healing_spell).spell == "cure wounds"
        assert catalog.highest_level_spell(is_offensive_spell) is None


class TestActionCandidate:
    """Tests for candidate properties."""

    def test_estimated_damage_includes_additional(self, sample_dragon):
        """Estimated damage adds the additional damage formula."""
        catalog = build_action_catalog(load_combatant(sample_dragon))
        bite = catalog.attacks()[0]
        assert bite.estimated_damage == pytest.approx(17.0 + 3.5)
        assert bite.is_melee is True

    def test_baseline_has_no_damage(self):
        """Baseline maneuvers deal no damage."""
        dodge = build_action_catalog(make_combatant()).of_kind(CandidateKind.DODGE)[0]
        assert dodge.estimated_damage == 0.0
        assert dodge.attack_type is None


class TestOffensiveActions:
    """Tests for the damage-dealing candidate pool."""

    def test_legendary_only_off_turn(self, sample_dragon):
        """Outside its turn, only legendary actions are ranked."""
        catalog = build_action_catalog(load_combatant(sample_dragon))
        assert [c.name for c in catalog.offensive_actions()] == ["Tail Attack", "Crushing Sweep"]

    def test_stat_block_on_own_turn(self, sample_dragon):
        """On its own turn, the stat-block actions are ranked."""
        sample_dragon["isActive"] = True
        catalog = build_action_catalog(load_combatant(sample_dragon))
        assert [c.name for c in catalog.offensive_actions()] == ["Bite"]
