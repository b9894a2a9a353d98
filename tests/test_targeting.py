"""Tests for target evaluation."""
import math

import pytest

from combat_ai.core.ai.catalog import build_action_catalog
from combat_ai.core.ai.memory import ActionRecord, MemoryStore
from combat_ai.core.ai.targeting import TargetEvaluator, vulnerability_score
from combat_ai.core.ai.threat import ThreatAssessor
from combat_ai.models.combatant import Combatant

from conftest import make_combatant


def make_evaluator(combatants, damage=None, memory=None):
    """Evaluator whose threat scores come from the given remembered damage."""
    memory = memory if memory is not None else MemoryStore()
    memory.observe(combatants)
    for combatant_id, amount in (damage or {}).items():
        memory.get(combatant_id).cumulative_damage_dealt = amount
    threat = ThreatAssessor()
    threat.assess(combatants, memory)
    return TargetEvaluator(memory, threat)


class TestVulnerabilityScore:
    """Tests for vulnerability_score."""

    def test_wounded_low_ac_stunned(self):
        """10% HP, AC 10 and stunned: 9 + 10 + 5."""
        target = make_combatant(hp=10, maxHp=100, ac=10, conditions=["stunned"])
        assert vulnerability_score(target) == pytest.approx(24.0)

    def test_high_ac_full_hp(self):
        """A healthy target with AC above 20 is not vulnerable."""
        target = make_combatant(hp=10, maxHp=10, ac=22)
        assert vulnerability_score(target) == 0.0

    def test_stacked_conditions(self):
        """Each vulnerable condition adds 5."""
        target = make_combatant(hp=10, maxHp=10, ac=20, conditions=["restrained", "paralyzed", "poisoned"])
        assert vulnerability_score(target) == pytest.approx(10.0)


class TestTargetSelection:
    """Tests for target selection helpers."""

    def test_best_target_prefers_wounded(self):
        """A wounded enemy beats a healthier, more threatening one."""
        healthy = make_combatant(id="a", hp=30, maxHp=30)
        wounded = make_combatant(id="b", hp=10, maxHp=30)
        evaluator = make_evaluator([healthy, wounded], damage={"a": 10})

        assert evaluator.find_best_target([healthy, wounded]).id == "b"

    def test_best_target_highest_threat(self):
        """Without wounded enemies, the highest threat wins."""
        a = make_combatant(id="a", hp=30, maxHp=30)
        b = make_combatant(id="b", hp=30, maxHp=30)
        evaluator = make_evaluator([a, b], damage={"b": 6})

        assert evaluator.find_best_target([a, b]).id == "b"

    def test_best_target_empty(self):
        """No enemies means no target."""
        assert make_evaluator([]).find_best_target([]) is None

    def test_most_threatening_tie_keeps_first(self):
        """Ties resolve to the earliest enemy."""
        a = make_combatant(id="a")
        b = make_combatant(id="b")
        evaluator = make_evaluator([a, b])
        assert evaluator.find_most_threatening([a, b]).id == "a"

    def test_most_vulnerable(self):
        """The lowest AC, most wounded enemy is most vulnerable."""
        tank = make_combatant(id="tank", ac=20)
        squishy = make_combatant(id="squishy", ac=11, hp=4)
        evaluator = make_evaluator([tank, squishy])
        assert evaluator.find_most_vulnerable([tank, squishy]).id == "squishy"

    def test_buff_target_by_damage(self):
        """The ally that has dealt the most damage gets the buff."""
        a = make_combatant(id="a", hp=50, maxHp=50)
        b = make_combatant(id="b", hp=20, maxHp=20)
        evaluator = make_evaluator([a, b], damage={"b": 5})
        assert evaluator.find_best_buff_target([a, b]).id == "b"

    def test_buff_target_damage_tie_goes_to_higher_hp(self):
        """Allies with equal damage dealt are split by current HP."""
        a = make_combatant(id="a", hp=10, maxHp=40)
        b = make_combatant(id="b", hp=30, maxHp=40)
        evaluator = make_evaluator([a, b], damage={"a": 5, "b": 5})
        assert evaluator.find_best_buff_target([a, b]).id == "b"
        assert evaluator.find_best_buff_target([b, a]).id == "b"

    def test_buff_target_by_hp(self):
        """Without damage history, the ally with the most HP gets the buff."""
        a = make_combatant(id="a", hp=20, maxHp=20)
        b = make_combatant(id="b", hp=50, maxHp=50)
        evaluator = make_evaluator([a, b])
        assert evaluator.find_best_buff_target([a, b]).id == "b"


class TestDistance:
    """Tests for distance and closeness."""

    def test_distance_in_feet(self):
        """A 3-4-5 triangle in squares is 25 feet."""
        a = make_combatant(id="a", position={"x": 0, "y": 0})
        b = make_combatant(id="b", position={"x": 3, "y": 4})
        assert make_evaluator([a, b]).distance(a, b) == pytest.approx(25.0)

    def test_distance_unknown(self):
        """Missing coordinates mean unknown (infinite) distance."""
        a = make_combatant(id="a")
        b = make_combatant(id="b", position={"x": 1, "y": 1})
        assert math.isinf(make_evaluator([a, b]).distance(a, b))

    def test_closest_enemy_by_position(self):
        """With coordinates, the nearest enemy wins."""
        me = make_combatant(id="me", position={"x": 0, "y": 0})
        far = make_combatant(id="far", position={"x": 10, "y": 0})
        near = make_combatant(id="near", position={"x": 1, "y": 0})
        evaluator = make_evaluator([me, far, near])
        assert evaluator.find_closest_enemy(me, [far, near]).id == "near"

    def test_closest_enemy_own_recent_target(self):
        """Without coordinates, an enemy the monster just attacked is closest."""
        me = make_combatant(id="me")
        a = make_combatant(id="a")
        b = make_combatant(id="b")
        memory = MemoryStore()
        memory.record_action("me", ActionRecord(kind="attack", target_id="b"))
        evaluator = make_evaluator([me, a, b], memory=memory)
        assert evaluator.find_closest_enemy(me, [a, b]).id == "b"

    def test_closest_enemy_attacker(self):
        """Without own targets, an enemy that attacked the monster is closest."""
        me = make_combatant(id="me")
        a = make_combatant(id="a")
        b = make_combatant(id="b")
        memory = MemoryStore()
        memory.record_action("b", ActionRecord(kind="attack", target_id="me"))
        evaluator = make_evaluator([me, a, b], memory=memory)
        assert evaluator.find_closest_enemy(me, [a, b]).id == "b"

    def test_closest_enemy_threat_fallback(self):
        """With no engagement at all, the most threatening enemy is chosen."""
        me = make_combatant(id="me")
        a = make_combatant(id="a")
        b = make_combatant(id="b")
        evaluator = make_evaluator([me, a, b], damage={"b": 3})
        assert evaluator.find_closest_enemy(me, [a, b]).id == "b"

    def test_enemy_groups(self):
        """Enemies within 15 feet of each other form a group."""
        a = make_combatant(id="a", position={"x": 0, "y": 0})
        b = make_combatant(id="b", position={"x": 1, "y": 1})
        c = make_combatant(id="c", position={"x": 10, "y": 10})
        groups = make_evaluator([a, b, c]).find_enemy_groups([a, b, c])
        assert [[e.id for e in g] for g in groups] == [["a", "b"]]

    def test_area_spell_targets_group(self):
        """Area spells target the largest group."""
        a = make_combatant(id="a", position={"x": 0, "y": 0})
        b = make_combatant(id="b", position={"x": 1, "y": 0})
        c = make_combatant(id="c", position={"x": 20, "y": 20})
        targets = make_evaluator([a, b, c]).find_spell_targets("Fireball", [a, b, c])
        assert [t.id for t in targets] == ["a", "b"]


class TestSituation:
    """Tests for situation predicates."""

    def test_in_danger_low_hp(self):
        """Below 30% HP is always dangerous."""
        me = make_combatant(id="me", hp=2, maxHp=10)
        assert make_evaluator([me]).is_in_danger(me, []) is True

    def test_in_danger_surrounded(self):
        """Two adjacent enemies are dangerous."""
        me = make_combatant(id="me", position={"x": 0, "y": 0})
        a = make_combatant(id="a", position={"x": 1, "y": 0})
        b = make_combatant(id="b", position={"x": 0, "y": 1})
        evaluator = make_evaluator([me, a, b])
        assert evaluator.is_in_danger(me, [a, b]) is True
        assert evaluator.is_in_danger(me, [a]) is False

    def test_in_danger_ranged_without_cover(self):
        """Being shot at without cover is dangerous; cover removes it."""
        exposed = make_combatant(id="me")
        covered = make_combatant(id="me", hasCover=True)
        archer = make_combatant(id="archer")
        memory = MemoryStore()
        memory.record_action("archer", ActionRecord(kind="attack", target_id="me", attack_type="ranged"))
        evaluator = make_evaluator([exposed, archer], memory=memory)

        assert evaluator.is_in_danger(exposed, [archer]) is True
        assert evaluator.is_in_danger(covered, [archer]) is False

    def test_should_dodge(self):
        """Dodge when badly hurt with an enemy adjacent."""
        me = make_combatant(id="me", hp=2, maxHp=10, position={"x": 0, "y": 0})
        a = make_combatant(id="a", position={"x": 1, "y": 0})
        evaluator = make_evaluator([me, a])
        assert evaluator.should_dodge(me, [a]) is True
        assert evaluator.should_dodge(me, []) is False

    def test_advantageous_position(self):
        """Cover, high ground or a ranged attacker at a distance are advantageous."""
        evaluator = make_evaluator([])
        assert evaluator.has_advantageous_position(make_combatant(hasCover=True), []) is True
        high = make_combatant(position={"x": 0, "y": 0, "elevation": 10})
        assert evaluator.has_advantageous_position(high, []) is True
        archer = make_combatant(actions=[{"name": "Longbow", "attack": {"type": "ranged", "damage": "1d8"}}])
        assert evaluator.has_advantageous_position(archer, []) is True
        assert evaluator.has_advantageous_position(make_combatant(), []) is False


class TestAttackEffectiveness:
    """Tests for is_attack_effective."""

    def _candidate(self, **attack):
        monster = make_combatant(actions=[{"name": "Strike", "attack": attack}])
        return build_action_catalog(monster).attacks()[0]

    def test_vulnerability(self):
        """Exploiting a vulnerability is effective."""
        target = make_combatant(id="t", ac=18, damageVulnerabilities=["fire"])
        candidate = self._candidate(type="melee", damage="1d6", damageType="fire")
        assert make_evaluator([target]).is_attack_effective(candidate, target) is True

    def test_resistance(self):
        """Hitting a resistance is not effective."""
        target = make_combatant(id="t", ac=10, damageResistances=["fire"])
        candidate = self._candidate(type="melee", damage="1d6", damageType="fire", toHit=8)
        assert make_evaluator([target]).is_attack_effective(candidate, target) is False

    def test_high_to_hit_low_ac(self):
        """A strong attack bonus against a low AC is effective."""
        target = make_combatant(id="t", ac=12)
        candidate = self._candidate(type="melee", damage="1d6", toHit=6)
        assert make_evaluator([target]).is_attack_effective(candidate, target) is True

    def test_failed_save_history(self):
        """A save the target recently failed makes the attack effective."""
        target = make_combatant(id="t", ac=18)
        memory = MemoryStore()
        memory.record_action("t", ActionRecord(kind="saving_throw", ability="DEX", success=False))
        candidate = self._candidate(type="breath", damage="4d6", savingThrow={"ability": "dex", "dc": 13})
        assert make_evaluator([target], memory=memory).is_attack_effective(candidate, target) is True
