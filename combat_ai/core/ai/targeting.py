"""
Combat AI Target Evaluation.

Evaluates and prioritizes targets based on threat, vulnerability and
coarse positioning. When coordinates are missing, distance questions
fall back to a "recent mutual engagement" approximation: two combatants
count as close if either targeted the other within its last few actions.
"""
import math
from typing import Any, Callable, List, Optional, Sequence

from combat_ai.models.combatant import Combatant
from .catalog import ActionCandidate
from .memory import MemoryStore
from .spell_lists import is_area_spell, is_debuff_spell, is_offensive_spell
from .threat import ThreatAssessor

# Conditions that make a target easier to hit or finish off
VULNERABLE_CONDITIONS = ("prone", "restrained", "stunned", "paralyzed")

MELEE_REACH_FEET = 5
AREA_RADIUS_FEET = 15
RANGED_COMFORT_FEET = 30


def vulnerability_score(target: Combatant) -> float:
    """
    Score how exploitable a target is.

    (100 - HP%) / 10 + max(0, 20 - AC) + 5 per vulnerable condition.
    Never negative.
    """
    score = max(0.0, (100 - target.hp_percent) / 10)

    # Low AC increases vulnerability
    score += max(0, 20 - target.ac)

    for condition in target.conditions:
        if condition in VULNERABLE_CONDITIONS:
            score += 5

    return score


def _first_max(items: Sequence[Combatant], key: Callable[[Combatant], Any]) -> Optional[Combatant]:
    """Highest-keyed item; the earliest wins ties."""
    best = None
    best_value = None
    for item in items:
        value = key(item)
        if best is None or value > best_value:
            best = item
            best_value = value
    return best


class TargetEvaluator:
    """
    Evaluates potential targets for one deciding monster.

    Reads the engine's memory and threat cache but never changes them.
    """

    def __init__(
        self,
        memory: MemoryStore,
        threat: ThreatAssessor,
        recent_actions: int = 3,
        feet_per_square: int = 5,
    ):
        self.memory = memory
        self.threat = threat
        self.recent_actions = recent_actions
        self.feet_per_square = feet_per_square

    # ------------------------------------------------------------------
    # Scores
    # ------------------------------------------------------------------

    def threat_of(self, combatant: Combatant) -> float:
        return self.threat.score(combatant.id)

    def vulnerability_of(self, combatant: Combatant) -> float:
        return vulnerability_score(combatant)

    # ------------------------------------------------------------------
    # Target selection
    # ------------------------------------------------------------------

    def find_best_target(self, enemies: Sequence[Combatant]) -> Optional[Combatant]:
        """
        Prefer an already wounded (<50% HP) enemy, highest threat first;
        otherwise the highest threat enemy.
        """
        if not enemies:
            return None

        by_threat = sorted(enemies, key=self.threat_of, reverse=True)
        wounded = [e for e in by_threat if e.hp_percent < 50]
        if wounded:
            return wounded[0]
        return by_threat[0]

    def find_most_threatening(self, enemies: Sequence[Combatant]) -> Optional[Combatant]:
        return _first_max(enemies, self.threat_of)

    def find_most_vulnerable(self, enemies: Sequence[Combatant]) -> Optional[Combatant]:
        return _first_max(enemies, self.vulnerability_of)

    def find_best_buff_target(self, allies: Sequence[Combatant]) -> Optional[Combatant]:
        """Ally that has dealt the most damage, ties to the higher HP; else the one with most HP."""
        if not allies:
            return None

        fighting = [a for a in allies if self.memory.damage_dealt(a.id) > 0]
        if fighting:
            return _first_max(fighting, lambda a: (self.memory.damage_dealt(a.id), a.hp))

        return _first_max(allies, lambda a: a.hp)

    def find_closest_enemy(self, combatant: Combatant, enemies: Sequence[Combatant]) -> Optional[Combatant]:
        """
        Nearest enemy by position; without coordinates, an enemy the
        combatant recently engaged (either direction), else the highest
        threat enemy.
        """
        if not enemies:
            return None

        if combatant.position is not None:
            positioned = [e for e in enemies if e.position is not None]
            if positioned:
                return min(positioned, key=lambda e: self.distance(combatant, e))

        for enemy in enemies:
            if self.memory.targeted_recently(combatant.id, enemy.id, self.recent_actions):
                return enemy
        for enemy in enemies:
            if self.memory.targeted_recently(enemy.id, combatant.id, self.recent_actions):
                return enemy

        return self.find_most_threatening(enemies)

    def find_spell_targets(self, spell: str, enemies: Sequence[Combatant]) -> List[Combatant]:
        """Targets for a hostile spell: a cluster for area spells, else one enemy."""
        if not enemies:
            return []

        if is_area_spell(spell):
            groups = self.find_enemy_groups(enemies)
            if groups:
                return max(groups, key=len)

        if is_debuff_spell(spell):
            return [self.find_most_threatening(enemies)]

        if is_offensive_spell(spell):
            return [self.find_most_vulnerable(enemies)]

        return [self.find_best_target(enemies)]

    def find_enemy_groups(self, enemies: Sequence[Combatant]) -> List[List[Combatant]]:
        """Clusters of two or more enemies within area range of a seed enemy."""
        groups = []
        processed = set()

        for enemy in enemies:
            if enemy.id in processed:
                continue

            group = [enemy]
            processed.add(enemy.id)
            for other in enemies:
                if other.id in processed:
                    continue
                if self.is_within_distance(enemy, other, AREA_RADIUS_FEET):
                    group.append(other)
                    processed.add(other.id)

            if len(group) > 1:
                groups.append(group)

        return groups

    # ------------------------------------------------------------------
    # Distance
    # ------------------------------------------------------------------

    def distance(self, a: Combatant, b: Combatant) -> float:
        """Distance in feet; infinite if either position is unknown."""
        if a.position is None or b.position is None:
            return math.inf
        dx = a.position.x - b.position.x
        dy = a.position.y - b.position.y
        return math.sqrt(dx * dx + dy * dy) * self.feet_per_square

    def engaged(self, a: Combatant, b: Combatant) -> bool:
        """Either combatant targeted the other within its recent actions."""
        return (
            self.memory.targeted_recently(a.id, b.id, self.recent_actions)
            or self.memory.targeted_recently(b.id, a.id, self.recent_actions)
        )

    def is_within_distance(self, a: Combatant, b: Combatant, feet: float) -> bool:
        if a.position is not None and b.position is not None:
            return self.distance(a, b) <= feet
        return self.engaged(a, b)

    def adjacent_enemies(self, combatant: Combatant, enemies: Sequence[Combatant]) -> List[Combatant]:
        return [e for e in enemies if self.is_within_distance(combatant, e, MELEE_REACH_FEET)]

    # ------------------------------------------------------------------
    # Situation predicates
    # ------------------------------------------------------------------

    def is_in_danger(self, combatant: Combatant, enemies: Sequence[Combatant]) -> bool:
        """
        Low HP (<30%), more than one adjacent enemy, or recently targeted
        by a ranged attacker while lacking cover.
        """
        if combatant.hp_percent < 30:
            return True

        if len(self.adjacent_enemies(combatant, enemies)) > 1:
            return True

        if not combatant.has_cover:
            for enemy in enemies:
                record = self.memory.get(enemy.id)
                if record is None:
                    continue
                for action in record.recent_actions:
                    if (action.kind == "attack" and action.attack_type == "ranged"
                            and action.target_id == combatant.id):
                        return True

        return False

    def should_dodge(self, combatant: Combatant, enemies: Sequence[Combatant]) -> bool:
        """Cornered and wounded: low HP with an enemy adjacent."""
        return combatant.hp_percent < 30 and len(self.adjacent_enemies(combatant, enemies)) > 0

    def is_targeting(self, enemy: Combatant, ally: Combatant) -> bool:
        return self.memory.targeted_recently(enemy.id, ally.id, self.recent_actions)

    def has_advantageous_position(self, combatant: Combatant, enemies: Sequence[Combatant]) -> bool:
        """Cover, high ground, or a ranged attacker with nobody within 30 ft."""
        if combatant.has_cover:
            return True

        if combatant.position is not None and combatant.position.elevation > 0:
            return True

        has_ranged = any(a.attack is not None and a.attack.is_ranged for a in combatant.actions)
        if has_ranged:
            too_close = [e for e in enemies if self.is_within_distance(combatant, e, RANGED_COMFORT_FEET)]
            if not too_close:
                return True

        return False

    def is_attack_effective(self, candidate: ActionCandidate, target: Combatant) -> bool:
        """
        Judge an attack against a target: exploits a vulnerability, avoids
        a resistance, out-hits a low AC, or forces a save the target has
        failed before.
        """
        if candidate.action is None or candidate.action.attack is None:
            return False
        attack = candidate.action.attack
        damage_type = (attack.damage_type or "").lower()

        if damage_type:
            if damage_type in (v.lower() for v in target.damage_vulnerabilities):
                return True
            if damage_type in (r.lower() for r in target.damage_resistances):
                return False

        if attack.to_hit is not None and target.ac < 13 and attack.to_hit > 5:
            return True

        if attack.saving_throw is not None:
            record = self.memory.get(target.id)
            if record is not None:
                ability = attack.saving_throw.ability.lower()
                for action in record.recent_actions:
                    if (action.kind == "saving_throw" and (action.ability or "").lower() == ability
                            and action.success is False):
                        return True

        return False
