"""
Encounter and Stat-Block Assessment.

Read-only helpers for the host's DM tools:
- generate_tactical_assessment: party vs monsters at a glance
- generate_monster_strategy: how a stat block is likely to fight
- suggest_archetype: the behavior archetype that suits a stat block
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from combat_ai.models.combatant import (
    Combatant,
    Environment,
    SnapshotItem,
    load_combatant,
    load_environment,
    load_snapshot,
)
from .behaviors import Archetype


@dataclass
class TacticalAssessment:
    """Snapshot-wide read of how the fight is going."""
    difficulty: str  # "deadly", "easy", "hard" or "moderate"
    player_health_percent: float
    monster_health_percent: float
    vulnerable_players: List[Combatant] = field(default_factory=list)
    vulnerable_monsters: List[Combatant] = field(default_factory=list)
    debuffed_players: List[Combatant] = field(default_factory=list)
    debuffed_monsters: List[Combatant] = field(default_factory=list)
    advice: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "difficulty": self.difficulty,
            "player_health_percent": round(self.player_health_percent, 1),
            "monster_health_percent": round(self.monster_health_percent, 1),
            "vulnerable_players": [c.id for c in self.vulnerable_players],
            "vulnerable_monsters": [c.id for c in self.vulnerable_monsters],
            "debuffed_players": [c.id for c in self.debuffed_players],
            "debuffed_monsters": [c.id for c in self.debuffed_monsters],
            "advice": list(self.advice),
        }


@dataclass
class MonsterStrategy:
    """How a monster is expected to fight, for the DM."""
    role: str  # "brute", "skirmisher", "caster", "leader" or "balanced"
    intelligence: int
    tactical_notes: List[str] = field(default_factory=list)
    behavior_pattern: str = ""
    likely_first_actions: List[str] = field(default_factory=list)
    suggested_archetype: Archetype = Archetype.BALANCED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role,
            "intelligence": self.intelligence,
            "tactical_notes": list(self.tactical_notes),
            "behavior_pattern": self.behavior_pattern,
            "likely_first_actions": list(self.likely_first_actions),
            "suggested_archetype": self.suggested_archetype.value,
        }


def _average_health(combatants: List[Combatant]) -> float:
    if not combatants:
        return 0.0
    return sum(c.hp_percent for c in combatants) / len(combatants)


def _names(combatants: Iterable[Combatant]) -> str:
    return ", ".join(c.display_name for c in combatants)


def generate_tactical_assessment(
    combatants: Iterable[SnapshotItem],
    environment: Union[Environment, Mapping[str, Any], None] = None,
) -> TacticalAssessment:
    """
    Assess the encounter from both sides.

    Args:
        combatants: Every combatant in the encounter
        environment: Optional battlefield descriptor

    Returns:
        TacticalAssessment with difficulty estimate and advice
    """
    snapshot = load_snapshot(combatants)
    players = [c for c in snapshot if c.type == "player"]
    monsters = [c for c in snapshot if c.type == "monster"]

    player_health = _average_health(players)
    monster_health = _average_health(monsters)

    vulnerable_players = [p for p in players if p.hp_percent < 30]
    vulnerable_monsters = [m for m in monsters if m.hp_percent < 30]
    debuffed_players = [p for p in players if p.conditions]
    debuffed_monsters = [m for m in monsters if m.conditions]

    if player_health < 40 and monster_health > 60:
        difficulty = "deadly"
    elif player_health > 70 and monster_health < 30:
        difficulty = "easy"
    elif len(vulnerable_players) > len(players) / 3:
        difficulty = "hard"
    else:
        difficulty = "moderate"

    advice = []
    if vulnerable_players:
        advice.append(f"Protect or heal {_names(vulnerable_players)}.")
    if vulnerable_monsters:
        advice.append(f"Focus attacks on {_names(vulnerable_monsters)}.")
    if debuffed_players:
        advice.append(f"Remove conditions from {_names(debuffed_players)}.")

    if environment is not None:
        battlefield = load_environment(environment)
        if battlefield.hazards:
            hazards = ", ".join(h.name for h in battlefield.hazards)
            advice.append(f"Watch out for environmental hazards: {hazards}.")
        if battlefield.has_cover:
            advice.append("Use available cover to protect vulnerable allies.")

    return TacticalAssessment(
        difficulty=difficulty,
        player_health_percent=player_health,
        monster_health_percent=monster_health,
        vulnerable_players=vulnerable_players,
        vulnerable_monsters=vulnerable_monsters,
        debuffed_players=debuffed_players,
        debuffed_monsters=debuffed_monsters,
        advice=advice,
    )


def _classify_role(monster: Combatant) -> Optional[str]:
    scores = monster.abilities
    if scores.strength >= 18 and scores.constitution >= 16:
        return "brute"
    if scores.dexterity >= 16 and scores.dexterity > scores.strength:
        return "skirmisher"
    if (scores.intelligence >= 14 or scores.wisdom >= 14) and monster.spellcasting is not None:
        return "caster"
    if scores.charisma >= 16:
        return "leader"
    return None


_ROLE_NOTES = {
    "brute": "This creature is physically powerful and can withstand significant damage.",
    "skirmisher": "This creature is agile and likely to use hit-and-run tactics.",
    "caster": "This creature relies on spells and should be kept at a distance.",
    "leader": "This creature may have abilities that buff allies or control the battlefield.",
}


def _behavior_pattern(role: str, intelligence: int) -> str:
    if role == "brute":
        if intelligence < 8:
            return "Will charge directly at the strongest-looking opponent."
        return "Will focus on eliminating weaker targets first."
    if role == "skirmisher":
        return "Will attack opportunistically and retreat when threatened."
    if role == "caster":
        if intelligence < 12:
            return "Will use its most powerful spells first."
        return "Will strategically control the battlefield with spells."
    if role == "leader":
        return "Will coordinate with allies and prioritize buffing them."
    return "Will adapt tactics based on the situation."


def generate_monster_strategy(monster: SnapshotItem) -> MonsterStrategy:
    """
    Read a stat block and describe how the monster is likely to fight.

    Args:
        monster: The monster's stat block

    Returns:
        MonsterStrategy with role, notes, behavior pattern and openers
    """
    monster = load_combatant(monster)
    role = _classify_role(monster) or "balanced"
    notes = []
    if role in _ROLE_NOTES:
        notes.append(_ROLE_NOTES[role])

    if any("regeneration" in t.name.lower() for t in monster.traits):
        notes.append("This creature regenerates hit points and will be difficult to take down "
                     "without specific damage types.")
    if monster.damage_resistances:
        notes.append(f"Resistant to: {', '.join(monster.damage_resistances)}.")
    if monster.damage_immunities:
        notes.append(f"Immune to: {', '.join(monster.damage_immunities)}.")
    if monster.condition_immunities:
        notes.append(f"Immune to conditions: {', '.join(monster.condition_immunities)}.")

    speed = monster.speed
    movement = [
        f"{mode} {value} ft."
        for mode, value in (("fly", speed.fly), ("swim", speed.swim), ("climb", speed.climb), ("burrow", speed.burrow))
        if value
    ]
    if movement:
        notes.append(f"Special movement: {', '.join(movement)}.")

    if monster.legendary_actions:
        notes.append("This creature has legendary actions and can act outside its turn.")

    openers = []
    area = [
        a for a in monster.actions
        if (a.attack is not None and a.attack.type.lower() == "breath") or "area" in a.description.lower()
    ]
    if area:
        openers.append(f"Use {area[0].name} if multiple targets are grouped together.")

    summons = [a for a in monster.actions if "summon" in a.description.lower()]
    if summons:
        openers.append(f"Use {summons[0].name} to call for reinforcements.")

    if not openers and monster.actions:
        standard = next((a for a in monster.actions if a.attack is not None), monster.actions[0])
        openers.append(f"Attack with {standard.name}.")

    return MonsterStrategy(
        role=role,
        intelligence=monster.intelligence,
        tactical_notes=notes,
        behavior_pattern=_behavior_pattern(role, monster.intelligence),
        likely_first_actions=openers,
        suggested_archetype=suggest_archetype(monster),
    )


# Creature types with a typical temperament
_TYPE_ARCHETYPES = {
    "construct": Archetype.PROTECTIVE,
    "elemental": Archetype.PROTECTIVE,
    "fiend": Archetype.AGGRESSIVE,
    "monstrosity": Archetype.AGGRESSIVE,
    "fey": Archetype.TACTICAL,
    "celestial": Archetype.TACTICAL,
    "dragon": Archetype.TACTICAL,
}


def suggest_archetype(monster: SnapshotItem) -> Archetype:
    """Suggest a behavior archetype from ability scores and creature type."""
    monster = load_combatant(monster)
    scores = monster.abilities

    # Low intelligence creatures tend toward simpler behaviors
    if scores.intelligence < 6:
        if scores.strength >= 16:
            return Archetype.BERSERK
        if scores.strength < 10 and scores.constitution < 10:
            return Archetype.COWARDLY

    if scores.intelligence >= 14:
        return Archetype.TACTICAL
    if scores.wisdom >= 14 and scores.wisdom > scores.intelligence:
        return Archetype.DEFENSIVE
    if scores.strength >= 16 and scores.strength >= scores.dexterity:
        return Archetype.AGGRESSIVE
    if scores.dexterity >= 16 and scores.dexterity > scores.strength:
        return Archetype.TACTICAL
    if scores.charisma >= 16 and scores.charisma >= scores.strength and scores.charisma >= scores.dexterity:
        return Archetype.SUPPORT

    creature_type = (monster.type or "").lower()
    if creature_type == "undead":
        return Archetype.TACTICAL if scores.intelligence >= 10 else Archetype.AGGRESSIVE
    return _TYPE_ARCHETYPES.get(creature_type, Archetype.BALANCED)
