"""
Combat AI Behavior Archetypes.

Defines the eight behavior archetypes a monster can follow and resolves
which one applies each cycle:
1. Explicit operator override
2. Behavior declared on the monster itself
3. Wounded heuristic (below 25% HP, by intelligence)
4. Role / creature type heuristic
5. Balanced
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from combat_ai.models.combatant import Combatant

logger = logging.getLogger(__name__)


class Archetype(Enum):
    """Behavior archetypes governing a monster's decisions."""
    AGGRESSIVE = "aggressive"   # Focuses on dealing maximum damage
    DEFENSIVE = "defensive"     # Prioritizes survival and protection
    SUPPORT = "support"         # Buffs allies and debuffs enemies
    BALANCED = "balanced"       # Mix of offensive and defensive actions
    COWARDLY = "cowardly"       # Avoids damage, may flee
    BERSERK = "berserk"         # Attacks with disregard for self-preservation
    PROTECTIVE = "protective"   # Prioritizes protecting allies
    TACTICAL = "tactical"       # Plays the battlefield and positioning

    @classmethod
    def from_value(cls, value: Union["Archetype", str, None]) -> Optional["Archetype"]:
        """Look up an archetype by name; None if it is not one of the eight."""
        if isinstance(value, Archetype):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class ActionKind(Enum):
    """Kinds of action the engine can recommend."""
    ATTACK = "attack"
    SPELL = "spell"
    DODGE = "dodge"
    DASH = "dash"
    DISENGAGE = "disengage"
    HIDE = "hide"
    LEGENDARY = "legendary"
    PROTECT = "protect"
    POSITION = "position"
    NONE = "none"


class DecisionOutcome(Enum):
    """How the decision was reached."""
    DECIDED = "decided"    # The archetype's preferred path applied
    FALLBACK = "fallback"  # Degraded choice: the preferred path had no candidates
    NOTHING = "nothing"    # Nothing applicable, not even a baseline maneuver


@dataclass(frozen=True)
class ChosenAction:
    """The engine's recommendation for one cycle. The host applies it."""
    kind: ActionKind
    target_ids: Tuple[str, ...] = ()
    rationale: str = ""
    action_name: Optional[str] = None
    spell: Optional[str] = None
    spell_level: Optional[int] = None
    outcome: DecisionOutcome = DecisionOutcome.DECIDED
    archetype: Optional[Archetype] = None
    narration: Optional[str] = None

    @property
    def target_id(self) -> Optional[str]:
        return self.target_ids[0] if self.target_ids else None

    @property
    def has_target(self) -> bool:
        return bool(self.target_ids)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for the host."""
        return {
            "kind": self.kind.value,
            "target_ids": list(self.target_ids),
            "rationale": self.rationale,
            "action_name": self.action_name,
            "spell": self.spell,
            "spell_level": self.spell_level,
            "outcome": self.outcome.value,
            "archetype": self.archetype.value if self.archetype else None,
            "narration": self.narration,
        }


@dataclass(frozen=True)
class BehaviorAssignment:
    """Operator override of a monster's archetype."""
    archetype: Archetype
    options: Dict[str, Any] = field(default_factory=dict)


# Role / type signals checked in order after the wounded heuristic
ROLE_SUPPORT = "support"
ROLE_DEFENDER = "defender"
ROLE_STRIKER = "striker"
ROLE_CONTROLLER = "controller"


class BehaviorResolver:
    """
    Resolves the archetype for a monster.

    Holds the operator override table for one engine. Resolution is a pure
    function of the override table and the monster's stat block.
    """

    WOUNDED_THRESHOLD = 25.0

    def __init__(self):
        self._overrides: Dict[str, BehaviorAssignment] = {}

    def set_override(
        self,
        monster_id: str,
        archetype: Union[Archetype, str],
        options: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Assign an archetype to a monster, taking precedence over inference.

        Returns:
            False (and leaves prior state unchanged) if the archetype is unknown
        """
        resolved = Archetype.from_value(archetype)
        if resolved is None:
            logger.warning(f"Invalid behavior type: {archetype!r} (override for {monster_id} unchanged)")
            return False

        self._overrides[monster_id] = BehaviorAssignment(archetype=resolved, options=dict(options or {}))
        logger.info(f"Behavior override for {monster_id}: {resolved.value}")
        return True

    def clear_override(self, monster_id: str) -> bool:
        """Remove a monster's override. Returns False if there was none."""
        return self._overrides.pop(monster_id, None) is not None

    def get_override(self, monster_id: str) -> Optional[BehaviorAssignment]:
        return self._overrides.get(monster_id)

    def clear(self) -> None:
        self._overrides.clear()

    def resolve(self, monster: Combatant) -> Archetype:
        """Resolve the archetype for this cycle; first matching rule wins."""
        assignment = self._overrides.get(monster.id)
        if assignment is not None:
            return assignment.archetype
        return resolve_from_stat_block(monster)


def resolve_from_stat_block(monster: Combatant) -> Archetype:
    """Archetype a monster follows with no operator override."""
    declared = Archetype.from_value(monster.behavior)
    if declared is not None:
        return declared

    # Wounded monsters may change behavior
    if monster.hp_percent < BehaviorResolver.WOUNDED_THRESHOLD:
        if monster.intelligence < 8:
            return Archetype.BERSERK
        if monster.intelligence > 14:
            return Archetype.DEFENSIVE
        return Archetype.COWARDLY

    role = (monster.role or "").lower()
    creature_type = (monster.type or "").lower()

    if role == ROLE_SUPPORT or monster.has_spells:
        return Archetype.SUPPORT
    if role == ROLE_DEFENDER or creature_type == "construct":
        return Archetype.PROTECTIVE
    if role == ROLE_STRIKER or creature_type == "fiend":
        return Archetype.AGGRESSIVE
    if role == ROLE_CONTROLLER or creature_type == "fey":
        return Archetype.TACTICAL

    return Archetype.BALANCED
