"""
Combat AI Action Catalog.

Enumerates the actions a monster can take this cycle:
- Baseline maneuvers (Dodge, Dash, Disengage, Hide), always present
- Stat-block actions that are not waiting on a recharge
- Legendary actions, only outside the monster's own turn
- Cantrips, and leveled spells while a slot of that level remains
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, List, Optional

from combat_ai.core.dice import average_damage
from combat_ai.models.combatant import Combatant, StatBlockAction


class CandidateKind(Enum):
    """Kinds of selectable actions."""
    DODGE = "dodge"
    DASH = "dash"
    DISENGAGE = "disengage"
    HIDE = "hide"
    ATTACK = "attack"
    LEGENDARY = "legendary"
    SPELL = "spell"


BASELINE_KINDS = (CandidateKind.DODGE, CandidateKind.DASH, CandidateKind.DISENGAGE, CandidateKind.HIDE)


@dataclass(frozen=True)
class ActionCandidate:
    """One action the monster could take this cycle."""
    kind: CandidateKind
    label: str
    action: Optional[StatBlockAction] = None  # attack / legendary
    spell: Optional[str] = None               # spell
    level: int = 0                            # spell level, 0 for cantrips
    cost: int = 1                             # legendary action cost

    @property
    def name(self) -> str:
        if self.action is not None:
            return self.action.name
        if self.spell is not None:
            return self.spell
        return self.label

    @property
    def attack_type(self) -> Optional[str]:
        if self.action is None or self.action.attack is None:
            return None
        return self.action.attack.type.lower()

    @property
    def is_melee(self) -> bool:
        return self.attack_type == "melee"

    @property
    def is_ranged(self) -> bool:
        return self.attack_type == "ranged"

    @property
    def estimated_damage(self) -> float:
        """Average of the primary plus the additional damage formula."""
        return estimate_action_damage(self.action)


def estimate_action_damage(action: Optional[StatBlockAction]) -> float:
    """Average damage of a stat-block action; 0 when it has no attack."""
    if action is None or action.attack is None:
        return 0.0
    return average_damage(action.attack.damage) + average_damage(action.attack.additional_damage)


class ActionCatalog:
    """The resource-filtered candidates for one cycle."""

    def __init__(self, candidates: List[ActionCandidate]):
        self._candidates = list(candidates)

    def __iter__(self) -> Iterator[ActionCandidate]:
        return iter(self._candidates)

    def __len__(self) -> int:
        return len(self._candidates)

    def of_kind(self, *kinds: CandidateKind) -> List[ActionCandidate]:
        return [c for c in self._candidates if c.kind in kinds]

    def attacks(self) -> List[ActionCandidate]:
        """Stat-block action candidates."""
        return self.of_kind(CandidateKind.ATTACK)

    def offensive_actions(self) -> List[ActionCandidate]:
        """
        Damage-dealing candidates: the legendary actions when any are on
        offer (outside the monster's turn), else the stat-block actions.
        """
        legendary = self.of_kind(CandidateKind.LEGENDARY)
        if legendary:
            return legendary
        return self.attacks()

    def ranged_attacks(self) -> List[ActionCandidate]:
        return [c for c in self.attacks() if c.is_ranged]

    def spells(self, predicate: Optional[Callable[[str], bool]] = None) -> List[ActionCandidate]:
        """Spell candidates, optionally filtered by a name predicate."""
        spells = self.of_kind(CandidateKind.SPELL)
        if predicate is None:
            return spells
        return [c for c in spells if predicate(c.spell)]

    def highest_level_spell(self, predicate: Callable[[str], bool]) -> Optional[ActionCandidate]:
        """Highest level matching spell; ties keep catalog order."""
        matches = self.spells(predicate)
        if not matches:
            return None
        return sorted(matches, key=lambda c: c.level, reverse=True)[0]

    def has(self, kind: CandidateKind) -> bool:
        return any(c.kind == kind for c in self._candidates)


def build_action_catalog(monster: Combatant) -> ActionCatalog:
    """
    Enumerate the monster's currently usable actions.

    Args:
        monster: The deciding monster

    Returns:
        ActionCatalog with baseline, stat-block, legendary and spell candidates
    """
    candidates = [
        ActionCandidate(kind=kind, label=kind.value.capitalize())
        for kind in BASELINE_KINDS
    ]

    for action in monster.actions:
        # Skip recharge abilities that haven't recharged
        if not action.is_available:
            continue
        candidates.append(ActionCandidate(
            kind=CandidateKind.ATTACK,
            label=action.name,
            action=action,
        ))

    # Legendary actions happen at the end of other creatures' turns
    if monster.legendary_actions and not monster.is_current_turn:
        for action in monster.legendary_actions:
            candidates.append(ActionCandidate(
                kind=CandidateKind.LEGENDARY,
                label=f"Legendary: {action.name}",
                action=action,
                cost=action.cost or 1,
            ))

    spellcasting = monster.spellcasting
    if spellcasting is not None:
        for spell in spellcasting.cantrips:
            candidates.append(ActionCandidate(
                kind=CandidateKind.SPELL,
                label=f"Spell: {spell}",
                spell=spell,
                level=0,
            ))

        for level in range(1, 10):
            if spellcasting.remaining_slots(level) <= 0:
                continue
            for spell in spellcasting.spells_at(level):
                candidates.append(ActionCandidate(
                    kind=CandidateKind.SPELL,
                    label=f"Spell ({level}): {spell}",
                    spell=spell,
                    level=level,
                ))

    return ActionCatalog(candidates)
