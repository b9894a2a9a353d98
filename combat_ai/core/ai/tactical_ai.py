"""
Monster Combat AI - Core Decision Framework.

One CombatAI instance is the engine context for an encounter. It owns
its memory, threat cache and behavior overrides, and turns a combatant
snapshot into a single recommended action per call:

1. Refresh memory from the snapshot
2. Split allies and enemies, assess enemy threat
3. Resolve the monster's archetype
4. Build the catalog of usable actions
5. Dispatch to the archetype's strategy
"""
import logging
import random
from dataclasses import replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from combat_ai.config import Settings, get_settings
from combat_ai.models.combatant import (
    Combatant,
    Environment,
    SnapshotItem,
    load_combatant,
    load_environment,
    load_snapshot,
)
from .behaviors import (
    ActionKind,
    Archetype,
    BehaviorAssignment,
    BehaviorResolver,
    ChosenAction,
    DecisionOutcome,
)
from .catalog import build_action_catalog
from .memory import ActionRecord, MemoryStore
from .narrative import NarrativeGenerator
from .strategies import StrategyContext, get_strategy
from .targeting import TargetEvaluator
from .threat import ThreatAssessor

logger = logging.getLogger(__name__)


class AIDifficulty(Enum):
    """Engine difficulty levels."""
    BASIC = "basic"        # Simple, predictable behavior
    STANDARD = "standard"  # Balanced, somewhat strategic
    ADVANCED = "advanced"  # More complex, tactical behavior
    EXPERT = "expert"      # Highly optimized, challenging behavior

    @classmethod
    def from_value(cls, value: Union["AIDifficulty", str, None]) -> Optional["AIDifficulty"]:
        if isinstance(value, AIDifficulty):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


# Decision kinds worth remembering as the monster's own actions
_RECORDED_KINDS = {
    ActionKind.ATTACK: "attack",
    ActionKind.LEGENDARY: "attack",
    ActionKind.SPELL: "spell",
}


def split_sides(
    monster: Combatant,
    combatants: Iterable[Combatant],
) -> Tuple[List[Combatant], List[Combatant]]:
    """
    Partition the snapshot into allies and enemies of a monster.

    Allies share the monster's type or faction, so the monster counts
    as its own ally and can heal or guard itself. Everyone else is an
    enemy. Defeated combatants are on neither side.

    Returns:
        Tuple of (allies, enemies)
    """
    allies = []
    enemies = []
    for combatant in combatants:
        if combatant.is_defeated:
            continue
        if combatant.id == monster.id:
            allies.append(combatant)
            continue
        same_type = combatant.type == monster.type
        same_faction = combatant.faction is not None and combatant.faction == monster.faction
        if same_type or same_faction:
            allies.append(combatant)
        else:
            enemies.append(combatant)
    return allies, enemies


class CombatAI:
    """
    Combat AI engine context.

    Holds per-encounter memory, the threat cache and behavior overrides.
    Engines share no state with each other; create one per encounter
    (or per controlling faction).
    """

    def __init__(
        self,
        difficulty: Union[AIDifficulty, str, None] = None,
        settings: Optional[Settings] = None,
        narrator: Optional[NarrativeGenerator] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or get_settings()
        self.difficulty = (
            AIDifficulty.from_value(difficulty)
            or AIDifficulty.from_value(self.settings.DIFFICULTY)
            or AIDifficulty.STANDARD
        )
        self.narrator = narrator
        self.rng = rng or random.Random()

        self._memory = MemoryStore(history_window=self.settings.HISTORY_WINDOW)
        self._threat = ThreatAssessor()
        self._behaviors = BehaviorResolver()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_difficulty(self, difficulty: Union[AIDifficulty, str]) -> bool:
        """
        Change the engine difficulty.

        Returns:
            False (difficulty unchanged) for an unknown value
        """
        resolved = AIDifficulty.from_value(difficulty)
        if resolved is None:
            logger.warning(f"Invalid AI difficulty: {difficulty!r}")
            return False
        self.difficulty = resolved
        return True

    def set_behavior_override(
        self,
        monster_id: str,
        archetype: Union[Archetype, str],
        options: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Force an archetype for a monster. False for an unknown archetype."""
        return self._behaviors.set_override(monster_id, archetype, options)

    def clear_behavior_override(self, monster_id: str) -> bool:
        return self._behaviors.clear_override(monster_id)

    def get_behavior_override(self, monster_id: str) -> Optional[BehaviorAssignment]:
        return self._behaviors.get_override(monster_id)

    # ------------------------------------------------------------------
    # Memory
    # ------------------------------------------------------------------

    @property
    def memory(self) -> MemoryStore:
        return self._memory

    @property
    def threat_scores(self) -> Dict[str, float]:
        """Threat scores from the most recent decision."""
        return self._threat.scores

    def record_action(
        self,
        actor_id: str,
        kind: str,
        target_id: Optional[str] = None,
        attack_type: Optional[str] = None,
        ability: Optional[str] = None,
        success: Optional[bool] = None,
        round: Optional[int] = None,
    ) -> None:
        """
        Feed an observed action into the actor's history.

        Args:
            actor_id: Combatant who acted
            kind: "attack", "spell", "saving_throw", ...
            target_id: Combatant the action was aimed at
            attack_type: "melee" or "ranged" for attacks
            ability: Ability used for a saving throw
            success: Saving throw outcome
            round: Combat round, if the host tracks it
        """
        self._memory.record_action(actor_id, ActionRecord(
            kind=kind,
            target_id=target_id,
            attack_type=attack_type.lower() if attack_type else None,
            ability=ability,
            success=success,
            round=round,
        ))

    def reset(self) -> None:
        """Forget everything learned this encounter. Overrides are kept."""
        self._memory.clear()
        self._threat.clear()

    # ------------------------------------------------------------------
    # Decision
    # ------------------------------------------------------------------

    def resolve_behavior(self, monster: Union[Combatant, Mapping[str, Any]]) -> Archetype:
        """Archetype the monster would follow right now."""
        return self._behaviors.resolve(load_combatant(monster))

    def determine_action(
        self,
        monster: SnapshotItem,
        combatants: Iterable[SnapshotItem],
        environment: Union[Environment, Mapping[str, Any], None] = None,
    ) -> ChosenAction:
        """
        Main decision entry point.

        Args:
            monster: The deciding monster
            combatants: Every visible combatant (the monster may be included)
            environment: Optional battlefield descriptor

        Returns:
            ChosenAction for the host to apply

        Raises:
            SnapshotValidationError: If the snapshot cannot be read
        """
        monster = load_combatant(monster)
        snapshot = load_snapshot(combatants)
        battlefield = load_environment(environment)

        # 1. Update memory
        observed = list(snapshot)
        if all(c.id != monster.id for c in observed):
            observed.append(monster)
        self._memory.observe(observed)

        # 2. Sides and threat
        allies, enemies = split_sides(monster, observed)
        self._threat.assess(enemies, self._memory)

        # 3. Archetype
        archetype = self._behaviors.resolve(monster)

        if monster.is_incapacitated:
            decision = ChosenAction(
                kind=ActionKind.NONE,
                rationale=f"{monster.display_name} is incapacitated",
                outcome=DecisionOutcome.NOTHING,
            )
        else:
            # 4. Usable actions
            catalog = build_action_catalog(monster)

            # 5. Dispatch
            context = StrategyContext(
                monster=monster,
                catalog=catalog,
                enemies=enemies,
                allies=allies,
                evaluator=TargetEvaluator(
                    self._memory,
                    self._threat,
                    recent_actions=self.settings.RECENT_ACTIONS,
                    feet_per_square=self.settings.FEET_PER_SQUARE,
                ),
                environment=battlefield,
                rng=self.rng,
            )
            decision = get_strategy(archetype)(context)

        decision = replace(decision, archetype=archetype)

        if self.narrator is not None:
            decision = replace(decision, narration=self.narrator.narrate(monster, decision, snapshot))

        if self.settings.RECORD_OWN_ACTIONS:
            self._remember_decision(monster, decision)

        logger.debug(
            f"[AI] {monster.display_name} ({archetype.value}): {decision.kind.value} "
            f"-> {list(decision.target_ids)} [{decision.outcome.value}] {decision.rationale}"
        )
        return decision

    def _remember_decision(self, monster: Combatant, decision: ChosenAction) -> None:
        """Append the monster's own targeted decision to its history."""
        kind = _RECORDED_KINDS.get(decision.kind)
        if kind is None or not decision.has_target:
            return

        attack_type = None
        if decision.action_name:
            for action in list(monster.actions) + list(monster.legendary_actions):
                if action.name == decision.action_name and action.attack is not None:
                    attack_type = action.attack.type.lower()
                    break

        for target_id in decision.target_ids:
            if target_id == monster.id:
                continue
            self._memory.record_action(monster.id, ActionRecord(
                kind=kind,
                target_id=target_id,
                attack_type=attack_type,
            ))


def generate_combat_suggestion(
    character: SnapshotItem,
    combatants: Iterable[SnapshotItem],
    environment: Union[Environment, Mapping[str, Any], None] = None,
    settings: Optional[Settings] = None,
) -> ChosenAction:
    """
    Suggest an action for a player character.

    Uses a throwaway expert engine, so nothing is remembered between calls.
    """
    engine = CombatAI(difficulty=AIDifficulty.EXPERT, settings=settings)
    player = load_combatant(character).model_copy(update={"type": "player"})
    return engine.determine_action(player, combatants, environment)
