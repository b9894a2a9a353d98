"""
Combat AI Strategies.

One decision function per archetype. Each is a pure function of a
StrategyContext and returns a ChosenAction; the STRATEGIES table maps
every Archetype to its function. No strategy raises when enemies or
allies are missing: it degrades to a fallback maneuver or an explicit
"nothing" result.
"""
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from combat_ai.models.combatant import Combatant, Environment
from .behaviors import ActionKind, Archetype, ChosenAction, DecisionOutcome
from .catalog import ActionCandidate, ActionCatalog, CandidateKind
from .spell_lists import (
    is_buff_spell,
    is_control_spell,
    is_debuff_spell,
    is_defensive_spell,
    is_escape_spell,
    is_healing_spell,
    is_offensive_spell,
    is_protective_spell,
)
from .targeting import TargetEvaluator


@dataclass(frozen=True)
class StrategyContext:
    """Everything a strategy may look at for one decision."""
    monster: Combatant
    catalog: ActionCatalog
    enemies: Sequence[Combatant]
    allies: Sequence[Combatant]
    evaluator: TargetEvaluator
    environment: Environment = field(default_factory=Environment)
    rng: random.Random = field(default_factory=random.Random)


Strategy = Callable[[StrategyContext], ChosenAction]


# ----------------------------------------------------------------------
# Result builders
# ----------------------------------------------------------------------

def _nothing(reason: str) -> ChosenAction:
    return ChosenAction(kind=ActionKind.NONE, rationale=reason, outcome=DecisionOutcome.NOTHING)


def _maneuver(
    kind: ActionKind,
    reason: str,
    target: Optional[Combatant] = None,
    fallback: bool = False,
) -> ChosenAction:
    return ChosenAction(
        kind=kind,
        target_ids=(target.id,) if target is not None else (),
        rationale=reason,
        outcome=DecisionOutcome.FALLBACK if fallback else DecisionOutcome.DECIDED,
    )


def _use_action(candidate: ActionCandidate, target: Combatant, reason: str) -> ChosenAction:
    kind = ActionKind.LEGENDARY if candidate.kind == CandidateKind.LEGENDARY else ActionKind.ATTACK
    return ChosenAction(
        kind=kind,
        target_ids=(target.id,),
        action_name=candidate.name,
        rationale=reason,
    )


def _cast(candidate: ActionCandidate, targets: Sequence[Combatant], reason: str) -> ChosenAction:
    return ChosenAction(
        kind=ActionKind.SPELL,
        target_ids=tuple(t.id for t in targets),
        spell=candidate.spell,
        spell_level=candidate.level,
        rationale=reason,
    )


def _highest_damage(candidates: List[ActionCandidate]) -> Optional[ActionCandidate]:
    """Highest estimated damage; the earliest wins ties."""
    best = None
    for candidate in candidates:
        if best is None or candidate.estimated_damage > best.estimated_damage:
            best = candidate
    return best


def _names(combatants: Sequence[Combatant]) -> str:
    return ", ".join(c.display_name for c in combatants)


# ----------------------------------------------------------------------
# Archetypes
# ----------------------------------------------------------------------

def aggressive_strategy(ctx: StrategyContext) -> ChosenAction:
    """Hit as hard as possible: best damage action, else best offensive spell."""
    if not ctx.enemies:
        return _nothing("No enemies to attack")

    best_attack = _highest_damage(ctx.catalog.offensive_actions())
    if best_attack is not None:
        target = ctx.evaluator.find_best_target(ctx.enemies)
        return _use_action(best_attack, target, f"Attack {target.display_name} with {best_attack.name}")

    best_spell = ctx.catalog.highest_level_spell(is_offensive_spell)
    if best_spell is not None:
        targets = ctx.evaluator.find_spell_targets(best_spell.spell, ctx.enemies)
        return _cast(best_spell, targets, f"Cast {best_spell.spell} at {_names(targets)}")

    if ctx.evaluator.should_dodge(ctx.monster, ctx.enemies):
        return _maneuver(ActionKind.DODGE, "Take the Dodge action", fallback=True)

    return _maneuver(ActionKind.DASH, "Take the Dash action to close distance", fallback=True)


def defensive_strategy(ctx: StrategyContext) -> ChosenAction:
    """Survive first; fight from range when not threatened."""
    if ctx.evaluator.is_in_danger(ctx.monster, ctx.enemies):
        shield = ctx.catalog.highest_level_spell(is_defensive_spell)
        if shield is not None:
            return _cast(shield, [ctx.monster], f"Cast {shield.spell} defensively")

        # Surrounded
        if len(ctx.evaluator.adjacent_enemies(ctx.monster, ctx.enemies)) > 1:
            return _maneuver(ActionKind.DISENGAGE, "Take the Disengage action to retreat")

        return _maneuver(ActionKind.DODGE, "Take the Dodge action for protection", fallback=True)

    ranged = ctx.catalog.ranged_attacks()
    if ranged and ctx.enemies:
        attack = ranged[0]
        target = ctx.evaluator.find_best_target(ctx.enemies)
        return _use_action(attack, target, f"Attack {target.display_name} from a distance with {attack.name}")

    return aggressive_strategy(ctx)


def support_strategy(ctx: StrategyContext) -> ChosenAction:
    """Heal, then buff, then debuff; defend when there is nothing to support."""
    wounded = sorted(
        (a for a in ctx.allies if a.hp_percent < 50),
        key=lambda a: a.hp_percent,
    )
    if wounded:
        heal = ctx.catalog.highest_level_spell(is_healing_spell)
        if heal is not None:
            target = wounded[0]
            return _cast(heal, [target], f"Cast {heal.spell} to heal {target.display_name}")

    if ctx.allies:
        buff = ctx.catalog.highest_level_spell(is_buff_spell)
        if buff is not None:
            target = ctx.evaluator.find_best_buff_target(ctx.allies)
            return _cast(buff, [target], f"Cast {buff.spell} to buff {target.display_name}")

    if ctx.enemies:
        debuff = ctx.catalog.highest_level_spell(is_debuff_spell)
        if debuff is not None:
            target = ctx.evaluator.find_most_threatening(ctx.enemies)
            return _cast(debuff, [target], f"Cast {debuff.spell} to debuff {target.display_name}")

    return defensive_strategy(ctx)


def balanced_strategy(ctx: StrategyContext) -> ChosenAction:
    """
    Aggressive when healthy (>70% HP), defensive when hurt (<30% HP).
    In between, one draw: 50% aggressive, 30% defensive, 20% support.
    """
    hp_percent = ctx.monster.hp_percent
    if hp_percent < 30:
        return defensive_strategy(ctx)
    if hp_percent > 70:
        return aggressive_strategy(ctx)

    roll = ctx.rng.random() * 100
    if roll < 50:
        return aggressive_strategy(ctx)
    if roll < 80:
        return defensive_strategy(ctx)
    return support_strategy(ctx)


def cowardly_strategy(ctx: StrategyContext) -> ChosenAction:
    """Flee when threatened; otherwise attack from safety or hide."""
    if ctx.evaluator.is_in_danger(ctx.monster, ctx.enemies):
        escapes = ctx.catalog.spells(is_escape_spell)
        if escapes:
            spell = escapes[0]
            return _cast(spell, [ctx.monster], f"Cast {spell.spell} to escape")

        return _maneuver(ActionKind.DISENGAGE, "Take the Disengage action to flee")

    ranged = ctx.catalog.ranged_attacks()
    if ranged and ctx.enemies:
        attack = ranged[0]
        target = ctx.evaluator.find_best_target(ctx.enemies)
        return _use_action(attack, target, f"Attack {target.display_name} from a safe distance with {attack.name}")

    if ctx.environment.has_cover:
        return _maneuver(ActionKind.HIDE, "Take the Hide action behind cover", fallback=True)

    return _maneuver(ActionKind.DODGE, "Take the Dodge action defensively", fallback=True)


def berserk_strategy(ctx: StrategyContext) -> ChosenAction:
    """Charge the nearest enemy with the heaviest melee action."""
    if not ctx.enemies:
        return _nothing("No enemies to attack")

    closest = ctx.evaluator.find_closest_enemy(ctx.monster, ctx.enemies)

    melee = [c for c in ctx.catalog.offensive_actions() if c.is_melee]
    best = _highest_damage(melee)
    if best is not None:
        return _use_action(best, closest, f"Furiously attack {closest.display_name} with {best.name}")

    return _maneuver(
        ActionKind.DASH,
        f"Dash toward {closest.display_name} in a rage",
        target=closest,
        fallback=True,
    )


def protective_strategy(ctx: StrategyContext) -> ChosenAction:
    """Guard the most vulnerable ally."""
    if not ctx.allies:
        return balanced_strategy(ctx)

    ward = next((a for a in ctx.allies if a.hp_percent < 30), ctx.allies[0])

    threatening = [e for e in ctx.enemies if ctx.evaluator.is_targeting(e, ward)]
    if threatening:
        attacks = ctx.catalog.attacks()
        enemy = threatening[0]
        if attacks:
            attack = attacks[0]
            return _use_action(attack, enemy, f"Attack {enemy.display_name} to protect {ward.display_name}")

        return _maneuver(ActionKind.PROTECT, f"Move to protect {ward.display_name}", target=ward)

    protective = ctx.catalog.spells(is_protective_spell)
    if protective:
        spell = protective[0]
        return _cast(spell, [ward], f"Cast {spell.spell} to protect {ward.display_name}")

    return _maneuver(ActionKind.DODGE, "Take the Dodge action while protecting allies", fallback=True)


def tactical_strategy(ctx: StrategyContext) -> ChosenAction:
    """Control clusters, take good ground, then strike the softest target."""
    if not ctx.enemies:
        return _nothing("No enemies to outmaneuver")

    controls = ctx.catalog.spells(is_control_spell)
    if controls and len(ctx.enemies) >= 2:
        groups = ctx.evaluator.find_enemy_groups(ctx.enemies)
        if groups:
            largest = max(groups, key=len)
            if len(largest) >= 2:
                spell = controls[0]
                return _cast(spell, largest, f"Cast {spell.spell} on group of {len(largest)} enemies")

    if not ctx.evaluator.has_advantageous_position(ctx.monster, ctx.enemies):
        return _maneuver(ActionKind.POSITION, "Move to a tactically advantageous position")

    attacks = ctx.catalog.attacks()
    if attacks:
        target = ctx.evaluator.find_most_vulnerable(ctx.enemies)
        effective = [a for a in attacks if ctx.evaluator.is_attack_effective(a, target)]
        # The last effective attack in stat-block order wins
        attack = effective[-1] if effective else attacks[0]
        return _use_action(attack, target, f"Tactically attack {target.display_name} with {attack.name}")

    return balanced_strategy(ctx)


STRATEGIES: Dict[Archetype, Strategy] = {
    Archetype.AGGRESSIVE: aggressive_strategy,
    Archetype.DEFENSIVE: defensive_strategy,
    Archetype.SUPPORT: support_strategy,
    Archetype.BALANCED: balanced_strategy,
    Archetype.COWARDLY: cowardly_strategy,
    Archetype.BERSERK: berserk_strategy,
    Archetype.PROTECTIVE: protective_strategy,
    Archetype.TACTICAL: tactical_strategy,
}


def get_strategy(archetype: Archetype) -> Strategy:
    """Decision function for an archetype."""
    return STRATEGIES[archetype]
