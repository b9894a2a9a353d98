"""
Combat Narration.

Turns engine decisions into short flavor text. The engine only calls a
narrator when one is supplied; hosts may pass any object implementing
NarrativeGenerator.
"""
import random
from typing import Dict, List, Optional, Protocol, Sequence

from combat_ai.models.combatant import Combatant, StatBlockAction
from .behaviors import ActionKind, ChosenAction


class NarrativeGenerator(Protocol):
    """Anything that can describe a decision."""

    def narrate(self, actor: Combatant, decision: ChosenAction, snapshot: Sequence[Combatant]) -> str:
        ...


_MANEUVER_TEXT = {
    ActionKind.DODGE: "{actor} takes a defensive stance, ready to dodge incoming attacks.",
    ActionKind.DASH: "{actor} dashes across the battlefield with urgency.",
    ActionKind.DISENGAGE: "{actor} carefully disengages from combat, avoiding opportunity attacks.",
    ActionKind.HIDE: "{actor} slips out of sight, seeking concealment.",
    ActionKind.POSITION: "{actor} shifts to a better position on the battlefield.",
    ActionKind.NONE: "{actor} hesitates.",
}

_SPELL_TEXT = {
    "fireball": "{actor} launches a fireball that explodes in a fiery burst!",
    "magic missile": "{actor} conjures glowing darts of force that unerringly strike {target}.",
    "cure wounds": "{actor} channels healing energy into {target}, mending their wounds.",
    "shield": "{actor} raises a shimmering magical shield.",
    "misty step": "{actor} vanishes in a puff of silvery mist.",
}

_DEATH_TEXT: Dict[str, List[str]] = {
    "undead": [
        "{name} collapses into a pile of dust and bone.",
        "{name} crumbles away, its unnatural animation finally ceasing.",
    ],
    "construct": [
        "{name} shudders and falls still, its magical animation fading.",
        "{name} breaks apart, pieces scattering across the ground.",
    ],
    "elemental": [
        "{name} dissipates, returning to its native plane.",
        "{name} loses cohesion and dissolves into its base elements.",
    ],
    "player": [
        "{name} collapses to the ground, grievously wounded and unconscious.",
        "{name} falls unconscious, hovering at death's door.",
    ],
}
_DEFAULT_DEATH_TEXT = [
    "{name} falls to the ground, defeated.",
    "{name} collapses from its wounds.",
    "{name} breathes its last and lies still.",
]

_CRITICAL_TEXT: Dict[str, List[str]] = {
    "slashing": [
        "{attacker}'s {attack} slices deep into {target}!",
        "{target} reels as {attacker}'s {attack} leaves a grievous wound!",
    ],
    "piercing": [
        "{attacker}'s {attack} finds a gap and pierces straight through {target}'s defenses!",
        "{target} gasps as {attacker}'s {attack} strikes a vital area!",
    ],
    "bludgeoning": [
        "{attacker}'s {attack} connects with bone-crushing force, staggering {target}!",
        "{target} is sent reeling by the impact of {attacker}'s {attack}!",
    ],
    "fire": [
        "{attacker}'s {attack} erupts with intense heat, searing {target}!",
        "{target} is engulfed in the flames of {attacker}'s {attack}!",
    ],
    "cold": [
        "{attacker}'s {attack} chills {target} to the bone!",
    ],
    "lightning": [
        "{attacker}'s {attack} arcs with blinding electricity, shocking {target}!",
    ],
    "necrotic": [
        "{attacker}'s {attack} drains the life from {target}, withering their flesh!",
    ],
    "radiant": [
        "{attacker}'s {attack} blazes with holy light, searing {target} from within!",
    ],
}
_DEFAULT_CRITICAL_TEXT = [
    "{attacker} lands a devastating critical hit on {target} with {attack}!",
    "{attacker}'s {attack} finds a vital spot, dealing a critical blow to {target}!",
]

_FUMBLE_TEXT = [
    "{attacker} fumbles with {attack}, completely missing the mark.",
    "{attacker}'s grip slips, sending {attack} off in the wrong direction.",
    "{attacker} loses balance while attempting to use {attack}.",
    "{attacker} misjudges the distance, and {attack} falls short.",
    "{attacker}'s {attack} catches on their own equipment, foiling the attack.",
]

# condition -> (with source, without source)
_CONDITION_TEXT = {
    "blinded": ("{target} is blinded by {source}!", "{target} is blinded, their vision obscured!"),
    "charmed": ("{target} is charmed by {source}.", "{target} is charmed, hostility replaced with affection."),
    "frightened": ("{target} is frightened by {source}!", "{target} is overcome with fear!"),
    "grappled": ("{target} is grappled by {source}!", "{target} is grappled, their movement restricted!"),
    "paralyzed": ("{target} is paralyzed by {source}!", "{target} is paralyzed, frozen in place!"),
    "poisoned": ("{target} is poisoned by {source}!", "{target} is poisoned, sickness overtaking them!"),
    "prone": ("{target} is knocked prone by {source}!", "{target} falls prone!"),
    "restrained": ("{target} is restrained by {source}!", "{target} is restrained, movement severely limited!"),
    "stunned": ("{target} is stunned by {source}!", "{target} is stunned, unable to think clearly!"),
    "unconscious": ("{target} is knocked unconscious by {source}!", "{target} falls unconscious!"),
}


class DefaultNarrator:
    """Built-in narrator with a small phrase table per situation."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def _pick(self, options: Sequence[str]) -> str:
        return options[self.rng.randrange(len(options))]

    def narrate(self, actor: Combatant, decision: ChosenAction, snapshot: Sequence[Combatant]) -> str:
        """Describe a decision before it is resolved."""
        names = {c.id: c.display_name for c in snapshot}
        names.setdefault(actor.id, actor.display_name)
        targets = [names.get(t, t) for t in decision.target_ids]
        target = ", ".join(targets)
        name = actor.display_name

        if decision.kind == ActionKind.ATTACK:
            return f"{name} attacks {target} with {decision.action_name}."

        if decision.kind == ActionKind.LEGENDARY:
            return f"{name} uses a legendary action: {decision.action_name}."

        if decision.kind == ActionKind.SPELL:
            spell = (decision.spell or "").lower()
            template = _SPELL_TEXT.get(spell)
            if template:
                return template.format(actor=name, target=target or "its foe")
            if target:
                return f"{name} casts {decision.spell} on {target}."
            return f"{name} casts {decision.spell}."

        if decision.kind == ActionKind.PROTECT:
            return f"{name} moves to shield {target} from harm."

        if decision.kind == ActionKind.DASH and target:
            return f"{name} charges toward {target}!"

        return _MANEUVER_TEXT.get(decision.kind, "{actor} takes action in the battle.").format(actor=name)

    def describe_death(
        self,
        creature: Optional[Combatant],
        killer: Optional[Combatant] = None,
        action_name: Optional[str] = None,
    ) -> str:
        if creature is None:
            return "A combatant falls in battle."

        templates = _DEATH_TEXT.get((creature.type or "").lower(), _DEFAULT_DEATH_TEXT)
        text = self._pick(templates).format(name=creature.display_name)

        if killer is not None and action_name:
            text += f" {killer.display_name}'s {action_name} proved to be the fatal blow."
        elif killer is not None:
            text += f" {killer.display_name} stands victorious over the fallen foe."
        return text

    def describe_critical_hit(
        self,
        attacker: Optional[Combatant],
        target: Optional[Combatant],
        action: Optional[StatBlockAction],
    ) -> str:
        if attacker is None or target is None or action is None:
            return "A devastating critical hit lands!"

        damage_type = ""
        if action.attack is not None and action.attack.damage_type:
            damage_type = action.attack.damage_type.lower()

        templates = _CRITICAL_TEXT.get(damage_type, _DEFAULT_CRITICAL_TEXT)
        return self._pick(templates).format(
            attacker=attacker.display_name,
            target=target.display_name,
            attack=action.name,
        )

    def describe_critical_failure(self, attacker: Optional[Combatant], action_name: Optional[str]) -> str:
        if attacker is None or not action_name:
            return "A catastrophic failure occurs!"
        return self._pick(_FUMBLE_TEXT).format(attacker=attacker.display_name, attack=action_name)

    def describe_condition(
        self,
        target: Optional[Combatant],
        condition: Optional[str],
        source: Optional[Combatant] = None,
    ) -> str:
        if target is None or not condition:
            return "A condition takes effect."

        with_source, without_source = _CONDITION_TEXT.get(
            condition.lower(),
            ("{target} is affected by {condition} from {source}!", "{target} is affected by {condition}!"),
        )
        if source is not None:
            return with_source.format(target=target.display_name, source=source.display_name, condition=condition)
        return without_source.format(target=target.display_name, condition=condition)
