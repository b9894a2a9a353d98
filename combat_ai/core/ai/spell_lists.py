"""
Spell classification tables used by the strategies.

Spell names are compared case-insensitively, and underscores are read
as spaces so "cure_wounds" and "Cure Wounds" match.
"""

OFFENSIVE_SPELLS = frozenset({
    "fireball", "magic missile", "lightning bolt", "cone of cold",
    "acid splash", "fire bolt", "eldritch blast", "disintegrate",
    "chain lightning", "meteor swarm", "blight", "cloudkill",
})

DEFENSIVE_SPELLS = frozenset({
    "shield", "mage armor", "blur", "mirror image", "stoneskin",
    "fire shield", "globe of invulnerability", "sanctuary",
    "greater invisibility", "invisibility",
})

HEALING_SPELLS = frozenset({
    "cure wounds", "healing word", "mass cure wounds", "heal",
    "mass healing word", "regenerate", "power word heal",
})

BUFF_SPELLS = frozenset({
    "bless", "haste", "heroism", "enhance ability", "greater invisibility",
    "stoneskin", "freedom of movement", "death ward", "holy weapon",
})

DEBUFF_SPELLS = frozenset({
    "bane", "slow", "hold person", "hold monster", "blindness/deafness",
    "bestow curse", "feeblemind", "contagion", "dominate person",
    "dominate monster",
})

CONTROL_SPELLS = frozenset({
    "web", "entangle", "grease", "hypnotic pattern", "sleet storm",
    "wall of fire", "wall of force", "forcecage", "maze",
    "black tentacles", "spike growth",
})

PROTECTIVE_SPELLS = frozenset({
    "shield of faith", "protection from evil and good", "warding bond",
    "sanctuary", "beacon of hope", "death ward", "aura of life",
    "aura of purity",
})

AREA_SPELLS = frozenset({
    "fireball", "lightning bolt", "cone of cold", "burning hands",
    "thunderwave", "shatter", "spirit guardians", "flame strike",
    "cloudkill", "meteor swarm", "sunburst", "earthquake",
})

# Self-targeted escapes (invisibility and teleport effects)
ESCAPE_SPELLS = frozenset({
    "invisibility", "misty step", "dimension door", "teleport",
})


def normalize_spell_name(name: str) -> str:
    return " ".join(name.replace("_", " ").lower().split())


def is_offensive_spell(name: str) -> bool:
    return normalize_spell_name(name) in OFFENSIVE_SPELLS


def is_defensive_spell(name: str) -> bool:
    return normalize_spell_name(name) in DEFENSIVE_SPELLS


def is_healing_spell(name: str) -> bool:
    return normalize_spell_name(name) in HEALING_SPELLS


def is_buff_spell(name: str) -> bool:
    return normalize_spell_name(name) in BUFF_SPELLS


def is_debuff_spell(name: str) -> bool:
    return normalize_spell_name(name) in DEBUFF_SPELLS


def is_control_spell(name: str) -> bool:
    return normalize_spell_name(name) in CONTROL_SPELLS


def is_protective_spell(name: str) -> bool:
    return normalize_spell_name(name) in PROTECTIVE_SPELLS


def is_area_spell(name: str) -> bool:
    return normalize_spell_name(name) in AREA_SPELLS


def is_escape_spell(name: str) -> bool:
    return normalize_spell_name(name) in ESCAPE_SPELLS
