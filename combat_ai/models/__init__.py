"""Read-only combatant snapshot models supplied by the host application."""
from .combatant import (
    AbilityScores,
    ActionUsage,
    AttackProfile,
    Combatant,
    Environment,
    EnvironmentFeature,
    Hazard,
    Position,
    SavingThrow,
    SpeedProfile,
    Spellcasting,
    StatBlockAction,
    Trait,
    load_snapshot,
)

__all__ = [
    "AbilityScores",
    "ActionUsage",
    "AttackProfile",
    "Combatant",
    "Environment",
    "EnvironmentFeature",
    "Hazard",
    "Position",
    "SavingThrow",
    "SpeedProfile",
    "Spellcasting",
    "StatBlockAction",
    "Trait",
    "load_snapshot",
]
