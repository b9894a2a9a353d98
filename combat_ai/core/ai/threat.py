"""
Combat AI Threat Assessment.

Derives a threat score per enemy each cycle from remembered damage,
current HP and conditions, and spellcasting. Scores are never negative
and are recomputed from scratch every cycle.
"""
import logging
from typing import Dict, Iterable, Optional

from combat_ai.models.combatant import Combatant
from .memory import MemoryRecord, MemoryStore

logger = logging.getLogger(__name__)

# Conditions that severely reduce how dangerous an enemy is
DEBILITATING_CONDITIONS = frozenset({"paralyzed", "stunned", "unconscious", "incapacitated"})


def compute_threat_score(enemy: Combatant, record: Optional[MemoryRecord]) -> float:
    """
    Score how dangerous an enemy currently is.

    base = 2 x remembered damage; x0.5 below 25% HP; x0.25 more when
    debilitated; x1.5 for spellcasters. An enemy with no record scores 0.
    """
    if record is None:
        return 0.0

    score = record.cumulative_damage_dealt * 2.0

    # Wounded enemies are less threatening
    if enemy.hp_percent < 25:
        score *= 0.5

    if any(c in DEBILITATING_CONDITIONS for c in enemy.conditions):
        score *= 0.25

    # Spellcasters are more threatening
    if enemy.has_spells:
        score *= 1.5

    return max(0.0, score)


class ThreatAssessor:
    """Per-cycle threat cache owned by one engine."""

    def __init__(self):
        self._scores: Dict[str, float] = {}

    def assess(self, enemies: Iterable[Combatant], memory: MemoryStore) -> Dict[str, float]:
        """Recompute threat for the given enemies, replacing the previous cycle."""
        self._scores = {
            enemy.id: compute_threat_score(enemy, memory.get(enemy.id))
            for enemy in enemies
        }
        if self._scores:
            logger.debug(f"[Threat] {self._scores}")
        return dict(self._scores)

    def score(self, combatant_id: str) -> float:
        return self._scores.get(combatant_id, 0.0)

    @property
    def scores(self) -> Dict[str, float]:
        return dict(self._scores)

    def clear(self) -> None:
        self._scores = {}
