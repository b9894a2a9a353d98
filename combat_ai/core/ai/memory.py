"""
Combat AI Memory Store.

Keeps one record per combatant an engine has observed:
- Last known HP and max HP (the only signal for new damage/healing)
- Cumulative damage dealt and healing received
- A bounded window of recent actions
- The conditions seen on the last observation

Records are created lazily and live for the encounter.
"""
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterable, Iterator, List, Optional, Tuple

from combat_ai.models.combatant import Combatant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionRecord:
    """One remembered action taken by a combatant."""
    kind: str  # "attack", "spell", "saving_throw", ...
    target_id: Optional[str] = None
    attack_type: Optional[str] = None  # "melee", "ranged"
    ability: Optional[str] = None      # saving throw ability
    success: Optional[bool] = None     # saving throw outcome
    round: Optional[int] = None


@dataclass
class MemoryRecord:
    """What an engine remembers about one combatant."""
    first_seen_at: float
    last_known_hp: Optional[int] = None
    last_known_max_hp: Optional[int] = None
    cumulative_damage_dealt: int = 0
    cumulative_healing_received: int = 0
    recent_actions: Deque[ActionRecord] = field(default_factory=deque)
    recent_conditions: List[str] = field(default_factory=list)

    def observe(self, hp: int, max_hp: int, conditions: Iterable[str]) -> Tuple[int, int]:
        """
        Compare a fresh observation against the last known HP.

        Any decrease counts toward cumulative_damage_dealt and any increase
        toward cumulative_healing_received, both on this same record.

        Returns:
            Tuple of (damage, healing) attributed this observation
        """
        damage = healing = 0
        if self.last_known_hp is not None:
            if hp < self.last_known_hp:
                damage = self.last_known_hp - hp
                self.cumulative_damage_dealt += damage
            elif hp > self.last_known_hp:
                healing = hp - self.last_known_hp
                self.cumulative_healing_received += healing

        self.last_known_hp = hp
        self.last_known_max_hp = max_hp
        self.recent_conditions = list(conditions)
        return damage, healing

    def recent(self, count: int) -> List[ActionRecord]:
        """The last `count` remembered actions, oldest first."""
        if count <= 0:
            return []
        return list(self.recent_actions)[-count:]


class MemoryStore:
    """
    Per-engine memory of every observed combatant.

    Owned exclusively by one engine instance; two engines watching the
    same encounter keep independent stores.
    """

    def __init__(self, history_window: int = 10):
        self.history_window = history_window
        self._records: Dict[str, MemoryRecord] = {}

    def __contains__(self, combatant_id: str) -> bool:
        return combatant_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def get(self, combatant_id: str) -> Optional[MemoryRecord]:
        return self._records.get(combatant_id)

    def _new_record(self) -> MemoryRecord:
        return MemoryRecord(
            first_seen_at=time.time(),
            recent_actions=deque(maxlen=self.history_window),
        )

    def observe(self, combatants: Iterable[Combatant]) -> None:
        """Update records for every visible combatant, creating missing ones."""
        for combatant in combatants:
            record = self._records.get(combatant.id)
            if record is None:
                record = self._new_record()
                self._records[combatant.id] = record
                logger.debug(f"[Memory] First sighting of {combatant.id} at {combatant.hp}/{combatant.max_hp} HP")

            damage, healing = record.observe(combatant.hp, combatant.max_hp, combatant.conditions)
            if damage:
                logger.debug(f"[Memory] {combatant.id} lost {damage} HP (total {record.cumulative_damage_dealt})")
            if healing:
                logger.debug(f"[Memory] {combatant.id} regained {healing} HP")

    def record_action(self, actor_id: str, action: ActionRecord) -> MemoryRecord:
        """Append an action to the actor's history, creating the record if needed."""
        record = self._records.get(actor_id)
        if record is None:
            record = self._new_record()
            self._records[actor_id] = record
        record.recent_actions.append(action)
        return record

    def recent_actions(self, combatant_id: str, count: int) -> List[ActionRecord]:
        record = self._records.get(combatant_id)
        if record is None:
            return []
        return record.recent(count)

    def targeted_recently(self, actor_id: str, target_id: str, count: int) -> bool:
        """Did the actor target the given combatant within its last `count` actions."""
        return any(a.target_id == target_id for a in self.recent_actions(actor_id, count))

    def damage_dealt(self, combatant_id: str) -> int:
        record = self._records.get(combatant_id)
        return record.cumulative_damage_dealt if record else 0

    def clear(self) -> None:
        self._records.clear()
