"""
Combatant Snapshot Models.

Read-only view of the encounter handed to the engine each cycle:
- Combatants with hit points, armor class, ability scores and conditions
- Stat-block actions with recharge state and legendary actions
- Spell resources (known spells per level, remaining slots)
- Optional grid position, elevation and speed profile
- Environment features that grant cover, and hazards

Models accept both snake_case and the host's camelCase keys.
"""
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from combat_ai.core.errors import SnapshotValidationError


# Conditions that leave a creature unable to take actions
INCAPACITATING_CONDITIONS = frozenset({
    "incapacitated", "paralyzed", "petrified", "stunned", "unconscious",
})

_LEVEL_KEY = re.compile(r'^(?:level)?\s*(\d)$', re.IGNORECASE)


class AbilityScores(BaseModel):
    """The six ability scores. Missing scores default to 10."""
    strength: int = Field(10, alias="str")
    dexterity: int = Field(10, alias="dex")
    constitution: int = Field(10, alias="con")
    intelligence: int = Field(10, alias="int")
    wisdom: int = Field(10, alias="wis")
    charisma: int = Field(10, alias="cha")

    class Config:
        populate_by_name = True
        frozen = True

    @model_validator(mode="before")
    @classmethod
    def _drop_missing(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return {k: v for k, v in data.items() if v is not None}
        return data


class SavingThrow(BaseModel):
    """Saving throw an action forces on its target."""
    ability: str
    dc: Optional[int] = None

    class Config:
        frozen = True


class AttackProfile(BaseModel):
    """Attack portion of a stat-block action."""
    type: str = "melee"  # "melee", "ranged", "breath", ...
    damage: Optional[str] = None
    additional_damage: Optional[str] = Field(None, alias="additionalDamage")
    damage_type: Optional[str] = Field(None, alias="damageType")
    to_hit: Optional[int] = Field(None, alias="toHit")
    saving_throw: Optional[SavingThrow] = Field(None, alias="savingThrow")

    class Config:
        populate_by_name = True
        frozen = True

    @property
    def is_melee(self) -> bool:
        return self.type.lower() == "melee"

    @property
    def is_ranged(self) -> bool:
        return self.type.lower() == "ranged"


class ActionUsage(BaseModel):
    """Usage limit of an action, e.g. {"type": "recharge", "value": "5-6"}."""
    type: str
    value: Optional[str] = None

    class Config:
        frozen = True


class StatBlockAction(BaseModel):
    """An action listed on a stat block (also used for legendary actions)."""
    name: str
    description: str = ""
    attack: Optional[AttackProfile] = None
    usage: Optional[ActionUsage] = None
    recharged: bool = True
    cost: int = 1

    class Config:
        frozen = True

    @property
    def is_available(self) -> bool:
        """Recharge actions can only be used once recharged."""
        if self.usage and self.usage.type.lower() == "recharge" and not self.recharged:
            return False
        return True


class Spellcasting(BaseModel):
    """Spell resources: known spells per level and remaining slots."""
    cantrips: List[str] = []
    spells: Dict[int, List[str]] = {}  # {1: ["cure wounds"], 3: ["fireball"]}
    slots: Dict[int, int] = {}         # {1: 2, 3: 1} remaining slots per level

    class Config:
        frozen = True

    @model_validator(mode="before")
    @classmethod
    def _normalize_levels(cls, data: Any) -> Any:
        """Accept {"spells": {"cantrips": [...], "level1": [...]}, "slots": {"level1": 2}}."""
        if not isinstance(data, Mapping):
            return data

        cantrips = list(data.get("cantrips") or [])
        spells: Dict[int, List[str]] = {}
        for key, names in (data.get("spells") or {}).items():
            if str(key).lower() == "cantrips":
                cantrips.extend(names or [])
                continue
            level = _parse_level_key(key)
            if level is not None:
                spells.setdefault(level, []).extend(names or [])

        slots: Dict[int, int] = {}
        for key, count in (data.get("slots") or {}).items():
            level = _parse_level_key(key)
            if level is not None:
                slots[level] = count

        return {"cantrips": cantrips, "spells": spells, "slots": slots}

    def spells_at(self, level: int) -> List[str]:
        """Known spells of a given level (0 for cantrips)."""
        if level == 0:
            return list(self.cantrips)
        return list(self.spells.get(level, []))

    def remaining_slots(self, level: int) -> int:
        """Remaining slots for a level. Cantrips never use slots."""
        return max(0, self.slots.get(level, 0))

    @property
    def has_spells(self) -> bool:
        return bool(self.cantrips) or any(self.spells.values())


def _parse_level_key(key: Any) -> Optional[int]:
    if isinstance(key, int):
        return key if 1 <= key <= 9 else None
    match = _LEVEL_KEY.match(str(key).strip())
    if not match:
        return None
    level = int(match.group(1))
    return level if 1 <= level <= 9 else None


class Position(BaseModel):
    """Grid position in squares, elevation in feet."""
    x: float = 0
    y: float = 0
    elevation: float = 0

    class Config:
        frozen = True


class SpeedProfile(BaseModel):
    """Movement speeds in feet."""
    walk: int = 30
    fly: int = 0
    swim: int = 0
    climb: int = 0
    burrow: int = 0

    class Config:
        frozen = True

    @model_validator(mode="before")
    @classmethod
    def _from_number(cls, data: Any) -> Any:
        if isinstance(data, (int, float)):
            return {"walk": int(data)}
        return data


class Trait(BaseModel):
    """Named stat-block trait, e.g. Regeneration."""
    name: str
    description: str = ""

    class Config:
        frozen = True


class Combatant(BaseModel):
    """
    One encounter participant as seen by the engine.

    Owned by the host application; the engine never mutates it.
    """
    id: str
    name: str = ""
    hp: int = 0
    max_hp: int = Field(0, alias="maxHp")
    ac: int = 10
    type: str = "monster"
    faction: Optional[str] = None
    role: Optional[str] = None
    behavior: Optional[str] = None
    abilities: AbilityScores = Field(default_factory=AbilityScores)
    conditions: List[str] = []
    actions: List[StatBlockAction] = []
    legendary_actions: List[StatBlockAction] = Field(default_factory=list, alias="legendaryActions")
    spellcasting: Optional[Spellcasting] = None
    position: Optional[Position] = None
    speed: SpeedProfile = Field(default_factory=SpeedProfile)
    has_cover: bool = Field(False, alias="hasCover")
    is_current_turn: bool = Field(False, alias="isActive")
    damage_vulnerabilities: List[str] = Field(default_factory=list, alias="damageVulnerabilities")
    damage_resistances: List[str] = Field(default_factory=list, alias="damageResistances")
    damage_immunities: List[str] = Field(default_factory=list, alias="damageImmunities")
    condition_immunities: List[str] = Field(default_factory=list, alias="conditionImmunities")
    traits: List[Trait] = []

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("conditions", mode="before")
    @classmethod
    def _condition_ids(cls, value: Any) -> List[str]:
        """Conditions arrive as ids or as {"id": ..., "name": ...} records."""
        if not value:
            return []
        ids = []
        for condition in value:
            if isinstance(condition, Mapping):
                condition = condition.get("id") or condition.get("name") or ""
            condition = str(condition).strip().lower()
            if condition:
                ids.append(condition)
        return ids

    @field_validator("name", mode="before")
    @classmethod
    def _default_name(cls, value: Any) -> str:
        return value if value is not None else ""

    @field_validator("hp", "max_hp", mode="before")
    @classmethod
    def _missing_hp(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("ac", mode="before")
    @classmethod
    def _missing_ac(cls, value: Any) -> Any:
        return 10 if value is None else value

    @field_validator("abilities", "speed", mode="before")
    @classmethod
    def _missing_block(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator(
        "actions", "legendary_actions", "traits", "damage_vulnerabilities",
        "damage_resistances", "damage_immunities", "condition_immunities",
        mode="before",
    )
    @classmethod
    def _missing_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def hp_percent(self) -> float:
        """Current HP as a percentage of max. Unknown max HP reads as healthy."""
        if self.max_hp <= 0:
            return 100.0
        return (self.hp / self.max_hp) * 100

    @property
    def intelligence(self) -> int:
        return self.abilities.intelligence

    @property
    def has_spells(self) -> bool:
        return self.spellcasting is not None and self.spellcasting.has_spells

    @property
    def is_incapacitated(self) -> bool:
        return any(c in INCAPACITATING_CONDITIONS for c in self.conditions)

    @property
    def is_defeated(self) -> bool:
        return self.max_hp > 0 and self.hp <= 0

    @property
    def display_name(self) -> str:
        return self.name or self.id

    def has_condition(self, *conditions: str) -> bool:
        return any(c in self.conditions for c in conditions)


class EnvironmentFeature(BaseModel):
    """A terrain feature, e.g. a pillar or a low wall."""
    name: str = ""
    provide_cover: bool = Field(False, alias="provideCover")

    class Config:
        populate_by_name = True
        frozen = True


class Hazard(BaseModel):
    """An environmental hazard, e.g. a lava vent."""
    name: str = ""
    description: str = ""

    class Config:
        frozen = True


class Environment(BaseModel):
    """Optional description of the battlefield."""
    features: List[EnvironmentFeature] = []
    hazards: List[Hazard] = []

    class Config:
        frozen = True

    @property
    def has_cover(self) -> bool:
        return any(f.provide_cover for f in self.features)


SnapshotItem = Union[Combatant, Mapping[str, Any]]


def load_snapshot(items: Iterable[SnapshotItem]) -> List[Combatant]:
    """
    Convert the host's combatant list into snapshot models.

    Args:
        items: Combatant models or dicts in the host's format

    Returns:
        List of Combatant

    Raises:
        SnapshotValidationError: If an entry cannot be read
    """
    combatants = []
    for index, item in enumerate(items or []):
        combatants.append(load_combatant(item, index=index))
    return combatants


def load_combatant(item: SnapshotItem, index: Optional[int] = None) -> Combatant:
    """Convert one combatant; see load_snapshot."""
    if isinstance(item, Combatant):
        return item
    try:
        return Combatant.model_validate(item)
    except ValidationError as e:
        raise SnapshotValidationError(
            message=f"Invalid combatant at index {index}" if index is not None else "Invalid combatant",
            details={"index": index, "errors": e.errors(include_url=False)},
        ) from e


def load_environment(value: Union[Environment, Mapping[str, Any], None]) -> Environment:
    """Convert the optional environment descriptor. None means open ground."""
    if value is None:
        return Environment()
    if isinstance(value, Environment):
        return value
    try:
        return Environment.model_validate(value)
    except ValidationError as e:
        raise SnapshotValidationError(
            message="Invalid environment descriptor",
            details={"errors": e.errors(include_url=False)},
        ) from e
