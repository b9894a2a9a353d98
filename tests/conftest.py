"""
Combat AI Engine - Test Configuration and Fixtures
Shared test utilities and fixtures for pytest.
"""
import pytest
import random
from typing import Dict, Any, Iterable, Optional
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from combat_ai.config import Settings
from combat_ai.core.ai.catalog import build_action_catalog
from combat_ai.core.ai.memory import MemoryStore
from combat_ai.core.ai.strategies import StrategyContext
from combat_ai.core.ai.targeting import TargetEvaluator
from combat_ai.core.ai.threat import ThreatAssessor
from combat_ai.models.combatant import Combatant, Environment


# ==================== Settings Fixtures ====================

@pytest.fixture
def settings(monkeypatch) -> Settings:
    """Settings built from defaults, ignoring the developer's environment."""
    for name in list(os.environ):
        if name.startswith("COMBAT_AI_"):
            monkeypatch.delenv(name, raising=False)
    return Settings()


# ==================== Player Fixtures ====================

@pytest.fixture
def sample_fighter() -> Dict[str, Any]:
    """Create a sample player fighter."""
    return {
        "id": "player-1",
        "name": "Thorin Ironforge",
        "type": "player",
        "hp": 45,
        "maxHp": 45,
        "ac": 18,
        "abilities": {"str": 16, "dex": 12, "con": 14, "int": 10, "wis": 13, "cha": 11},
        "actions": [
            {
                "name": "Battleaxe",
                "attack": {"type": "melee", "damage": "1d8+3", "damageType": "slashing", "toHit": 6},
            }
        ],
        "conditions": [],
    }


@pytest.fixture
def sample_wizard() -> Dict[str, Any]:
    """Create a sample player wizard with spells."""
    return {
        "id": "player-2",
        "name": "Elara Moonwhisper",
        "type": "player",
        "hp": 20,
        "maxHp": 30,
        "ac": 12,
        "abilities": {"str": 8, "dex": 14, "con": 12, "int": 18, "wis": 12, "cha": 10},
        "spellcasting": {
            "spells": {"cantrips": ["fire bolt"], "level1": ["magic missile", "shield"]},
            "slots": {"level1": 2},
        },
        "conditions": [],
    }


# ==================== Monster Fixtures ====================

@pytest.fixture
def sample_goblin() -> Dict[str, Any]:
    """Create a sample goblin with a melee and a ranged attack."""
    return {
        "id": "goblin-1",
        "name": "Goblin",
        "type": "monster",
        "hp": 7,
        "maxHp": 7,
        "ac": 15,
        "abilities": {"str": 8, "dex": 14, "con": 10, "int": 10, "wis": 8, "cha": 8},
        "actions": [
            {
                "name": "Scimitar",
                "attack": {"type": "melee", "damage": "1d6+2", "damageType": "slashing", "toHit": 4},
            },
            {
                "name": "Shortbow",
                "attack": {"type": "ranged", "damage": "1d6+2", "damageType": "piercing", "toHit": 4},
            },
        ],
        "conditions": [],
    }


@pytest.fixture
def sample_ogre() -> Dict[str, Any]:
    """Create a sample ogre: strong, dim, melee only."""
    return {
        "id": "ogre-1",
        "name": "Ogre",
        "type": "monster",
        "hp": 59,
        "maxHp": 59,
        "ac": 11,
        "abilities": {"str": 19, "dex": 8, "con": 16, "int": 5, "wis": 7, "cha": 7},
        "actions": [
            {
                "name": "Greatclub",
                "attack": {"type": "melee", "damage": "2d8+4", "damageType": "bludgeoning", "toHit": 6},
            },
            {
                "name": "Javelin",
                "attack": {"type": "ranged", "damage": "2d6+4", "damageType": "piercing", "toHit": 6},
            },
        ],
        "conditions": [],
    }


@pytest.fixture
def sample_priest() -> Dict[str, Any]:
    """Create a sample cultist priest with healing and buff spells."""
    return {
        "id": "priest-1",
        "name": "Cult Fanatic",
        "type": "monster",
        "hp": 33,
        "maxHp": 33,
        "ac": 13,
        "abilities": {"str": 11, "dex": 14, "con": 12, "int": 10, "wis": 13, "cha": 14},
        "actions": [
            {"name": "Dagger", "attack": {"type": "melee", "damage": "1d4+2", "damageType": "piercing"}},
        ],
        "spellcasting": {
            "cantrips": ["sacred flame"],
            "spells": {"1": ["cure wounds", "shield of faith"], "2": ["hold person"]},
            "slots": {"1": 4, "2": 2},
        },
        "conditions": [],
    }


@pytest.fixture
def sample_dragon() -> Dict[str, Any]:
    """Create a sample young dragon with legendary actions."""
    return {
        "id": "dragon-1",
        "name": "Young Red Dragon",
        "type": "dragon",
        "hp": 178,
        "maxHp": 178,
        "ac": 18,
        "abilities": {"str": 23, "dex": 10, "con": 21, "int": 14, "wis": 11, "cha": 19},
        "speed": {"walk": 40, "climb": 40, "fly": 80},
        "actions": [
            {"name": "Bite", "attack": {"type": "melee", "damage": "2d10+6", "additionalDamage": "1d6", "damageType": "piercing"}},
            {
                "name": "Fire Breath",
                "description": "Exhales fire in a 30-foot cone area.",
                "attack": {"type": "breath", "damage": "16d6", "damageType": "fire"},
                "usage": {"type": "recharge", "value": "5-6"},
                "recharged": False,
            },
        ],
        "legendaryActions": [
            {"name": "Tail Attack", "attack": {"type": "melee", "damage": "2d8+6"}},
            {"name": "Crushing Sweep", "cost": 2, "attack": {"type": "melee", "damage": "4d8+6"}},
        ],
        "damageImmunities": ["fire"],
        "conditions": [],
    }


# ==================== Helpers ====================

def make_combatant(**fields) -> Combatant:
    """Build a Combatant with sensible defaults."""
    data = {"id": "c-1", "name": "Creature", "hp": 10, "maxHp": 10, "ac": 12}
    data.update(fields)
    return Combatant.model_validate(data)


def make_context(
    monster: Combatant,
    enemies: Iterable[Combatant] = (),
    allies: Iterable[Combatant] = (),
    environment: Optional[Environment] = None,
    memory: Optional[MemoryStore] = None,
    rng=None,
) -> StrategyContext:
    """Build a strategy context the way the engine does."""
    enemies = list(enemies)
    allies = list(allies)
    memory = memory if memory is not None else MemoryStore()
    memory.observe([monster] + enemies + allies)
    threat = ThreatAssessor()
    threat.assess(enemies, memory)
    return StrategyContext(
        monster=monster,
        catalog=build_action_catalog(monster),
        enemies=enemies,
        allies=allies,
        evaluator=TargetEvaluator(memory, threat),
        environment=environment or Environment(),
        rng=rng or random.Random(0),
    )
