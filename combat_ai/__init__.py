"""
Monster Combat AI Engine.

Chooses actions for non-player combatants in a turn-based combat tracker
from a behavior archetype, the monster's own state, the state of its
allies and enemies, and what it remembers about the encounter.
"""
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
