"""
Monster Combat AI System.

Decides one action per cycle for a monster from a snapshot of the
encounter, following one of eight behavior archetypes.

Modules:
- memory: Per-combatant memory (damage, healing, recent actions)
- threat: Threat scoring of enemies
- behaviors: Archetypes, overrides and behavior resolution
- catalog: Usable actions for the current cycle
- targeting: Target evaluation and prioritization
- strategies: One decision function per archetype
- tactical_ai: Main AI decision framework
- narrative: Flavor text for decisions
- assessment: Encounter and stat-block assessment for the DM
"""
from .memory import ActionRecord, MemoryRecord, MemoryStore
from .threat import ThreatAssessor, compute_threat_score
from .behaviors import (
    ActionKind,
    Archetype,
    BehaviorAssignment,
    BehaviorResolver,
    ChosenAction,
    DecisionOutcome,
    resolve_from_stat_block,
)
from .catalog import ActionCandidate, ActionCatalog, CandidateKind, build_action_catalog
from .targeting import TargetEvaluator, vulnerability_score
from .strategies import STRATEGIES, StrategyContext, get_strategy
from .narrative import DefaultNarrator, NarrativeGenerator
from .tactical_ai import AIDifficulty, CombatAI, generate_combat_suggestion, split_sides
from .assessment import (
    MonsterStrategy,
    TacticalAssessment,
    generate_monster_strategy,
    generate_tactical_assessment,
    suggest_archetype,
)

__all__ = [
    # Memory & threat
    'ActionRecord',
    'MemoryRecord',
    'MemoryStore',
    'ThreatAssessor',
    'compute_threat_score',
    # Behaviors
    'ActionKind',
    'Archetype',
    'BehaviorAssignment',
    'BehaviorResolver',
    'ChosenAction',
    'DecisionOutcome',
    'resolve_from_stat_block',
    # Catalog & targeting
    'ActionCandidate',
    'ActionCatalog',
    'CandidateKind',
    'build_action_catalog',
    'TargetEvaluator',
    'vulnerability_score',
    # Strategies
    'STRATEGIES',
    'StrategyContext',
    'get_strategy',
    # Narrative
    'DefaultNarrator',
    'NarrativeGenerator',
    # Main AI
    'AIDifficulty',
    'CombatAI',
    'generate_combat_suggestion',
    'split_sides',
    # Assessment
    'MonsterStrategy',
    'TacticalAssessment',
    'generate_monster_strategy',
    'generate_tactical_assessment',
    'suggest_archetype',
]
