"""
Damage formula estimation for AI decision-making.

Handles damage dice notation as found on stat blocks:
- Standard dice terms (1d8, 2d6, 8d6)
- Flat modifiers (+3, -1)
- Multiple terms (1d8+1d6+2)
- Trailing text such as damage types ("2d6 + 3 slashing")

Nothing here rolls dice: the engine only needs expected values.
"""
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

# "2d6", "+ 1d4", "-d8"
DICE_TERM_PATTERN = re.compile(r'([+-]?)\s*(\d*)\s*d\s*(\d+)', re.IGNORECASE)
# Flat modifiers once dice terms are removed
FLAT_TERM_PATTERN = re.compile(r'([+-]?)\s*(\d+)')


@dataclass
class DamageFormula:
    """Parsed damage formula: dice terms plus a flat modifier."""
    dice: List[Tuple[int, int]] = field(default_factory=list)  # (count, sides), count signed
    modifier: int = 0
    notation: str = ""

    @property
    def average(self) -> float:
        """Expected value: count x (sides + 1) / 2 per term, plus the modifier."""
        total = float(self.modifier)
        for count, sides in self.dice:
            total += count * (sides + 1) / 2
        return total


def parse_damage_formula(notation: Optional[str]) -> Optional[DamageFormula]:
    """
    Parse a damage formula into dice terms and a flat modifier.

    Args:
        notation: Formula like "2d6+3", "8d6", "1d8 + 1d6", "2d6 + 3 fire"

    Returns:
        DamageFormula, or None if the text holds no dice and no number
    """
    if not notation:
        return None

    text = notation.lower()
    dice = []
    for match in DICE_TERM_PATTERN.finditer(text):
        sign = -1 if match.group(1) == '-' else 1
        count = int(match.group(2)) if match.group(2) else 1
        sides = int(match.group(3))
        if sides > 0:
            dice.append((sign * count, sides))

    remainder = DICE_TERM_PATTERN.sub(' ', text)
    modifier = 0
    found_flat = False
    for match in FLAT_TERM_PATTERN.finditer(remainder):
        sign = -1 if match.group(1) == '-' else 1
        modifier += sign * int(match.group(2))
        found_flat = True

    if not dice and not found_flat:
        return None

    return DamageFormula(dice=dice, modifier=modifier, notation=notation)


def average_damage(notation: Optional[str]) -> float:
    """
    Average damage of a formula.

    Examples:
        average_damage("2d6+3") -> 10.0
        average_damage("8d6") -> 28.0
        average_damage("") -> 0.0
    """
    formula = parse_damage_formula(notation)
    if formula is None:
        return 0.0
    return formula.average
