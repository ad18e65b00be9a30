"""
Formula Evaluation
==================
Safe evaluation of campaign formulas (currently the starting-level rule).
Uses simpleeval for sandboxed execution.

Supports:
- Arithmetic: +, -, *, /, //, %
- Functions: floor(), ceil(), max(), min(), abs(), round()
- Names supplied by the caller (e.g. base, delta, level_min, level_max)
"""

import logging
import math
import re
from typing import Dict, Iterable, Optional

from simpleeval import simple_eval

from terra.errors import FormulaError

logger = logging.getLogger(__name__)


# =============================================================================
# SAFE FUNCTIONS FOR FORMULAS
# =============================================================================

SAFE_FUNCTIONS = {
    "floor": lambda x: int(math.floor(x)),
    "ceil": lambda x: int(math.ceil(x)),
    "max": max,
    "min": min,
    "abs": abs,
    "round": round,
}

LEVEL_NAMES = ("base", "delta", "level_min", "level_max")


# =============================================================================
# FORMULA EVALUATION
# =============================================================================


def evaluate_int(formula: str, names: Dict[str, int]) -> int:
    """
    Evaluate a formula and return an integer result.

    Unlike display formulas, campaign rules must not silently fall back to a
    default, so any failure raises FormulaError.

    Examples:
        >>> evaluate_int("min(level_max, max(level_min, base + delta))",
        ...              {"base": 1, "delta": 4, "level_min": 1, "level_max": 80})
        5
    """
    if not formula or not isinstance(formula, str):
        raise FormulaError("Formula must be a non-empty string")

    try:
        result = simple_eval(formula.strip(), names=dict(names), functions=SAFE_FUNCTIONS)
    except Exception as e:
        raise FormulaError(f"Formula '{formula}' failed: {e}") from e

    if isinstance(result, bool) or not isinstance(result, (int, float)):
        raise FormulaError(f"Formula '{formula}' produced {result!r}, not a number")
    return int(result)


# =============================================================================
# FORMULA VALIDATION
# =============================================================================


def validate_formula(
    formula: str,
    available_names=LEVEL_NAMES,
    samples: Optional[Iterable[Dict[str, int]]] = None,
) -> Optional[str]:
    """
    Validate a formula for syntax and name references.

    Without ``samples`` the formula is tried once with every name set to 1.
    With ``samples`` it must evaluate for each of them, which catches
    formulas that only break on some inputs (e.g. a division by ``delta``).

    Returns:
        Error message if invalid, None if valid
    """
    if not formula or not isinstance(formula, str):
        return "Formula is empty"

    dangerous_patterns = [
        r"__",
        r"import",
        r"exec",
        r"eval",
        r"open",
        r"lambda",
    ]
    for pattern in dangerous_patterns:
        if re.search(pattern, formula, re.IGNORECASE):
            return f"Formula contains forbidden pattern: {pattern}"

    if samples is None:
        samples = [{name: 1 for name in available_names}]
    for names in samples:
        try:
            evaluate_int(formula, names)
        except FormulaError as e:
            return f"{e} (with {names})"

    logger.debug(f"Formula '{formula}' validated")
    return None
