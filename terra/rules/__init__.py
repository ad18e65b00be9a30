from .evaluator import COMPARATORS, check, evaluate
from .formula import SAFE_FUNCTIONS, evaluate_int, validate_formula

__all__ = [
    "COMPARATORS",
    "check",
    "evaluate",
    "SAFE_FUNCTIONS",
    "evaluate_int",
    "validate_formula",
]
