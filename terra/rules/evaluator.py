"""
Constraint Evaluator
====================
Pure evaluation of requirement trees against a tag store.

A missing tag is never an error: ``Has`` reports it absent and comparison
operands read it as 0.
"""

import operator
from typing import Callable, Dict, Optional

from terra.models.constraint import All, AnyOf, Compare, Constraint, Has, Not, TagRef
from terra.models.tags import TagStore

COMPARATORS: Dict[str, Callable[[int, int], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    "==": operator.eq,
    "!=": operator.ne,
    ">=": operator.ge,
    ">": operator.gt,
}


def _resolve_operand(operand, store: TagStore) -> int:
    if isinstance(operand, TagRef):
        return store.value(operand.name)
    return operand


def evaluate(constraint: Constraint, store: TagStore) -> bool:
    """
    Evaluate a constraint tree.

    Compare nodes are chains: the operator must hold between every
    consecutive pair of resolved operands, so ``(< a 5 b)`` means
    ``a < 5 and 5 < b``. A single operand has no pairs and is satisfied.
    """
    if isinstance(constraint, Has):
        return store.has(constraint.tag)

    if isinstance(constraint, Compare):
        compare = COMPARATORS[constraint.op]
        values = [_resolve_operand(o, store) for o in constraint.operands]
        return all(compare(a, b) for a, b in zip(values, values[1:]))

    if isinstance(constraint, All):
        return all(evaluate(c, store) for c in constraint.children)

    if isinstance(constraint, AnyOf):
        return any(evaluate(c, store) for c in constraint.children)

    if isinstance(constraint, Not):
        return not evaluate(constraint.child, store)

    raise TypeError(f"Unknown constraint node: {type(constraint).__name__}")


def check(constraint: Optional[Constraint], store: TagStore) -> bool:
    """Entities without a requirement are always satisfied."""
    if constraint is None:
        return True
    return evaluate(constraint, store)
