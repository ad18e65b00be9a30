"""
Requirement Expressions
=======================
The AST for entity requirements and the parser that reads it from catalog data.

Catalog shape:
    "strong"                           -> Has("strong")
    ["all", c1, c2, ...]               -> All   ("and" is accepted too)
    ["any", c1, c2, ...]               -> AnyOf ("or" is accepted too)
    ["not", c]                         -> Not
    ["<", "tag/a", 5, "tag/b"]         -> Compare (chained, see evaluator)

Evaluation lives in ``terra.rules.evaluator``; nothing here looks at tags.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

from terra.errors import ConstraintSyntaxError

COMPARISON_OPS = ("<", "<=", "==", "!=", ">=", ">")

ALL_KEYWORDS = ("all", "and")
ANY_KEYWORDS = ("any", "or")
NOT_KEYWORD = "not"


class Constraint:
    """Base class for requirement nodes."""

    __slots__ = ()


@dataclass(frozen=True)
class TagRef:
    """Comparison operand resolved against the tag store."""

    name: str

    def __str__(self) -> str:
        return self.name


Operand = Union[int, TagRef]


@dataclass(frozen=True)
class Has(Constraint):
    tag: str

    def __str__(self) -> str:
        return self.tag


@dataclass(frozen=True)
class Compare(Constraint):
    op: str
    operands: Tuple[Operand, ...]

    def __str__(self) -> str:
        return "(" + " ".join([self.op] + [str(o) for o in self.operands]) + ")"


@dataclass(frozen=True)
class All(Constraint):
    children: Tuple[Constraint, ...] = ()

    def __str__(self) -> str:
        return _render("all", self.children)


@dataclass(frozen=True)
class AnyOf(Constraint):
    children: Tuple[Constraint, ...] = ()

    def __str__(self) -> str:
        return _render("any", self.children)


@dataclass(frozen=True)
class Not(Constraint):
    child: Constraint

    def __str__(self) -> str:
        return f"(not {self.child})"


def _render(op: str, children: Tuple[Constraint, ...]) -> str:
    return "(" + " ".join([op] + [str(c) for c in children]) + ")"


# =============================================================================
# PARSER
# =============================================================================


def _parse_operand(raw: Any) -> Operand:
    if isinstance(raw, bool):
        raise ConstraintSyntaxError(f"Comparison operand cannot be a boolean: {raw!r}")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw:
        return TagRef(raw)
    raise ConstraintSyntaxError(f"Invalid comparison operand: {raw!r}")


def parse_constraint(raw: Any) -> Optional[Constraint]:
    """
    Parse catalog data into a constraint tree.

    Returns None for None (no requirement). Raises ConstraintSyntaxError on
    any shape that isn't a tag name or an operator sequence.
    """
    if raw is None or isinstance(raw, Constraint):
        return raw

    if isinstance(raw, str):
        if not raw:
            raise ConstraintSyntaxError("Tag name cannot be empty")
        return Has(raw)

    if not isinstance(raw, (list, tuple)):
        raise ConstraintSyntaxError(f"Expected a tag or an operator list, got {raw!r}")

    if not raw or not isinstance(raw[0], str):
        raise ConstraintSyntaxError("Every sequence must start with an operator string")

    op, rest = raw[0], list(raw[1:])

    if op in ALL_KEYWORDS:
        return All(tuple(_parse_child(c) for c in rest))
    if op in ANY_KEYWORDS:
        return AnyOf(tuple(_parse_child(c) for c in rest))
    if op == NOT_KEYWORD:
        if len(rest) != 1:
            raise ConstraintSyntaxError("'not' must contain exactly one inner condition")
        return Not(_parse_child(rest[0]))
    if op in COMPARISON_OPS:
        if not rest:
            raise ConstraintSyntaxError(f"'{op}' needs at least one operand")
        return Compare(op, tuple(_parse_operand(o) for o in rest))

    raise ConstraintSyntaxError(f"Invalid constraint operator {op!r}")


def _parse_child(raw: Any) -> Constraint:
    if raw is None:
        raise ConstraintSyntaxError("Nested conditions cannot be null")
    return parse_constraint(raw)
