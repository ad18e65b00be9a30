"""Exception types raised by the catalog and the character builder."""


class BuildError(ValueError):
    """Base class for rejections produced while resolving a character build."""


class InvalidInput(BuildError):
    """
    A selection was rejected. ``field`` is the machine-readable tag callers
    use to highlight the offending form field ("race", "class/condition", ...).
    """

    def __init__(self, field: str, detail: str = ""):
        self.field = field
        self.detail = detail
        message = f"invalid input: {field}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class CatalogError(RuntimeError):
    """Campaign or system data could not be loaded. Raised at startup only."""


class ConstraintSyntaxError(ValueError):
    """A requirement expression in catalog data is malformed."""


class FormulaError(ValueError):
    """A campaign formula failed to parse or evaluate."""
