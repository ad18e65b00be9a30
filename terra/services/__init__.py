from .character_builder import compute_level, resolve
from .names import check_names, normalize_name, normalize_name_extra

__all__ = [
    "resolve",
    "compute_level",
    "check_names",
    "normalize_name",
    "normalize_name_extra",
]
