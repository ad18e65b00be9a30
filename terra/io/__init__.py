from .records import (
    AtLoginFlags,
    at_login_flags,
    character_row,
    encode_equipment,
    encode_grants,
    encode_ids,
    form_row,
    homebind_row,
)

__all__ = [
    "AtLoginFlags",
    "at_login_flags",
    "character_row",
    "encode_equipment",
    "encode_grants",
    "encode_ids",
    "form_row",
    "homebind_row",
]
