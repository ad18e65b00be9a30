"""
Catalog Assembly
================
Combine layered System definitions into one catalog.

Layers are passed most specific first (the campaign's own definitions, then
shared ones). Each id keeps the first definition met; later layers only fill
gaps.
"""

import logging

from terra.models.campaign import SYSTEM_KINDS, System

logger = logging.getLogger(__name__)


def merge_systems(*layers: System) -> System:
    merged = System()
    for layer in layers:
        _log_shadowed(merged, layer)
        merged = merged.merge_in(layer)
    return merged


def _log_shadowed(current: System, incoming: System) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    for attr in SYSTEM_KINDS.values():
        ours = getattr(current, attr)
        for key in getattr(incoming, attr):
            if key in ours:
                logger.debug(f"'{attr}/{key}' already defined by a more specific layer")
