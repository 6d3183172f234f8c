"""Mapping Layer - snapshot persistence and changelog reconciliation."""

from .mapping_store import MappingStore
from .models import ChangeType, MappingChangeEntry, MappingEntry, MappingSnapshot
from .reconcile import compute_changelog
from .service import MappingService

__all__ = [
    "ChangeType",
    "MappingChangeEntry",
    "MappingEntry",
    "MappingService",
    "MappingSnapshot",
    "MappingStore",
    "compute_changelog",
]
