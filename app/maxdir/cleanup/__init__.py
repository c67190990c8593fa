"""Directory quota enforcement.

This module provides the protected path guard, the section inventory,
the retention policy, the delete/move executor, the run lock, the
audit log and the run coordinator that ties them together.
"""

from maxdir.cleanup.audit import AuditLog
from maxdir.cleanup.executor import ActionExecutor
from maxdir.cleanup.inventory import DirectoryInventory
from maxdir.cleanup.lock import RunLock, RunTerminated
from maxdir.cleanup.models import (
    ActionRecord,
    ActionType,
    DirectoryEntry,
    RunReport,
    SectionStatus,
    SectionSummary,
)
from maxdir.cleanup.policy import excess_count, select_excess
from maxdir.cleanup.protected import ProtectionReason, SafetyGuard
from maxdir.cleanup.runner import RunCoordinator

__all__ = [
    "ActionExecutor",
    "ActionRecord",
    "ActionType",
    "AuditLog",
    "DirectoryEntry",
    "DirectoryInventory",
    "ProtectionReason",
    "RunCoordinator",
    "RunLock",
    "RunReport",
    "RunTerminated",
    "SafetyGuard",
    "SectionStatus",
    "SectionSummary",
    "excess_count",
    "select_excess",
]
