"""Setlist access control over visibility, ownership and band membership."""
from setlist_engine.access_control.evaluator import (
    AccessControlEvaluator,
    InMemoryBandDirectory,
    evaluate_access,
)
from setlist_engine.access_control.models import (
    EDIT_SETLISTS,
    AccessIntent,
    BandDirectory,
    MembershipSnapshot,
)

__all__ = [
    "AccessControlEvaluator",
    "AccessIntent",
    "BandDirectory",
    "EDIT_SETLISTS",
    "InMemoryBandDirectory",
    "MembershipSnapshot",
    "evaluate_access",
]
