"""Access control for setlists.

Read is granted to everyone on public setlists, to the owner, and to members
of the owning band. Write is granted to the owner and to band members holding
the permission the mutation needs (leaders hold all). Public visibility never
grants Write.
"""
from typing import Optional

from models import catalog_repository
from models.band import Band
from models.setlist import Setlist
from setlist_engine.access_control.models import (
    EDIT_SETLISTS,
    AccessIntent,
    BandDirectory,
    MembershipSnapshot,
)
from setlist_engine.errors import TransientLookupFailure
from utils.logger import get_logger

logger = get_logger(__name__)


def evaluate_access(
    setlist: Setlist,
    actor_id: Optional[str],
    intent: AccessIntent,
    membership: Optional[MembershipSnapshot],
    permission: str = EDIT_SETLISTS
) -> bool:
    """
    Decide access from a setlist and a membership snapshot. Pure.

    Args:
        setlist: Setlist being accessed
        actor_id: Acting user; None means anonymous
        intent: "read" or "write"
        membership: Actor's membership in the setlist's band, None if not a member
        permission: Band permission required for a write

    Returns:
        True if access is granted
    """
    is_owner = actor_id is not None and actor_id == setlist.created_by
    is_band_member = setlist.band_id is not None and membership is not None

    if intent == "read":
        return setlist.is_public or is_owner or is_band_member
    if intent == "write":
        if actor_id is None:
            return False
        return is_owner or (is_band_member and membership.holds(permission))
    return False


class InMemoryBandDirectory:
    """Band directory backed by the catalog repository."""

    async def get_band(self, band_id: str) -> Optional[Band]:
        return catalog_repository.get_band(band_id)


class AccessControlEvaluator:
    """
    Resolves band membership and evaluates setlist access.

    The only suspension point is the band lookup, which happens before any
    decision is made; the evaluator has no side effects.
    """

    def __init__(self, band_directory: Optional[BandDirectory] = None):
        """
        Initialize the evaluator.

        Args:
            band_directory: Source of band documents (defaults to the in-memory catalog)
        """
        self.band_directory = band_directory or InMemoryBandDirectory()

    async def can_access(
        self,
        setlist: Optional[Setlist],
        actor_id: Optional[str],
        intent: AccessIntent,
        permission: str = EDIT_SETLISTS
    ) -> bool:
        """
        Check whether an actor may read or write a setlist.

        Never raises: a missing setlist is denied, and a missing or unreachable
        band counts as "no membership" so owner and visibility rules still apply.

        Args:
            setlist: Setlist being accessed (None if it could not be loaded)
            actor_id: Acting user; None means anonymous
            intent: "read" or "write"
            permission: Band permission required for a write

        Returns:
            True if access is granted
        """
        if setlist is None:
            return False

        membership = None
        if setlist.band_id is not None and actor_id is not None and not self._decided_without_band(
            setlist, actor_id, intent
        ):
            membership = await self.lookup_membership(setlist.band_id, actor_id)

        return evaluate_access(setlist, actor_id, intent, membership, permission)

    @staticmethod
    def _decided_without_band(setlist: Setlist, actor_id: str, intent: AccessIntent) -> bool:
        if actor_id == setlist.created_by:
            return True
        return intent == "read" and setlist.is_public

    async def lookup_membership(self, band_id: str, actor_id: str) -> Optional[MembershipSnapshot]:
        """
        Snapshot an actor's membership in a band.

        Returns:
            MembershipSnapshot, or None if the band is missing, unreachable or
            the actor is not a member
        """
        try:
            band = await self.band_directory.get_band(band_id)
        except TransientLookupFailure as e:
            logger.warning(f"Band lookup failed for band {band_id}, treating {actor_id} as non-member: {e}")
            return None

        if band is None:
            logger.info(f"Band {band_id} not found, treating {actor_id} as non-member")
            return None
        return MembershipSnapshot.from_band(band, actor_id)
