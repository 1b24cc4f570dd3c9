"""Types used by the setlist access control evaluator."""
from dataclasses import dataclass, field
from typing import FrozenSet, Literal, Optional, Protocol

from models.band import Band

AccessIntent = Literal["read", "write"]

# Permission required to change a setlist's fields, sets or song entries
EDIT_SETLISTS = "edit_setlists"


@dataclass(frozen=True)
class MembershipSnapshot:
    """
    Immutable view of one actor's membership in a band.

    Built from the band document at lookup time so the access decision does
    not depend on how membership is persisted.
    """
    role: str
    permissions: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_band(cls, band: Band, actor_id: str) -> Optional["MembershipSnapshot"]:
        """Snapshot `actor_id`'s membership in `band`, or None if not a member."""
        member = band.get_member(actor_id)
        if member is None:
            return None
        return cls(role=member.role, permissions=frozenset(member.permissions))

    @property
    def is_leader(self) -> bool:
        return self.role == "leader"

    def holds(self, permission: str) -> bool:
        """Leaders hold every permission; members only those granted."""
        return self.is_leader or permission in self.permissions


class BandDirectory(Protocol):
    """Asynchronous band lookup consumed by the evaluator.

    Implementations return None for unknown bands and raise
    TransientLookupFailure when the backing store cannot be reached.
    """

    async def get_band(self, band_id: str) -> Optional[Band]:
        ...
