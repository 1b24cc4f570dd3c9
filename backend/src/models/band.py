"""Band model consulted for setlist access decisions."""
import uuid
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


BandRole = Literal["leader", "member"]
BandPermission = Literal["edit_setlists", "add_songs", "edit_songs", "invite_members", "remove_members"]

ALL_BAND_PERMISSIONS: List[str] = [
    "edit_setlists",
    "add_songs",
    "edit_songs",
    "invite_members",
    "remove_members",
]


class BandMember(BaseModel):
    """Membership of one actor in a band."""
    user_id: str = Field(..., alias="userId", description="ID of the member")
    role: BandRole = Field(default="member", description="Role of the member in the band")
    permissions: List[BandPermission] = Field(
        default_factory=list,
        description="Permissions explicitly granted to this member (leaders hold all implicitly)"
    )

    class Config:
        populate_by_name = True


class Band(BaseModel):
    """A band and its membership list.

    The creator is always enrolled as a leader with every permission.
    """
    id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="Unique identifier of the band")
    name: str = Field(..., min_length=1, description="Name of the band")
    description: str = Field(default="", description="Description of the band")
    created_by: str = Field(..., alias="createdBy", description="ID of the user who created the band")
    members: List[BandMember] = Field(default_factory=list, description="Band members")

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def ensure_creator_is_leader(self) -> "Band":
        """Enroll the creator as a leader if they are missing from the members list."""
        if self.get_member(self.created_by) is None:
            self.members.append(
                BandMember(user_id=self.created_by, role="leader", permissions=list(ALL_BAND_PERMISSIONS))
            )
        return self

    def get_member(self, user_id: str) -> Optional[BandMember]:
        """Return the membership entry for a user, or None."""
        for member in self.members:
            if member.user_id == user_id:
                return member
        return None

    def has_member(self, user_id: str) -> bool:
        return self.get_member(user_id) is not None

    def is_leader(self, user_id: str) -> bool:
        member = self.get_member(user_id)
        return member is not None and member.role == "leader"

    def has_permission(self, user_id: str, permission: str) -> bool:
        """Leaders hold every permission; other members only those granted."""
        member = self.get_member(user_id)
        if member is None:
            return False
        return member.role == "leader" or permission in member.permissions
