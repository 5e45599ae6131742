"""Data models for the group blueprint."""

from __future__ import annotations

from typing import Optional, TypedDict

from roboclub.core.types import FirestoreDocument, SoftDeletableDocument


class MemberSnapshot(TypedDict):
    """A member's details copied into a sub-group at write time."""

    userId: str
    fullName: str
    nim: str
    attendancePercentage: float
    totalActivities: int
    attendedActivities: int
    isLowAttendance: bool


class GroupParent(SoftDeletableDocument, total=False):
    """A parent group document, the container of sub-groups."""

    name: str
    description: str
    orPeriod: str
    totalSubGroups: int
    totalMembers: int
    leaderId: Optional[str]  # noqa: UP007
    isActive: bool

    # UI and calculated fields
    deletedByName: str


class SubGroup(FirestoreDocument, total=False):
    """A sub-group document holding the actual members."""

    parentId: str
    name: str
    description: str
    orPeriod: str
    sequence: int
    memberIds: list[str]
    leaderId: Optional[str]  # noqa: UP007
    members: list[MemberSnapshot]
    isActive: bool


class GenerationResult(TypedDict):
    """Summary of a bulk sub-group creation."""

    createdCount: int
    totalMembers: int
    subGroupIds: list[str]


class SubGroupMemberUpdate(TypedDict, total=False):
    """Requested membership for one sub-group in a batch edit."""

    subGroupId: str
    memberIds: list[str]
    leaderId: Optional[str]  # noqa: UP007
