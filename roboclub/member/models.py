"""Data models for the member blueprint."""

from __future__ import annotations

from typing import Any, TypedDict

from roboclub.core.types import FirestoreDocument
from roboclub.utils import display_name


class Profile(TypedDict, total=False):
    """The profile section of a user document."""

    fullName: str
    nickname: str
    nim: str
    prodi: str


class Roles(TypedDict, total=False):
    """Role flags of a user document."""

    isCaang: bool
    isAdmin: bool


class User(FirestoreDocument, total=False):
    """A user document in Firestore."""

    profile: Profile
    roles: Roles
    isActive: bool
    isBlacklisted: bool


class Caang(TypedDict, total=False):
    """A flattened candidate member as used by the roster views."""

    id: str
    fullName: str
    nim: str
    prodi: str
    isActive: bool
    isBlacklisted: bool


class CaangWithAttendance(Caang, total=False):
    """A candidate member annotated with their attendance for one period."""

    attendancePercentage: float
    totalActivities: int
    attendedActivities: int
    isLowAttendance: bool


def flatten_user(user_id: str, data: dict[str, Any]) -> Caang:
    """Flatten a user document into the fields the roster needs."""
    profile = data.get("profile") or {}
    return {
        "id": user_id,
        "fullName": display_name(profile),
        "nim": profile.get("nim") or "-",
        "prodi": profile.get("prodi") or "-",
        "isActive": bool(data.get("isActive", False)),
        "isBlacklisted": bool(data.get("isBlacklisted", False)),
    }
