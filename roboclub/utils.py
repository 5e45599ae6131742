"""Utility functions for the application."""

from __future__ import annotations

from typing import Any


def snapshot_to_dict(doc: Any) -> dict[str, Any] | None:
    """Convert a Firestore snapshot into a plain dictionary carrying its id.

    Returns None when the snapshot does not exist.
    """
    if not doc.exists:
        return None
    data = doc.to_dict() or {}
    data["id"] = doc.id
    return data


def is_soft_deleted(data: dict[str, Any] | None) -> bool:
    """Return True when a document has been moved to the trash."""
    return bool(data and data.get("deletedAt"))


def drop_none(updates: dict[str, Any]) -> dict[str, Any]:
    """Remove keys whose value is None from an update payload."""
    return {k: v for k, v in updates.items() if v is not None}


def display_name(profile: dict[str, Any] | None) -> str:
    """Return the best human readable name for a user profile."""
    profile = profile or {}
    return profile.get("fullName") or profile.get("nickname") or "Unknown"
