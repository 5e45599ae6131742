"""Data models for the activity blueprint."""

from __future__ import annotations

from typing import Any

from roboclub.core.types import SoftDeletableDocument


class Activity(SoftDeletableDocument, total=False):
    """A recruitment activity document in Firestore."""

    title: str
    description: str
    orPeriod: str
    startDateTime: Any
    location: str
    isActive: bool
