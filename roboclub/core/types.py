"""Core data types for the roboclub application."""

from typing import Any, Optional, TypedDict


class _FirestoreDocumentBase(TypedDict):
    id: str
    createdAt: Any


class FirestoreDocument(_FirestoreDocumentBase, total=False):
    """Generic Firestore document structure."""

    createdBy: str
    updatedAt: Any


class SoftDeletableDocument(FirestoreDocument, total=False):
    """A document that can be moved to the trash instead of being deleted."""

    deletedAt: Any
    deletedBy: Optional[str]  # noqa: UP007
