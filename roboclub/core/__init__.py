"""Core module for the roboclub application."""

from .types import FirestoreDocument, SoftDeletableDocument

__all__ = ["FirestoreDocument", "SoftDeletableDocument"]
