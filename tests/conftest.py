"""Common utilities for tests."""

import unittest.mock
from typing import Any, Optional

from mockfirestore import CollectionReference, MockFirestore, Query
from mockfirestore.document import DocumentReference


def patch_mockfirestore() -> None:
    """Apply monkeypatches to mockfirestore to support FieldFilter and equality."""

    def collection_where(
        self: Any,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        filter: Any = None,
    ) -> Any:  # noqa: E501
        if filter:
            return self._where(filter.field_path, filter.op_string, filter.value)
        return self._where(field_path, op_string, value)

    if not hasattr(CollectionReference, "_where"):
        CollectionReference._where = CollectionReference.where
        CollectionReference.where = collection_where

    def query_where(
        self: Any,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        filter: Any = None,
    ) -> Any:
        if filter:
            return self._where(filter.field_path, filter.op_string, filter.value)
        return self._where(field_path, op_string, value)

    if not hasattr(Query, "_where"):
        Query._where = Query.where
        Query.where = query_where

    def doc_ref_eq(self: Any, other: Any) -> bool:
        if not isinstance(other, DocumentReference):
            return False
        return self._path == other._path

    if not hasattr(DocumentReference, "_orig_eq"):
        DocumentReference._orig_eq = DocumentReference.__eq__
        DocumentReference.__eq__ = doc_ref_eq
        DocumentReference.__hash__ = lambda self: hash(tuple(self._path))


class MockBatch:
    """A write batch that replays its operations on commit."""

    def __init__(self, db: Any) -> None:
        self.db = db
        self.operations: list[tuple[str, Any, Any]] = []
        self.commit = unittest.mock.MagicMock(side_effect=self._real_commit)

    def set(self, ref: Any, data: Any, merge: bool = False) -> None:
        self.operations.append(("set", ref, (data, merge)))

    def update(self, ref: Any, data: Any) -> None:
        self.operations.append(("update", ref, data))

    def delete(self, ref: Any) -> None:
        self.operations.append(("delete", ref, None))

    def _real_commit(self) -> None:
        for op, ref, payload in self.operations:
            if op == "set":
                data, merge = payload
                ref.set(data, merge=merge)
            elif op == "update":
                ref.update(payload)
            else:
                ref.delete()


def make_mock_db() -> MockFirestore:
    """Return a patched MockFirestore whose batch() hands out a fresh MockBatch."""
    patch_mockfirestore()
    db = MockFirestore()
    db.batches = []

    def new_batch() -> MockBatch:
        batch = MockBatch(db)
        db.batches.append(batch)
        return batch

    db.batch = unittest.mock.MagicMock(side_effect=new_batch)
    return db


def add_caang(
    db: Any,
    user_id: str,
    full_name: str,
    nim: str = "",
    is_active: bool = True,
    is_caang: bool = True,
) -> None:
    """Store a candidate member in the users collection."""
    db.collection("users").document(user_id).set(
        {
            "profile": {"fullName": full_name, "nim": nim or user_id, "prodi": "TI"},
            "roles": {"isCaang": is_caang, "isAdmin": False},
            "isActive": is_active,
        }
    )


def add_activity(db: Any, activity_id: str, or_period: str = "OR 21", **extra: Any) -> None:
    """Store an activity in the activities collection."""
    db.collection("activities").document(activity_id).set(
        {"title": activity_id.title(), "orPeriod": or_period, "isActive": True, **extra}
    )


def add_attendance(
    db: Any,
    attendance_id: str,
    user_id: str,
    activity_id: str,
    status: str,
    or_period: str = "OR 21",
    **extra: Any,
) -> None:
    """Store an attendance record in the attendances collection."""
    db.collection("attendances").document(attendance_id).set(
        {
            "userId": user_id,
            "activityId": activity_id,
            "status": status,
            "orPeriod": or_period,
            **extra,
        }
    )
