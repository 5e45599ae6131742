"""Service layer for recruitment activities."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from firebase_admin import firestore
from flask import current_app

from roboclub.core.constants import ACTIVITIES_COLLECTION
from roboclub.errors import NotFoundError, ValidationError
from roboclub.utils import drop_none, is_soft_deleted, snapshot_to_dict

from .models import Activity

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes coming from HTML forms."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ActivityService:
    """Handles data access for recruitment activities."""

    @staticmethod
    def get_activities(
        db: Client, or_period: str | None = None, include_inactive: bool = True
    ) -> list[Activity]:
        """Fetch the activities of an OR period, oldest first, skipping trashed ones."""
        query = db.collection(ACTIVITIES_COLLECTION)
        if or_period:
            query = query.where(filter=firestore.FieldFilter("orPeriod", "==", or_period))

        activities = []
        for doc in query.stream():
            data = snapshot_to_dict(doc)
            if not data or is_soft_deleted(data):
                continue
            if not include_inactive and not data.get("isActive", True):
                continue
            activities.append(data)

        activities.sort(key=lambda a: _as_utc(a.get("startDateTime")) or _EPOCH)
        return activities

    @staticmethod
    def get_activity(db: Client, activity_id: str) -> Activity:
        """Fetch a single activity or raise NotFoundError."""
        data = snapshot_to_dict(
            db.collection(ACTIVITIES_COLLECTION).document(activity_id).get()
        )
        if data is None:
            raise NotFoundError("Activity not found.")
        return data

    @staticmethod
    def get_or_periods(db: Client) -> list[str]:
        """Return every OR period that has at least one activity."""
        periods = set()
        for doc in db.collection(ACTIVITIES_COLLECTION).stream():
            period = (doc.to_dict() or {}).get("orPeriod")
            if period:
                periods.add(period)
        return sorted(periods)

    @staticmethod
    def create_activity(
        db: Client,
        title: str,
        or_period: str,
        start_date_time: datetime,
        acting_user_id: str,
        description: str = "",
        location: str = "",
        is_active: bool = True,
    ) -> str:
        """Create an activity and return its id."""
        if not title or not title.strip():
            raise ValidationError("Activity title is required.")
        if not or_period:
            raise ValidationError("OR period is required.")

        doc_ref = db.collection(ACTIVITIES_COLLECTION).document()
        doc_ref.set(
            {
                "title": title.strip(),
                "description": description or "",
                "orPeriod": or_period,
                "startDateTime": _as_utc(start_date_time),
                "location": location or "",
                "isActive": is_active,
                "createdBy": acting_user_id,
                "createdAt": firestore.SERVER_TIMESTAMP,
                "updatedAt": firestore.SERVER_TIMESTAMP,
            }
        )
        current_app.logger.info(f"Created activity {doc_ref.id} for {or_period}")
        return doc_ref.id

    @staticmethod
    def update_activity(db: Client, activity_id: str, **fields: Any) -> None:
        """Update the given activity fields, ignoring the ones set to None."""
        ActivityService.get_activity(db, activity_id)
        updates = drop_none(fields)
        if "startDateTime" in updates:
            updates["startDateTime"] = _as_utc(updates["startDateTime"])
        updates["updatedAt"] = firestore.SERVER_TIMESTAMP
        db.collection(ACTIVITIES_COLLECTION).document(activity_id).update(updates)
        current_app.logger.info(f"Updated activity {activity_id}")

    @staticmethod
    def soft_delete_activity(db: Client, activity_id: str, acting_user_id: str) -> None:
        """Move an activity to the trash."""
        ActivityService.get_activity(db, activity_id)
        db.collection(ACTIVITIES_COLLECTION).document(activity_id).update(
            {
                "isActive": False,
                "deletedAt": firestore.SERVER_TIMESTAMP,
                "deletedBy": acting_user_id,
                "updatedAt": firestore.SERVER_TIMESTAMP,
            }
        )
        current_app.logger.info(f"Soft deleted activity {activity_id}")

    @staticmethod
    def restore_activity(db: Client, activity_id: str) -> None:
        """Bring an activity back from the trash."""
        ActivityService.get_activity(db, activity_id)
        db.collection(ACTIVITIES_COLLECTION).document(activity_id).update(
            {
                "isActive": True,
                "deletedAt": None,
                "deletedBy": None,
                "updatedAt": firestore.SERVER_TIMESTAMP,
            }
        )
        current_app.logger.info(f"Restored activity {activity_id}")

    @staticmethod
    def get_deleted_activities(db: Client) -> list[dict[str, Any]]:
        """Fetch the activities currently in the trash."""
        deleted = []
        for doc in db.collection(ACTIVITIES_COLLECTION).stream():
            data = snapshot_to_dict(doc)
            if is_soft_deleted(data):
                deleted.append(data)
        return deleted
