"""Service layer for attendance records."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from firebase_admin import firestore
from flask import current_app

from roboclub.core.constants import (
    ATTENDANCE_METHODS,
    ATTENDANCE_STATUSES,
    ATTENDANCES_COLLECTION,
    METHOD_MANUAL,
)
from roboclub.errors import NotFoundError, ValidationError
from roboclub.utils import drop_none, is_soft_deleted, snapshot_to_dict

from .models import Attendance
from .stats import points_from_status

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


def _validate_status(status: str) -> None:
    if status not in ATTENDANCE_STATUSES:
        raise ValidationError(f"Unknown attendance status: {status}")


class AttendanceService:
    """Handles data access for attendance records."""

    @staticmethod
    def _stream(query: Any, include_deleted: bool = False) -> list[dict[str, Any]]:
        records = []
        for doc in query.stream():
            data = snapshot_to_dict(doc)
            if not data:
                continue
            if is_soft_deleted(data) and not include_deleted:
                continue
            records.append(data)
        return records

    @staticmethod
    def get_attendances_by_activity(db: Client, activity_id: str) -> list[dict[str, Any]]:
        """Fetch the live attendance records of one activity."""
        query = db.collection(ATTENDANCES_COLLECTION).where(
            filter=firestore.FieldFilter("activityId", "==", activity_id)
        )
        return AttendanceService._stream(query)

    @staticmethod
    def get_attendances_by_or_period(db: Client, or_period: str) -> list[dict[str, Any]]:
        """Fetch the live attendance records of one OR period."""
        query = db.collection(ATTENDANCES_COLLECTION).where(
            filter=firestore.FieldFilter("orPeriod", "==", or_period)
        )
        return AttendanceService._stream(query)

    @staticmethod
    def get_attendances_by_user(db: Client, user_id: str) -> list[dict[str, Any]]:
        """Fetch the live attendance records of one member."""
        query = db.collection(ATTENDANCES_COLLECTION).where(
            filter=firestore.FieldFilter("userId", "==", user_id)
        )
        return AttendanceService._stream(query)

    @staticmethod
    def get_deleted_attendances(db: Client) -> list[dict[str, Any]]:
        """Fetch the attendance records currently in the trash."""
        records = AttendanceService._stream(
            db.collection(ATTENDANCES_COLLECTION), include_deleted=True
        )
        return [r for r in records if is_soft_deleted(r)]

    @staticmethod
    def get_attendance(db: Client, attendance_id: str) -> Attendance:
        """Fetch one attendance record or raise NotFoundError."""
        data = snapshot_to_dict(
            db.collection(ATTENDANCES_COLLECTION).document(attendance_id).get()
        )
        if data is None:
            raise NotFoundError("Attendance record not found.")
        return data

    @staticmethod
    def create_attendance(
        db: Client,
        activity_id: str,
        user_id: str,
        or_period: str,
        status: str,
        acting_user_id: str,
        method: str = METHOD_MANUAL,
        checked_in_at: datetime | None = None,
        user_notes: str = "",
        admin_notes: str = "",
    ) -> str:
        """Record a member's attendance for an activity.

        Points are derived from the status. An existing live record for the
        same member and activity is rejected.
        """
        _validate_status(status)
        if method not in ATTENDANCE_METHODS:
            raise ValidationError(f"Unknown attendance method: {method}")

        existing = [
            a
            for a in AttendanceService.get_attendances_by_activity(db, activity_id)
            if a.get("userId") == user_id
        ]
        if existing:
            raise ValidationError("Attendance already recorded for this member.")

        doc_ref = db.collection(ATTENDANCES_COLLECTION).document()
        doc_ref.set(
            {
                "activityId": activity_id,
                "userId": user_id,
                "orPeriod": or_period,
                "status": status,
                "method": method,
                "checkedInAt": checked_in_at or firestore.SERVER_TIMESTAMP,
                "checkedInBy": acting_user_id,
                "userNotes": user_notes or "",
                "adminNotes": admin_notes or "",
                "points": points_from_status(status),
                "createdAt": firestore.SERVER_TIMESTAMP,
                "updatedAt": firestore.SERVER_TIMESTAMP,
            }
        )
        current_app.logger.info(
            f"Recorded {status} for user {user_id} on activity {activity_id}"
        )
        return doc_ref.id

    @staticmethod
    def update_attendance(
        db: Client,
        attendance_id: str,
        status: str | None = None,
        admin_notes: str | None = None,
        user_notes: str | None = None,
    ) -> None:
        """Update an attendance record, recomputing points when the status changes."""
        AttendanceService.get_attendance(db, attendance_id)
        updates = drop_none(
            {"status": status, "adminNotes": admin_notes, "userNotes": user_notes}
        )
        if status is not None:
            _validate_status(status)
            updates["points"] = points_from_status(status)
        updates["updatedAt"] = firestore.SERVER_TIMESTAMP
        db.collection(ATTENDANCES_COLLECTION).document(attendance_id).update(updates)
        current_app.logger.info(f"Updated attendance {attendance_id}")

    @staticmethod
    def soft_delete_attendance(
        db: Client, attendance_id: str, acting_user_id: str
    ) -> None:
        """Move an attendance record to the trash."""
        AttendanceService.get_attendance(db, attendance_id)
        db.collection(ATTENDANCES_COLLECTION).document(attendance_id).update(
            {
                "deletedAt": firestore.SERVER_TIMESTAMP,
                "deletedBy": acting_user_id,
                "updatedAt": firestore.SERVER_TIMESTAMP,
            }
        )
        current_app.logger.info(f"Soft deleted attendance {attendance_id}")

    @staticmethod
    def restore_attendance(db: Client, attendance_id: str) -> None:
        """Bring an attendance record back from the trash.

        Rejected when the member already has another live record for the
        same activity.
        """
        attendance = AttendanceService.get_attendance(db, attendance_id)
        live = [
            a
            for a in AttendanceService.get_attendances_by_activity(
                db, attendance.get("activityId")
            )
            if a.get("userId") == attendance.get("userId") and a["id"] != attendance_id
        ]
        if live:
            raise ValidationError("Attendance already recorded for this member.")

        db.collection(ATTENDANCES_COLLECTION).document(attendance_id).update(
            {
                "deletedAt": None,
                "deletedBy": None,
                "updatedAt": firestore.SERVER_TIMESTAMP,
            }
        )
        current_app.logger.info(f"Restored attendance {attendance_id}")

    @staticmethod
    def hard_delete_attendance(db: Client, attendance_id: str) -> None:
        """Delete an attendance record permanently."""
        AttendanceService.get_attendance(db, attendance_id)
        db.collection(ATTENDANCES_COLLECTION).document(attendance_id).delete()
        current_app.logger.info(f"Permanently deleted attendance {attendance_id}")
