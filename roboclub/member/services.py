"""Service layer for the caang roster."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from firebase_admin import firestore

from roboclub.activity.services import ActivityService
from roboclub.attendance.calculator import summarize_user_attendance
from roboclub.attendance.services import AttendanceService
from roboclub.core.constants import (
    LATE_ATTENDANCE_WEIGHT,
    LOW_ATTENDANCE_THRESHOLD,
    USERS_COLLECTION,
)

from .models import Caang, CaangWithAttendance, flatten_user

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


class MemberService:
    """Service class for roster lookups."""

    @staticmethod
    def get_active_caang(db: Client) -> list[Caang]:
        """Fetch every active candidate member."""
        query = (
            db.collection(USERS_COLLECTION)
            .where(filter=firestore.FieldFilter("roles.isCaang", "==", True))
            .where(filter=firestore.FieldFilter("isActive", "==", True))
        )
        return [flatten_user(doc.id, doc.to_dict() or {}) for doc in query.stream()]

    @staticmethod
    def get_caang_count(db: Client) -> int:
        """Count the active candidate members."""
        return len(MemberService.get_active_caang(db))

    @staticmethod
    def annotate_with_attendance(
        members: list[Caang],
        activities: list[dict[str, Any]],
        attendances: list[dict[str, Any]],
        late_weight: float = LATE_ATTENDANCE_WEIGHT,
        low_threshold: float = LOW_ATTENDANCE_THRESHOLD,
    ) -> list[CaangWithAttendance]:
        """Attach attendance figures to each member, keeping roster order."""
        annotated: list[CaangWithAttendance] = []
        for member in members:
            summary = summarize_user_attendance(
                member["id"], activities, attendances, late_weight
            )
            annotated.append(
                {
                    **member,
                    **summary,
                    "isLowAttendance": summary["attendancePercentage"] < low_threshold,
                }
            )
        return annotated

    @staticmethod
    def get_caang_with_attendance(
        db: Client,
        or_period: str,
        late_weight: float = LATE_ATTENDANCE_WEIGHT,
        low_threshold: float = LOW_ATTENDANCE_THRESHOLD,
    ) -> list[CaangWithAttendance]:
        """Fetch the active roster annotated with attendance for one OR period."""
        members = MemberService.get_active_caang(db)
        if not members:
            return []
        activities = ActivityService.get_activities(db, or_period)
        attendances = AttendanceService.get_attendances_by_or_period(db, or_period)
        return MemberService.annotate_with_attendance(
            members, activities, attendances, late_weight, low_threshold
        )
