"""Attendance percentage calculation."""

from __future__ import annotations

from typing import Any, Iterable

from roboclub.core.constants import (
    LATE_ATTENDANCE_WEIGHT,
    STATUS_LATE,
    STATUS_PRESENT,
)
from roboclub.utils import is_soft_deleted

from .models import AttendanceSummary


def _statuses_by_activity(
    user_id: str, activity_ids: set[str], attendances: Iterable[dict[str, Any]]
) -> dict[str, str]:
    """Map each in-scope activity to the user's recorded status.

    A later record for the same activity replaces an earlier one.
    """
    statuses: dict[str, str] = {}
    for attendance in attendances:
        if attendance.get("userId") != user_id or is_soft_deleted(attendance):
            continue
        activity_id = attendance.get("activityId")
        if activity_id in activity_ids:
            statuses[activity_id] = attendance.get("status", "")
    return statuses


def summarize_user_attendance(
    user_id: str,
    activities: list[dict[str, Any]],
    attendances: Iterable[dict[str, Any]],
    late_weight: float = LATE_ATTENDANCE_WEIGHT,
) -> AttendanceSummary:
    """Compute a member's weighted attendance over the activities in scope.

    Present counts as a full attendance and late as ``late_weight`` of one.
    The percentage is rounded to two decimals and is 0 when there are no
    activities.
    """
    total_activities = len(activities)
    if total_activities == 0:
        return {
            "attendancePercentage": 0,
            "totalActivities": 0,
            "attendedActivities": 0,
        }

    activity_ids = {activity["id"] for activity in activities}
    statuses = _statuses_by_activity(user_id, activity_ids, attendances)
    present = sum(1 for s in statuses.values() if s == STATUS_PRESENT)
    late = sum(1 for s in statuses.values() if s == STATUS_LATE)

    attended_weight = present + late * late_weight
    percentage = round(attended_weight / total_activities * 100, 2)
    return {
        "attendancePercentage": percentage,
        "totalActivities": total_activities,
        "attendedActivities": present + late,
    }


def calculate_attendance_percentage(
    user_id: str,
    activities: list[dict[str, Any]],
    attendances: Iterable[dict[str, Any]],
    late_weight: float = LATE_ATTENDANCE_WEIGHT,
) -> float:
    """Return a member's weighted attendance percentage (0-100)."""
    summary = summarize_user_attendance(user_id, activities, attendances, late_weight)
    return summary["attendancePercentage"]
