"""Aggregations over attendance records for the management views."""

from __future__ import annotations

from typing import Any

from roboclub.core.constants import (
    ABSENCE_HIGHLIGHT_THRESHOLD,
    ATTENDANCE_POINTS,
    STATUS_ABSENT,
    STATUS_EXCUSED,
    STATUS_LATE,
    STATUS_PRESENT,
    STATUS_SICK,
)
from roboclub.utils import is_soft_deleted

from .models import AttendanceStats, CaangAttendanceSummary

COUNTED_STATUSES = (
    STATUS_PRESENT,
    STATUS_LATE,
    STATUS_EXCUSED,
    STATUS_SICK,
    STATUS_ABSENT,
)


def points_from_status(status: str) -> int:
    """Return the points awarded for an attendance status."""
    return ATTENDANCE_POINTS.get(status, 0)


def calculate_attendance_stats(attendances: list[dict[str, Any]]) -> AttendanceStats:
    """Count attendance records per status."""
    stats: AttendanceStats = {
        "totalCaang": len(attendances),
        "present": 0,
        "late": 0,
        "excused": 0,
        "sick": 0,
        "absent": 0,
    }
    for attendance in attendances:
        status = attendance.get("status")
        if status in COUNTED_STATUSES:
            stats[status] += 1  # type: ignore[literal-required]
    return stats


def users_with_attendance_status(
    users: list[dict[str, Any]], attendances: list[dict[str, Any]], activity_id: str
) -> list[dict[str, Any]]:
    """List every member for one activity, absent when nothing was recorded."""
    attendance_map = {
        a["userId"]: a
        for a in attendances
        if a.get("activityId") == activity_id and not is_soft_deleted(a)
    }

    rows = []
    for user in users:
        attendance = attendance_map.get(user["id"])
        row = {
            "userId": user["id"],
            "userName": user.get("fullName", "Unknown"),
            "userNim": user.get("nim", "-"),
            "userProdi": user.get("prodi", "-"),
        }
        if attendance:
            row.update(
                {
                    "id": attendance["id"],
                    "attendanceId": attendance["id"],
                    "status": attendance.get("status", STATUS_ABSENT),
                    "hasAttendanceRecord": True,
                    "checkedInAt": attendance.get("checkedInAt"),
                    "method": attendance.get("method"),
                    "userNotes": attendance.get("userNotes"),
                    "adminNotes": attendance.get("adminNotes"),
                }
            )
        else:
            row.update(
                {
                    "id": f"norecord-{user['id']}",
                    "status": STATUS_ABSENT,
                    "hasAttendanceRecord": False,
                }
            )
        rows.append(row)
    return rows


def build_attendance_summary(
    attendances: list[dict[str, Any]],
    activities: list[dict[str, Any]],
    users: list[dict[str, Any]],
    highlight_threshold: float = ABSENCE_HIGHLIGHT_THRESHOLD,
) -> list[CaangAttendanceSummary]:
    """Build the per-member recap table, worst absence rate first.

    Activities without a record for a member count as absences.
    """
    activity_map = {a["id"]: a for a in activities}
    by_user: dict[str, list[dict[str, Any]]] = {}
    for attendance in attendances:
        if attendance.get("activityId") not in activity_map:
            continue
        if is_soft_deleted(attendance):
            continue
        by_user.setdefault(attendance["userId"], []).append(attendance)

    total_activities = len(activities)
    summaries: list[CaangAttendanceSummary] = []
    for user in users:
        user_attendances = by_user.get(user["id"], [])
        counts = dict.fromkeys(COUNTED_STATUSES, 0)
        records = []
        for attendance in user_attendances:
            status = attendance.get("status", STATUS_ABSENT)
            if status in counts:
                counts[status] += 1
            records.append(
                {
                    "activityId": attendance["activityId"],
                    "activityTitle": activity_map[attendance["activityId"]].get(
                        "title", "Unknown Activity"
                    ),
                    "status": status,
                }
            )

        recorded = {a["activityId"] for a in user_attendances}
        for activity in activities:
            if activity["id"] not in recorded:
                counts[STATUS_ABSENT] += 1
                records.append(
                    {
                        "activityId": activity["id"],
                        "activityTitle": activity.get("title", "Unknown Activity"),
                        "status": STATUS_ABSENT,
                    }
                )

        absent_percentage = (
            counts[STATUS_ABSENT] / total_activities * 100 if total_activities else 0.0
        )
        summaries.append(
            {
                "userId": user["id"],
                "userName": user.get("fullName", "Unknown"),
                "userNim": user.get("nim", "-"),
                "userProdi": user.get("prodi", "-"),
                "isBlacklisted": bool(user.get("isBlacklisted", False)),
                "isActive": bool(user.get("isActive", True)),
                "attendanceRecords": records,
                "totalActivities": total_activities,
                "presentCount": counts[STATUS_PRESENT],
                "lateCount": counts[STATUS_LATE],
                "excusedCount": counts[STATUS_EXCUSED],
                "sickCount": counts[STATUS_SICK],
                "absentCount": counts[STATUS_ABSENT],
                "absentPercentage": absent_percentage,
                "isHighlighted": total_activities > 0
                and absent_percentage >= highlight_threshold,
            }
        )

    summaries.sort(key=lambda s: s["absentPercentage"], reverse=True)
    return summaries


def unique_or_periods(documents: list[dict[str, Any]]) -> list[str]:
    """Return the distinct OR periods found in the documents, newest first."""
    return sorted({d["orPeriod"] for d in documents if d.get("orPeriod")}, reverse=True)
