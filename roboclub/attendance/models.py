"""Data models for the attendance blueprint."""

from __future__ import annotations

from typing import Any, TypedDict

from roboclub.core.types import SoftDeletableDocument


class Attendance(SoftDeletableDocument, total=False):
    """An attendance document in Firestore."""

    activityId: str
    userId: str
    orPeriod: str
    status: str
    method: str
    checkedInAt: Any
    checkedInBy: str
    userNotes: str
    adminNotes: str
    points: int


class AttendanceStats(TypedDict):
    """Status counts for a set of attendance records."""

    totalCaang: int
    present: int
    late: int
    excused: int
    sick: int
    absent: int


class AttendanceRecord(TypedDict):
    """One cell of the recap table."""

    activityId: str
    activityTitle: str
    status: str


class CaangAttendanceSummary(TypedDict):
    """Per-member recap across all activities of a period."""

    userId: str
    userName: str
    userNim: str
    userProdi: str
    isBlacklisted: bool
    isActive: bool
    attendanceRecords: list[AttendanceRecord]
    totalActivities: int
    presentCount: int
    lateCount: int
    excusedCount: int
    sickCount: int
    absentCount: int
    absentPercentage: float
    isHighlighted: bool


class AttendanceSummary(TypedDict):
    """Result of the attendance percentage calculation for one member."""

    attendancePercentage: float
    totalActivities: int
    attendedActivities: int
