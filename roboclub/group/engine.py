"""Attendance-balanced sub-group generation."""

from __future__ import annotations

from typing import Any

from firebase_admin import firestore

from roboclub.core.constants import LOW_ATTENDANCE_THRESHOLD, SUB_GROUP_NAME_PREFIX
from roboclub.errors import ValidationError

from .models import MemberSnapshot, SubGroup


def sub_group_name(number: int) -> str:
    """Return the display name of the n-th sub-group."""
    return f"{SUB_GROUP_NAME_PREFIX} {number}"


def make_snapshot(
    member: dict[str, Any], low_threshold: float = LOW_ATTENDANCE_THRESHOLD
) -> MemberSnapshot:
    """Copy the fields a sub-group keeps about one of its members."""
    percentage = member.get("attendancePercentage", 0) or 0
    return {
        "userId": member.get("userId") or member["id"],
        "fullName": member.get("fullName", "Unknown"),
        "nim": member.get("nim", "-"),
        "attendancePercentage": percentage,
        "totalActivities": member.get("totalActivities", 0),
        "attendedActivities": member.get("attendedActivities", 0),
        "isLowAttendance": percentage < low_threshold,
    }


class SubGroupGenerator:
    """Partitions a roster into sub-groups with balanced attendance."""

    @staticmethod
    def validate(members: list[dict[str, Any]], group_count: int) -> None:
        """Reject a generation request before anything is written."""
        if group_count is None or group_count < 1:
            raise ValidationError("Group count must be at least 1.")
        if not members:
            raise ValidationError("No eligible members are available for grouping.")

    @staticmethod
    def rank(members: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Order members by attendance, highest first.

        sorted() is stable, so members with equal attendance keep their
        input order.
        """
        return sorted(
            members,
            key=lambda m: m.get("attendancePercentage", 0) or 0,
            reverse=True,
        )

    @staticmethod
    def distribute(
        members: list[dict[str, Any]], group_count: int
    ) -> list[list[dict[str, Any]]]:
        """Deal ranked members into buckets round-robin (member i -> i mod n)."""
        buckets: list[list[dict[str, Any]]] = [[] for _ in range(group_count)]
        for index, member in enumerate(members):
            buckets[index % group_count].append(member)
        return buckets

    @staticmethod
    def generate(
        members: list[dict[str, Any]],
        group_count: int,
        parent_id: str,
        or_period: str,
        acting_user_id: str,
        low_threshold: float = LOW_ATTENDANCE_THRESHOLD,
        start_number: int = 1,
    ) -> list[SubGroup]:
        """Build one sub-group document per bucket, ready to be written.

        The first member dealt into a bucket has the highest attendance in it
        and becomes the leader; empty buckets have no leader.
        """
        SubGroupGenerator.validate(members, group_count)
        buckets = SubGroupGenerator.distribute(
            SubGroupGenerator.rank(members), group_count
        )

        sub_groups: list[SubGroup] = []
        for offset, bucket in enumerate(buckets):
            snapshots = [make_snapshot(m, low_threshold) for m in bucket]
            member_ids = [s["userId"] for s in snapshots]
            number = start_number + offset
            sub_groups.append(
                {
                    "parentId": parent_id,
                    "name": sub_group_name(number),
                    "description": "",
                    "orPeriod": or_period,
                    "sequence": number,
                    "memberIds": member_ids,
                    "leaderId": member_ids[0] if member_ids else None,
                    "members": snapshots,
                    "isActive": True,
                    "createdBy": acting_user_id,
                    "createdAt": firestore.SERVER_TIMESTAMP,
                    "updatedAt": firestore.SERVER_TIMESTAMP,
                }
            )
        return sub_groups
