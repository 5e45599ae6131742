"""Service layer for parent groups and their sub-groups."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from firebase_admin import firestore
from flask import current_app

from roboclub.core.constants import (
    FIRESTORE_BATCH_LIMIT,
    GROUP_PARENTS_COLLECTION,
    LATE_ATTENDANCE_WEIGHT,
    LOW_ATTENDANCE_THRESHOLD,
    SUB_GROUPS_COLLECTION,
    USERS_COLLECTION,
)
from roboclub.errors import GenerationError, NotFoundError, ValidationError
from roboclub.member.services import MemberService
from roboclub.utils import display_name, drop_none, is_soft_deleted, snapshot_to_dict

from .engine import SubGroupGenerator, make_snapshot, sub_group_name
from .models import GenerationResult, GroupParent, SubGroupMemberUpdate

if TYPE_CHECKING:
    from google.cloud.firestore_v1.client import Client


class GroupService:
    """Service class for group-related operations."""

    # ------------------------------------------------------------------
    # Parent groups
    # ------------------------------------------------------------------

    @staticmethod
    def get_group_parents(
        db: Client, or_period: str | None = None, is_active: bool | None = None
    ) -> list[dict[str, Any]]:
        """Fetch parent groups, newest first, skipping the trashed ones."""
        query = db.collection(GROUP_PARENTS_COLLECTION)
        if or_period:
            query = query.where(filter=firestore.FieldFilter("orPeriod", "==", or_period))
        if is_active is not None:
            query = query.where(filter=firestore.FieldFilter("isActive", "==", is_active))

        parents = []
        for doc in query.stream():
            data = snapshot_to_dict(doc)
            if data and not is_soft_deleted(data):
                parents.append(data)
        parents.sort(key=lambda p: p.get("name", ""))
        return parents

    @staticmethod
    def get_or_periods(db: Client) -> list[str]:
        """Return the distinct OR periods used by parent groups."""
        periods = {
            (doc.to_dict() or {}).get("orPeriod")
            for doc in db.collection(GROUP_PARENTS_COLLECTION).stream()
        }
        return sorted(p for p in periods if p)

    @staticmethod
    def get_group_parent(
        db: Client, group_id: str, include_deleted: bool = False
    ) -> GroupParent:
        """Fetch one parent group or raise NotFoundError."""
        data = snapshot_to_dict(
            db.collection(GROUP_PARENTS_COLLECTION).document(group_id).get()
        )
        if data is None or (is_soft_deleted(data) and not include_deleted):
            raise NotFoundError("Group not found.")
        return data

    @staticmethod
    def create_group_parent(
        db: Client,
        name: str,
        or_period: str,
        acting_user_id: str,
        description: str = "",
        is_active: bool = True,
    ) -> str:
        """Create an empty parent group and return its id."""
        if not name or not name.strip():
            raise ValidationError("Group name is required.")
        if not or_period:
            raise ValidationError("OR period is required.")

        doc_ref = db.collection(GROUP_PARENTS_COLLECTION).document()
        doc_ref.set(
            {
                "name": name.strip(),
                "description": description or "",
                "orPeriod": or_period,
                "isActive": is_active,
                "totalSubGroups": 0,
                "totalMembers": 0,
                "leaderId": None,
                "createdBy": acting_user_id,
                "createdAt": firestore.SERVER_TIMESTAMP,
                "updatedAt": firestore.SERVER_TIMESTAMP,
            }
        )
        current_app.logger.info(f"Created group parent {doc_ref.id}")
        return doc_ref.id

    @staticmethod
    def update_group_parent(
        db: Client,
        group_id: str,
        name: str | None = None,
        description: str | None = None,
        or_period: str | None = None,
        is_active: bool | None = None,
    ) -> None:
        """Update the given parent group fields, ignoring the ones left as None."""
        GroupService.get_group_parent(db, group_id)
        updates = drop_none(
            {
                "name": name,
                "description": description,
                "orPeriod": or_period,
                "isActive": is_active,
            }
        )
        updates["updatedAt"] = firestore.SERVER_TIMESTAMP
        db.collection(GROUP_PARENTS_COLLECTION).document(group_id).update(updates)
        current_app.logger.info(f"Updated group parent {group_id}")

    @staticmethod
    def set_group_parent_leader(db: Client, group_id: str, leader_id: str) -> None:
        """Make a member of one of the parent's sub-groups its overall leader."""
        GroupService.get_group_parent(db, group_id)
        member_ids = {
            member_id
            for sub_group in GroupService.get_sub_groups(db, group_id)
            for member_id in sub_group.get("memberIds", [])
        }
        if leader_id not in member_ids:
            raise ValidationError("The leader must be a member of one of the sub-groups.")

        db.collection(GROUP_PARENTS_COLLECTION).document(group_id).update(
            {"leaderId": leader_id, "updatedAt": firestore.SERVER_TIMESTAMP}
        )
        current_app.logger.info(f"Updated group parent leader {group_id}")

    @staticmethod
    def soft_delete_group_parent(db: Client, group_id: str, acting_user_id: str) -> None:
        """Move a parent group to the trash."""
        GroupService.get_group_parent(db, group_id)
        db.collection(GROUP_PARENTS_COLLECTION).document(group_id).update(
            {
                "isActive": False,
                "deletedAt": firestore.SERVER_TIMESTAMP,
                "deletedBy": acting_user_id,
                "updatedAt": firestore.SERVER_TIMESTAMP,
            }
        )
        current_app.logger.info(f"Soft deleted group parent {group_id}")

    @staticmethod
    def get_deleted_group_parents(db: Client) -> list[dict[str, Any]]:
        """Fetch the trashed parent groups with the name of whoever deleted them."""
        deleted = []
        for doc in db.collection(GROUP_PARENTS_COLLECTION).stream():
            data = snapshot_to_dict(doc)
            if not is_soft_deleted(data):
                continue

            data["deletedByName"] = "-"
            deleted_by = data.get("deletedBy")
            if deleted_by:
                user_doc = db.collection(USERS_COLLECTION).document(deleted_by).get()
                if user_doc.exists:
                    profile = (user_doc.to_dict() or {}).get("profile")
                    data["deletedByName"] = display_name(profile)
                else:
                    data["deletedByName"] = "Unknown"
            deleted.append(data)
        return deleted

    @staticmethod
    def restore_group_parent(db: Client, group_id: str) -> None:
        """Bring a parent group back from the trash."""
        GroupService.get_group_parent(db, group_id, include_deleted=True)
        db.collection(GROUP_PARENTS_COLLECTION).document(group_id).update(
            {
                "isActive": True,
                "deletedAt": None,
                "deletedBy": None,
                "updatedAt": firestore.SERVER_TIMESTAMP,
            }
        )
        current_app.logger.info(f"Restored group parent {group_id}")

    @staticmethod
    def permanent_delete_group_parent(db: Client, group_id: str) -> None:
        """Delete a parent group and all of its sub-groups in one batch."""
        GroupService.get_group_parent(db, group_id, include_deleted=True)
        sub_group_docs = list(
            db.collection(SUB_GROUPS_COLLECTION)
            .where(filter=firestore.FieldFilter("parentId", "==", group_id))
            .stream()
        )

        batch = db.batch()
        for doc in sub_group_docs:
            batch.delete(doc.reference)
        batch.delete(db.collection(GROUP_PARENTS_COLLECTION).document(group_id))
        batch.commit()
        current_app.logger.info(
            f"Permanently deleted group parent {group_id} "
            f"and {len(sub_group_docs)} sub-groups"
        )

    # ------------------------------------------------------------------
    # Sub-groups
    # ------------------------------------------------------------------

    @staticmethod
    def get_sub_groups(db: Client, parent_id: str) -> list[dict[str, Any]]:
        """Fetch the sub-groups of a parent ordered by their number."""
        query = db.collection(SUB_GROUPS_COLLECTION).where(
            filter=firestore.FieldFilter("parentId", "==", parent_id)
        )
        sub_groups = []
        for doc in query.stream():
            data = snapshot_to_dict(doc)
            if data and not is_soft_deleted(data):
                sub_groups.append(data)
        sub_groups.sort(key=lambda s: s.get("sequence", 0))
        return sub_groups

    @staticmethod
    def get_sub_group(
        db: Client, sub_group_id: str, parent_id: str | None = None
    ) -> dict[str, Any]:
        """Fetch one sub-group or raise NotFoundError.

        When ``parent_id`` is given, a sub-group of another parent is not found.
        """
        data = snapshot_to_dict(
            db.collection(SUB_GROUPS_COLLECTION).document(sub_group_id).get()
        )
        if data is None or (parent_id is not None and data.get("parentId") != parent_id):
            raise NotFoundError("Sub-group not found.")
        return data

    @staticmethod
    def _counters(sub_groups: list[dict[str, Any]]) -> dict[str, int]:
        member_ids = {m for s in sub_groups for m in s.get("memberIds", [])}
        return {"totalSubGroups": len(sub_groups), "totalMembers": len(member_ids)}

    @staticmethod
    def _next_sequence(sub_groups: list[dict[str, Any]]) -> int:
        return max((s.get("sequence", 0) for s in sub_groups), default=0) + 1

    @staticmethod
    def recount_group_parent(db: Client, parent_id: str) -> dict[str, int]:
        """Recompute the parent's sub-group and member counters from its sub-groups."""
        counters = GroupService._counters(GroupService.get_sub_groups(db, parent_id))
        db.collection(GROUP_PARENTS_COLLECTION).document(parent_id).update(
            {**counters, "updatedAt": firestore.SERVER_TIMESTAMP}
        )
        return counters

    @staticmethod
    def generate_sub_groups(
        db: Client,
        parent_id: str,
        group_count: int,
        acting_user_id: str,
        late_weight: float = LATE_ATTENDANCE_WEIGHT,
        low_threshold: float = LOW_ATTENDANCE_THRESHOLD,
    ) -> GenerationResult:
        """Split the active roster into attendance-balanced sub-groups.

        The parent's existing sub-groups are replaced. Deleting them, writing
        the new ones and updating the parent's counters all happen in a
        single batch, so a failed commit leaves the previous grouping intact.

        Raises:
            ValidationError: If the count is not positive or nobody is eligible.
            GenerationError: If the batch could not be committed.
        """
        parent = GroupService.get_group_parent(db, parent_id)
        if group_count is None or group_count < 1:
            raise ValidationError("Group count must be at least 1.")
        if group_count + 1 > FIRESTORE_BATCH_LIMIT:
            raise ValidationError(
                f"Cannot generate more than {FIRESTORE_BATCH_LIMIT - 1} groups at once."
            )

        or_period = parent["orPeriod"]
        members = MemberService.get_caang_with_attendance(
            db, or_period, late_weight, low_threshold
        )
        sub_groups = SubGroupGenerator.generate(
            members,
            group_count,
            parent_id,
            or_period,
            acting_user_id,
            low_threshold=low_threshold,
        )

        existing = GroupService.get_sub_groups(db, parent_id)
        if len(existing) + group_count + 1 > FIRESTORE_BATCH_LIMIT:
            raise ValidationError(
                "Too many existing sub-groups to replace at once. "
                "Delete some of them first."
            )

        collection = db.collection(SUB_GROUPS_COLLECTION)
        batch = db.batch()
        for sub_group in existing:
            batch.delete(collection.document(sub_group["id"]))

        sub_group_ids = []
        for sub_group in sub_groups:
            doc_ref = collection.document()
            batch.set(doc_ref, sub_group)
            sub_group_ids.append(doc_ref.id)

        counters = GroupService._counters(sub_groups)
        batch.update(
            db.collection(GROUP_PARENTS_COLLECTION).document(parent_id),
            {**counters, "updatedAt": firestore.SERVER_TIMESTAMP},
        )

        try:
            batch.commit()
        except Exception as e:
            current_app.logger.error(f"Error generating sub-groups for {parent_id}: {e}")
            raise GenerationError() from e

        current_app.logger.info(
            f"Generated {group_count} sub-groups with {len(members)} members, "
            f"replacing {len(existing)}"
        )
        return {
            "createdCount": group_count,
            "totalMembers": len(members),
            "subGroupIds": sub_group_ids,
        }

    @staticmethod
    def create_empty_sub_groups(
        db: Client,
        parent_id: str,
        count: int,
        acting_user_id: str,
        starting_number: int | None = None,
    ) -> GenerationResult:
        """Create ``count`` empty sub-groups for members to be assigned by hand."""
        parent = GroupService.get_group_parent(db, parent_id)
        if count is None or count < 1:
            raise ValidationError("Group count must be at least 1.")
        if count + 1 > FIRESTORE_BATCH_LIMIT:
            raise ValidationError(
                f"Cannot create more than {FIRESTORE_BATCH_LIMIT - 1} groups at once."
            )

        existing = GroupService.get_sub_groups(db, parent_id)
        if starting_number is None:
            starting_number = GroupService._next_sequence(existing)

        collection = db.collection(SUB_GROUPS_COLLECTION)
        batch = db.batch()
        sub_group_ids = []
        for offset in range(count):
            number = starting_number + offset
            doc_ref = collection.document()
            batch.set(
                doc_ref,
                {
                    "parentId": parent_id,
                    "name": sub_group_name(number),
                    "description": "",
                    "orPeriod": parent["orPeriod"],
                    "sequence": number,
                    "memberIds": [],
                    "leaderId": None,
                    "members": [],
                    "isActive": True,
                    "createdBy": acting_user_id,
                    "createdAt": firestore.SERVER_TIMESTAMP,
                    "updatedAt": firestore.SERVER_TIMESTAMP,
                },
            )
            sub_group_ids.append(doc_ref.id)

        counters = GroupService._counters(existing)
        counters["totalSubGroups"] += count
        batch.update(
            db.collection(GROUP_PARENTS_COLLECTION).document(parent_id),
            {**counters, "updatedAt": firestore.SERVER_TIMESTAMP},
        )
        batch.commit()

        current_app.logger.info(f"Created {count} empty sub-groups for {parent_id}")
        return {
            "createdCount": count,
            "totalMembers": 0,
            "subGroupIds": sub_group_ids,
        }

    @staticmethod
    def set_sub_group_leader(
        db: Client, parent_id: str, sub_group_id: str, leader_id: str | None
    ) -> None:
        """Assign (or clear) the leader of a sub-group."""
        sub_group = GroupService.get_sub_group(db, sub_group_id, parent_id)
        if leader_id and leader_id not in sub_group.get("memberIds", []):
            raise ValidationError("The leader must be a member of the group.")

        db.collection(SUB_GROUPS_COLLECTION).document(sub_group_id).update(
            {"leaderId": leader_id or None, "updatedAt": firestore.SERVER_TIMESTAMP}
        )
        current_app.logger.info(f"Updated sub-group leader {sub_group_id}")

    @staticmethod
    def update_sub_group_members(
        db: Client,
        parent_id: str,
        updates: list[SubGroupMemberUpdate],
        late_weight: float = LATE_ATTENDANCE_WEIGHT,
        low_threshold: float = LOW_ATTENDANCE_THRESHOLD,
    ) -> None:
        """Rewrite the membership of several sub-groups of one parent at once.

        Member snapshots are rebuilt from the current roster. A member may
        belong to only one sub-group of the parent and every leader must be a
        member of its own sub-group.
        """
        parent = GroupService.get_group_parent(db, parent_id)
        sub_groups = {s["id"]: s for s in GroupService.get_sub_groups(db, parent_id)}

        edited_ids = set()
        for update in updates:
            if update["subGroupId"] not in sub_groups:
                raise NotFoundError("Sub-group not found.")
            edited_ids.add(update["subGroupId"])

        # Members of sub-groups outside this edit stay where they are
        taken = {
            member_id
            for sub_id, sub_group in sub_groups.items()
            if sub_id not in edited_ids
            for member_id in sub_group.get("memberIds", [])
        }
        for update in updates:
            member_ids = update.get("memberIds", [])
            for member_id in member_ids:
                if member_id in taken:
                    raise ValidationError(
                        "A member can only belong to one group at a time."
                    )
                taken.add(member_id)
            leader_id = update.get("leaderId")
            if leader_id and leader_id not in member_ids:
                raise ValidationError("The leader must be a member of the group.")

        roster = {
            m["id"]: m
            for m in MemberService.get_caang_with_attendance(
                db, parent["orPeriod"], late_weight, low_threshold
            )
        }

        batch = db.batch()
        collection = db.collection(SUB_GROUPS_COLLECTION)
        for update in updates:
            previous = {
                s["userId"]: s for s in sub_groups[update["subGroupId"]].get("members", [])
            }
            snapshots = []
            for member_id in update.get("memberIds", []):
                if member_id in roster:
                    snapshots.append(make_snapshot(roster[member_id], low_threshold))
                elif member_id in previous:
                    snapshots.append(previous[member_id])
                else:
                    raise ValidationError(f"Unknown member: {member_id}")
            batch.update(
                collection.document(update["subGroupId"]),
                {
                    "memberIds": list(update.get("memberIds", [])),
                    "members": snapshots,
                    "leaderId": update.get("leaderId") or None,
                    "updatedAt": firestore.SERVER_TIMESTAMP,
                },
            )
        batch.commit()

        GroupService.recount_group_parent(db, parent_id)
        current_app.logger.info(f"Updated members for {len(updates)} sub-groups")

    @staticmethod
    def delete_sub_group(db: Client, parent_id: str, sub_group_id: str) -> None:
        """Delete a sub-group and refresh its parent's counters."""
        GroupService.get_sub_group(db, sub_group_id, parent_id)
        db.collection(SUB_GROUPS_COLLECTION).document(sub_group_id).delete()
        GroupService.recount_group_parent(db, parent_id)
        current_app.logger.info(f"Deleted sub-group {sub_group_id}")

    @staticmethod
    def get_unassigned_caang(
        db: Client,
        parent_id: str,
        late_weight: float = LATE_ATTENDANCE_WEIGHT,
        low_threshold: float = LOW_ATTENDANCE_THRESHOLD,
    ) -> list[dict[str, Any]]:
        """List active members in none of the parent's sub-groups, best attendance first."""
        parent = GroupService.get_group_parent(db, parent_id)
        assigned = {
            member_id
            for sub_group in GroupService.get_sub_groups(db, parent_id)
            for member_id in sub_group.get("memberIds", [])
        }
        roster = MemberService.get_caang_with_attendance(
            db, parent["orPeriod"], late_weight, low_threshold
        )
        unassigned = [m for m in roster if m["id"] not in assigned]
        unassigned.sort(key=lambda m: m["attendancePercentage"], reverse=True)
        return unassigned

    @staticmethod
    def refresh_member_snapshots(
        db: Client,
        parent_id: str,
        late_weight: float = LATE_ATTENDANCE_WEIGHT,
        low_threshold: float = LOW_ATTENDANCE_THRESHOLD,
    ) -> int:
        """Recompute the stored attendance snapshots of every sub-group member.

        Members that left the active roster keep their last snapshot.
        Returns the number of sub-groups rewritten.
        """
        parent = GroupService.get_group_parent(db, parent_id)
        roster = {
            m["id"]: m
            for m in MemberService.get_caang_with_attendance(
                db, parent["orPeriod"], late_weight, low_threshold
            )
        }
        sub_groups = GroupService.get_sub_groups(db, parent_id)

        batch = db.batch()
        collection = db.collection(SUB_GROUPS_COLLECTION)
        for sub_group in sub_groups:
            snapshots = [
                make_snapshot(roster[s["userId"]], low_threshold)
                if s["userId"] in roster
                else s
                for s in sub_group.get("members", [])
            ]
            batch.update(
                collection.document(sub_group["id"]),
                {"members": snapshots, "updatedAt": firestore.SERVER_TIMESTAMP},
            )
        batch.commit()

        current_app.logger.info(
            f"Refreshed member snapshots for {len(sub_groups)} sub-groups of {parent_id}"
        )
        return len(sub_groups)
