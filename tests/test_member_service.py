"""Tests for MemberService."""

import unittest

from roboclub import create_app
from roboclub.member.models import flatten_user
from roboclub.member.services import MemberService
from tests.conftest import add_activity, add_attendance, add_caang, make_mock_db


class MemberServiceTestCase(unittest.TestCase):
    def setUp(self):
        self.db = make_mock_db()
        self.app = create_app({"TESTING": True})
        self.app_context = self.app.app_context()
        self.app_context.push()

        add_caang(self.db, "u1", "Ana", nim="001")
        add_caang(self.db, "u2", "Budi", nim="002")
        add_caang(self.db, "u3", "Citra", is_active=False)
        add_caang(self.db, "admin", "Admin", is_caang=False)

    def tearDown(self):
        self.app_context.pop()

    def test_get_active_caang(self):
        members = MemberService.get_active_caang(self.db)
        self.assertEqual(sorted(m["id"] for m in members), ["u1", "u2"])
        ana = next(m for m in members if m["id"] == "u1")
        self.assertEqual(ana["fullName"], "Ana")
        self.assertEqual(ana["nim"], "001")
        self.assertEqual(MemberService.get_caang_count(self.db), 2)

    def test_get_caang_with_attendance(self):
        for activity_id in ("a1", "a2", "a3", "a4"):
            add_activity(self.db, activity_id)
        add_activity(self.db, "old", or_period="OR 20")
        add_attendance(self.db, "r1", "u1", "a1", "present")
        add_attendance(self.db, "r2", "u1", "a2", "present")
        add_attendance(self.db, "r3", "u1", "a3", "late")
        add_attendance(self.db, "r4", "u2", "old", "present", or_period="OR 20")

        members = {
            m["id"]: m for m in MemberService.get_caang_with_attendance(self.db, "OR 21")
        }
        self.assertEqual(members["u1"]["attendancePercentage"], 68.75)
        self.assertEqual(members["u1"]["attendedActivities"], 3)
        self.assertFalse(members["u1"]["isLowAttendance"])
        self.assertEqual(members["u2"]["attendancePercentage"], 0)
        self.assertEqual(members["u2"]["totalActivities"], 4)
        self.assertTrue(members["u2"]["isLowAttendance"])

    def test_annotate_with_custom_threshold(self):
        members = [{"id": "u1", "fullName": "Ana"}]
        activities = [{"id": "a1"}, {"id": "a2"}]
        attendances = [{"userId": "u1", "activityId": "a1", "status": "present"}]
        annotated = MemberService.annotate_with_attendance(
            members, activities, attendances, low_threshold=60
        )
        self.assertEqual(annotated[0]["attendancePercentage"], 50.0)
        self.assertTrue(annotated[0]["isLowAttendance"])

    def test_flatten_user_defaults(self):
        caang = flatten_user("u9", {"profile": {"nickname": "Dodo"}})
        self.assertEqual(caang["fullName"], "Dodo")
        self.assertEqual(caang["nim"], "-")
        self.assertFalse(caang["isActive"])


if __name__ == "__main__":
    unittest.main()
