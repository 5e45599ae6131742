"""Tests for the member blueprint."""

import unittest

from tests.helpers import AdminRouteTestCase

MEMBERS = [
    {
        "id": "u1",
        "fullName": "Ana Wijaya",
        "nim": "001",
        "prodi": "TI",
        "attendancePercentage": 20.0,
        "totalActivities": 5,
        "attendedActivities": 1,
        "isLowAttendance": True,
    },
    {
        "id": "u2",
        "fullName": "Budi Santoso",
        "nim": "002",
        "prodi": "SI",
        "attendancePercentage": 80.0,
        "totalActivities": 5,
        "attendedActivities": 4,
        "isLowAttendance": False,
    },
]


class MemberRoutesTestCase(AdminRouteTestCase):
    firestore_modules = ("roboclub.member.routes",)
    patched_services = ("roboclub.member.routes.MemberService",)

    def setUp(self):
        super().setUp()
        self.mocks["MemberService"].get_caang_with_attendance.side_effect = (
            lambda *args, **kwargs: [dict(m) for m in MEMBERS]
        )

    def test_members_sorted_by_attendance(self):
        self.login_admin()
        response = self.client.get("/member/")

        self.assertEqual(response.status_code, 200)
        body = response.data.decode()
        self.assertLess(body.index("Budi Santoso"), body.index("Ana Wijaya"))
        self.assertIn("80.00%", body)
        _, kwargs = self.mocks["MemberService"].get_caang_with_attendance.call_args
        self.assertEqual(kwargs, {"late_weight": 0.75, "low_threshold": 25.0})

    def test_search_by_nim(self):
        self.login_admin()
        response = self.client.get("/member/?search=002")
        self.assertIn(b"Budi Santoso", response.data)
        self.assertNotIn(b"Ana Wijaya", response.data)

    def test_low_attendance_filter(self):
        self.login_admin()
        response = self.client.get("/member/?low=1")
        self.assertIn(b"Ana Wijaya", response.data)
        self.assertNotIn(b"Budi Santoso", response.data)

    def test_requires_admin(self):
        response = self.client.get("/member/")
        self.assertEqual(response.status_code, 302)


if __name__ == "__main__":
    unittest.main()
