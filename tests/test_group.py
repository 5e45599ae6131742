"""Tests for the group blueprint."""

import unittest
from unittest.mock import ANY, MagicMock, patch

from roboclub import create_app
from roboclub.errors import GenerationError, NotFoundError, ValidationError

MOCK_USER_ID = "admin1"
MOCK_USER_DATA = {
    "profile": {"fullName": "Club Admin"},
    "roles": {"isAdmin": True, "isCaang": False},
}
MOCK_PARENT = {
    "id": "parent1",
    "name": "Mentoring",
    "orPeriod": "OR 21",
    "description": "",
    "isActive": True,
    "totalSubGroups": 1,
    "totalMembers": 2,
}
MOCK_SUB_GROUP = {
    "id": "sub1",
    "parentId": "parent1",
    "name": "Group 1",
    "sequence": 1,
    "memberIds": ["u1", "u2"],
    "leaderId": "u1",
    "members": [
        {
            "userId": "u1",
            "fullName": "Ana Wijaya",
            "nim": "001",
            "attendancePercentage": 90.0,
            "isLowAttendance": False,
        },
        {
            "userId": "u2",
            "fullName": "Budi Santoso",
            "nim": "002",
            "attendancePercentage": 10.0,
            "isLowAttendance": True,
        },
    ],
}
MOCK_UNASSIGNED = [
    {
        "id": "u3",
        "fullName": "Citra Lestari",
        "nim": "003",
        "attendancePercentage": 55.5,
        "isLowAttendance": False,
    }
]


class GroupRoutesTestCase(unittest.TestCase):
    """Test case for the group blueprint."""

    def setUp(self):
        """Set up a test client and a mocked Firestore and GroupService."""
        self.mock_firestore_service = MagicMock()

        patchers = {
            "init_app": patch("firebase_admin.initialize_app"),
            "firestore_routes": patch(
                "roboclub.group.routes.firestore", new=self.mock_firestore_service
            ),
            "firestore_app": patch(
                "roboclub.firestore", new=self.mock_firestore_service
            ),
            "group_service": patch("roboclub.group.routes.GroupService"),
        }

        self.mocks = {name: p.start() for name, p in patchers.items()}
        for p in patchers.values():
            self.addCleanup(p.stop)

        service = self.mocks["group_service"]
        service.get_group_parent.return_value = MOCK_PARENT
        service.get_sub_groups.return_value = [MOCK_SUB_GROUP]
        service.get_unassigned_caang.return_value = MOCK_UNASSIGNED
        service.get_group_parents.return_value = [MOCK_PARENT]
        service.get_or_periods.return_value = ["OR 21"]

        self.app = create_app(
            {"TESTING": True, "WTF_CSRF_ENABLED": False, "SERVER_NAME": "localhost"}
        )
        self.client = self.app.test_client()
        self.app_context = self.app.app_context()
        self.app_context.push()

    def tearDown(self):
        """Tear down the test client."""
        self.app_context.pop()

    def _set_session_user(self, is_admin=True):
        with self.client.session_transaction() as sess:
            sess["user_id"] = MOCK_USER_ID
            sess["is_admin"] = is_admin
        mock_db = self.mock_firestore_service.client.return_value
        mock_user_snapshot = MagicMock()
        mock_user_snapshot.exists = True
        mock_user_snapshot.to_dict.return_value = dict(MOCK_USER_DATA)
        mock_db.collection("users").document(MOCK_USER_ID).get.return_value = (
            mock_user_snapshot
        )

    def test_anonymous_user_is_redirected_to_login(self):
        response = self.client.get("/group/")
        self.assertEqual(response.status_code, 302)
        self.assertIn("/auth/login", response.headers["Location"])

    def test_non_admin_is_rejected(self):
        self._set_session_user(is_admin=False)
        response = self.client.get("/group/")
        self.assertEqual(response.status_code, 302)
        self.mocks["group_service"].get_group_parents.assert_not_called()

    def test_view_groups(self):
        self._set_session_user()
        response = self.client.get("/group/?or_period=OR+21&status=active")

        self.assertEqual(response.status_code, 200)
        self.assertIn(b"Mentoring", response.data)
        _, kwargs = self.mocks["group_service"].get_group_parents.call_args
        self.assertEqual(kwargs, {"or_period": "OR 21", "is_active": True})

    def test_index_shows_groups(self):
        self._set_session_user()
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn(b"Mentoring", response.data)

    def test_create_group(self):
        self._set_session_user()
        self.mocks["group_service"].create_group_parent.return_value = "parent1"

        response = self.client.post(
            "/group/create",
            data={"name": "Mentoring", "or_period": "OR 21", "is_active": "y"},
            follow_redirects=True,
        )

        self.assertEqual(response.status_code, 200)
        self.assertIn(b"Group created successfully.", response.data)
        _, kwargs = self.mocks["group_service"].create_group_parent.call_args
        self.assertEqual(kwargs["name"], "Mentoring")
        self.assertEqual(kwargs["acting_user_id"], MOCK_USER_ID)

    def test_view_group(self):
        self._set_session_user()
        response = self.client.get("/group/parent1")

        self.assertEqual(response.status_code, 200)
        self.assertIn(b"Group 1", response.data)
        self.assertIn(b"Ana Wijaya", response.data)
        self.assertIn(b"Citra Lestari", response.data)
        self.assertIn(b"55.50%", response.data)

    def test_view_group_search(self):
        self._set_session_user()
        response = self.client.get("/group/parent1?search=zzz")
        self.assertEqual(response.status_code, 200)
        self.assertIn(b"No sub-groups yet.", response.data)

    def test_view_missing_group(self):
        self._set_session_user()
        self.mocks["group_service"].get_group_parent.side_effect = NotFoundError(
            "Group not found."
        )
        response = self.client.get("/group/missing", follow_redirects=True)
        self.assertEqual(response.status_code, 200)
        self.assertIn(b"Group not found.", response.data)

    def test_generate_sub_groups(self):
        self._set_session_user()
        self.mocks["group_service"].generate_sub_groups.return_value = {
            "createdCount": 3,
            "totalMembers": 10,
            "subGroupIds": ["s1", "s2", "s3"],
        }

        response = self.client.post(
            "/group/parent1/generate", data={"group_count": "3"}, follow_redirects=True
        )

        self.assertEqual(response.status_code, 200)
        self.assertIn(b"Generated 3 groups with 10 members.", response.data)
        args, kwargs = self.mocks["group_service"].generate_sub_groups.call_args
        self.assertEqual(args[1:], ("parent1", 3, MOCK_USER_ID))
        self.assertEqual(kwargs, {"late_weight": 0.75, "low_threshold": 25.0})

    def test_generate_rejects_zero(self):
        self._set_session_user()
        response = self.client.post(
            "/group/parent1/generate", data={"group_count": "0"}, follow_redirects=True
        )
        self.assertIn(b"Number of groups must be at least 1.", response.data)
        self.mocks["group_service"].generate_sub_groups.assert_not_called()

    def test_generate_failure_is_reported(self):
        self._set_session_user()
        self.mocks["group_service"].generate_sub_groups.side_effect = GenerationError()
        response = self.client.post(
            "/group/parent1/generate", data={"group_count": "2"}, follow_redirects=True
        )
        self.assertEqual(response.status_code, 200)
        self.assertIn(b"Failed to generate sub-groups.", response.data)

    def test_generate_with_empty_roster(self):
        self._set_session_user()
        self.mocks["group_service"].generate_sub_groups.side_effect = ValidationError(
            "No eligible members are available for grouping."
        )
        response = self.client.post(
            "/group/parent1/generate", data={"group_count": "5"}, follow_redirects=True
        )
        self.assertIn(b"No eligible members are available for grouping.", response.data)

    def test_create_empty_sub_groups(self):
        self._set_session_user()
        self.mocks["group_service"].create_empty_sub_groups.return_value = {
            "createdCount": 2,
            "totalMembers": 0,
            "subGroupIds": ["s1", "s2"],
        }
        response = self.client.post(
            "/group/parent1/empty",
            data={"count": "2", "starting_number": "4"},
            follow_redirects=True,
        )
        self.assertIn(b"Created 2 empty groups.", response.data)
        _, kwargs = self.mocks["group_service"].create_empty_sub_groups.call_args
        self.assertEqual(kwargs["starting_number"], 4)

    def test_edit_members_page(self):
        self._set_session_user()
        response = self.client.get("/group/parent1/members")
        self.assertEqual(response.status_code, 200)
        self.assertIn(b'name="members-sub1"', response.data)

    def test_edit_members_submit(self):
        self._set_session_user()
        response = self.client.post(
            "/group/parent1/members",
            data={"members-sub1": ["u1", "u3"], "leader-sub1": "u3"},
            follow_redirects=True,
        )

        self.assertIn(b"Group members updated successfully.", response.data)
        args, _ = self.mocks["group_service"].update_sub_group_members.call_args
        self.assertEqual(
            args[2],
            [{"subGroupId": "sub1", "memberIds": ["u1", "u3"], "leaderId": "u3"}],
        )

    def test_edit_members_validation_error(self):
        self._set_session_user()
        self.mocks["group_service"].update_sub_group_members.side_effect = (
            ValidationError("A member can only belong to one group at a time.")
        )
        response = self.client.post(
            "/group/parent1/members", data={"members-sub1": ["u1"]}
        )
        self.assertEqual(response.status_code, 200)
        self.assertIn(b"A member can only belong to one group at a time.", response.data)

    def test_refresh_snapshots(self):
        self._set_session_user()
        self.mocks["group_service"].refresh_member_snapshots.return_value = 1
        response = self.client.post("/group/parent1/refresh", follow_redirects=True)
        self.assertIn(b"Refreshed attendance for 1 groups.", response.data)

    def test_set_sub_group_leader(self):
        self._set_session_user()
        response = self.client.post(
            "/group/parent1/sub/sub1/leader", data={"leader": "u2"}, follow_redirects=True
        )
        self.assertIn(b"Sub-group leader updated.", response.data)
        self.mocks["group_service"].set_sub_group_leader.assert_called_once_with(
            ANY, "parent1", "sub1", "u2"
        )

    def test_delete_sub_group(self):
        self._set_session_user()
        response = self.client.post(
            "/group/parent1/sub/sub1/delete", follow_redirects=True
        )
        self.assertIn(b"Sub-group deleted.", response.data)
        self.mocks["group_service"].delete_sub_group.assert_called_once_with(
            ANY, "parent1", "sub1"
        )

    def test_sub_group_of_another_parent(self):
        self._set_session_user()
        self.mocks["group_service"].delete_sub_group.side_effect = NotFoundError(
            "Sub-group not found."
        )
        response = self.client.post(
            "/group/other/sub/sub1/delete", follow_redirects=True
        )
        self.assertIn(b"Sub-group not found.", response.data)
        self.mocks["group_service"].delete_sub_group.assert_called_once_with(
            ANY, "other", "sub1"
        )

    def test_trash_flow(self):
        self._set_session_user()
        self.mocks["group_service"].get_deleted_group_parents.return_value = [
            {**MOCK_PARENT, "deletedByName": "Club Admin"}
        ]

        response = self.client.post("/group/parent1/delete", follow_redirects=True)
        self.assertIn(b"Group moved to trash.", response.data)

        response = self.client.get("/group/trash")
        self.assertEqual(response.status_code, 200)
        self.assertIn(b"Club Admin", response.data)

        response = self.client.post("/group/parent1/purge", follow_redirects=True)
        self.assertIn(b"Group permanently deleted.", response.data)


if __name__ == "__main__":
    unittest.main()
