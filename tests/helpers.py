"""Shared setup for the blueprint route tests."""

import unittest
from unittest.mock import MagicMock, patch

from roboclub import create_app

MOCK_ADMIN_ID = "admin1"
MOCK_ADMIN_DATA = {
    "profile": {"fullName": "Club Admin"},
    "roles": {"isAdmin": True, "isCaang": False},
}


class AdminRouteTestCase(unittest.TestCase):
    """Base test case with Firestore mocked and an admin able to log in."""

    # dotted module paths whose ``firestore`` import is replaced
    firestore_modules: tuple = ()
    # dotted names replaced by MagicMocks, exposed as self.mocks[<last part>]
    patched_services: tuple = ()

    def setUp(self):
        self.mock_firestore_service = MagicMock()
        patchers = {
            "init_app": patch("firebase_admin.initialize_app"),
            "firestore_app": patch(
                "roboclub.firestore", new=self.mock_firestore_service
            ),
        }
        for module in self.firestore_modules:
            patchers[module] = patch(
                f"{module}.firestore", new=self.mock_firestore_service
            )
        for target in self.patched_services:
            patchers[target.rsplit(".", 1)[-1]] = patch(target)

        self.mocks = {name: p.start() for name, p in patchers.items()}
        for p in patchers.values():
            self.addCleanup(p.stop)

        self.app = create_app(
            {"TESTING": True, "WTF_CSRF_ENABLED": False, "SERVER_NAME": "localhost"}
        )
        self.client = self.app.test_client()
        self.app_context = self.app.app_context()
        self.app_context.push()
        self.addCleanup(self.app_context.pop)

    def login_admin(self):
        with self.client.session_transaction() as sess:
            sess["user_id"] = MOCK_ADMIN_ID
            sess["is_admin"] = True
        mock_snapshot = MagicMock()
        mock_snapshot.exists = True
        mock_snapshot.to_dict.return_value = dict(MOCK_ADMIN_DATA)
        mock_db = self.mock_firestore_service.client.return_value
        mock_db.collection("users").document(MOCK_ADMIN_ID).get.return_value = (
            mock_snapshot
        )
