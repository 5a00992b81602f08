from django.contrib.auth import get_user_model
from django.test import RequestFactory, TestCase

from permissions.exceptions import RoleDeniedError, StaffInactiveError, StaffNotFoundError
from permissions.guard import assert_staff_role, get_staff
from permissions.roles import KITCHEN_ROLES, SETTLEMENT_ROLES, IsCashierOrAbove, IsKitchenStaff

User = get_user_model()


class StaffGuardTests(TestCase):
    def setUp(self):
        self.waiter = User.objects.create_user(email="waiter@example.com", password="pass", role="waiter")

    def test_role_allowed(self):
        staff = assert_staff_role(self.waiter.id, {"waiter", "cashier"})
        self.assertEqual(staff.pk, self.waiter.pk)

    def test_role_denied(self):
        with self.assertRaises(RoleDeniedError) as ctx:
            assert_staff_role(self.waiter.id, SETTLEMENT_ROLES)
        self.assertEqual(ctx.exception.role, "waiter")

    def test_inactive_staff(self):
        self.waiter.is_active = False
        self.waiter.save(update_fields=["is_active"])

        with self.assertRaises(StaffInactiveError):
            get_staff(self.waiter.id)

    def test_unknown_and_malformed_ids(self):
        with self.assertRaises(StaffNotFoundError):
            get_staff("00000000-0000-0000-0000-000000000000")
        with self.assertRaises(StaffNotFoundError):
            get_staff("nope")


class RolePermissionClassTests(TestCase):
    def _request_for(self, user):
        request = RequestFactory().get("/")
        request.user = user
        return request

    def test_kitchen_role_sets(self):
        cook = User.objects.create_user(email="cook@example.com", password="pass", role="kitchen")

        self.assertIn("kitchen", KITCHEN_ROLES)
        self.assertTrue(IsKitchenStaff().has_permission(self._request_for(cook), None))
        self.assertFalse(IsCashierOrAbove().has_permission(self._request_for(cook), None))
