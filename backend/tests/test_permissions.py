"""Tests for the role permission table and the per-role dispatch tables."""

import pytest

from orchestrate.errors import Forbidden
from orchestrate.models.user import UserRole
from orchestrate.permissions import (
    MANAGER_TIER, PERMISSIONS, Action, Principal, can, is_manager, require,
)
from orchestrate.services import task_service, visibility, workload


class TestPermissionTable:
    def test_every_role_has_an_entry(self):
        assert set(PERMISSIONS) == set(UserRole)

    def test_dispatch_tables_cover_every_role(self):
        assert set(task_service._SCOPES) == set(UserRole)
        assert set(visibility._ROLE_VIEWS) == set(UserRole)
        assert set(workload._DEVELOPER_SCOPES) == set(UserRole)

    def test_only_admin_manages_users(self):
        holders = {role for role, actions in PERMISSIONS.items() if Action.MANAGE_USERS in actions}
        assert holders == {UserRole.ADMIN}

    @pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.PROJECT_MANAGER])
    def test_manager_tier_can_manage_tasks_and_bookings(self, role):
        p = Principal(id=1, role=role)
        assert can(p, Action.CREATE_TASK)
        assert can(p, Action.DELETE_TASK)
        assert can(p, Action.MANAGE_BOOKINGS)
        assert is_manager(p)

    def test_developer_can_only_list_tasks(self):
        assert PERMISSIONS[UserRole.DEVELOPER] == frozenset({Action.LIST_TASKS})

    @pytest.mark.parametrize("role", [UserRole.STAFF, UserRole.PUBLIC])
    def test_staff_and_public_have_no_task_actions(self, role):
        assert not PERMISSIONS[role]
        assert not is_manager(Principal(id=1, role=role))

    def test_manager_tier_members(self):
        assert MANAGER_TIER == {UserRole.ADMIN, UserRole.PROJECT_MANAGER}


class TestRequire:
    def test_returns_principal_when_allowed(self):
        p = Principal(id=3, role=UserRole.ADMIN)
        assert require(p, Action.MANAGE_USERS) is p

    def test_raises_forbidden_with_message(self):
        p = Principal(id=3, role=UserRole.DEVELOPER)
        with pytest.raises(Forbidden, match="Nope"):
            require(p, Action.CREATE_TASK, "Nope")

    def test_anonymous_is_never_allowed(self):
        assert not can(None, Action.LIST_TASKS)
        with pytest.raises(Forbidden):
            require(None, Action.LIST_TASKS)
