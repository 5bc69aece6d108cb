"""Tests for developer workload aggregation."""

import pytest

from orchestrate.models import TaskStatus, UserRole
from orchestrate.services.workload import (
    RED_THRESHOLD, YELLOW_THRESHOLD, WorkloadIntensity, classify_intensity, compute_workload,
)
from tests.conftest import principal


@pytest.mark.parametrize("count,expected", [
    (0, WorkloadIntensity.GREEN),
    (YELLOW_THRESHOLD - 1, WorkloadIntensity.GREEN),
    (YELLOW_THRESHOLD, WorkloadIntensity.YELLOW),
    (RED_THRESHOLD - 1, WorkloadIntensity.YELLOW),
    (RED_THRESHOLD, WorkloadIntensity.RED),
    (20, WorkloadIntensity.RED),
])
def test_classify_intensity(count, expected):
    assert classify_intensity(count) == expected


class TestComputeWorkload:
    def test_counts_only_active_tasks_and_sums_hours(self, db, seed):
        admin = seed.user(UserRole.ADMIN)
        dev = seed.user(UserRole.DEVELOPER)
        project = seed.project()
        seed.task(project, assignee=dev, estimated_hours=3, actual_hours=1)
        seed.task(project, assignee=dev, status=TaskStatus.IN_REVIEW, estimated_hours=2)
        seed.task(project, assignee=dev, status=TaskStatus.DONE, estimated_hours=40, actual_hours=40)

        [load] = compute_workload(db, principal(admin))
        assert load.active_tasks_count == 2
        assert load.estimated_hours_total == 5
        assert load.actual_hours_total == 1
        assert load.workload_intensity == WorkloadIntensity.GREEN

    def test_to_dict_shape(self, db, seed):
        admin = seed.user(UserRole.ADMIN)
        dev = seed.user(UserRole.DEVELOPER)
        project = seed.project()
        for _ in range(RED_THRESHOLD):
            seed.task(project, assignee=dev)

        [data] = [w.to_dict() for w in compute_workload(db, principal(admin))]
        assert data["id"] == dev.id
        assert data["active_tasks_count"] == RED_THRESHOLD
        assert data["workload_intensity"] == "RED"
        assert data["estimated_hours_total"] == 0
        assert len(data["tasks_assigned"]) == RED_THRESHOLD

    def test_admin_sees_all_developers_including_idle(self, db, seed):
        admin = seed.user(UserRole.ADMIN)
        busy = seed.user(UserRole.DEVELOPER, name="Busy")
        seed.user(UserRole.DEVELOPER, name="Idle")
        seed.user(UserRole.STAFF)
        seed.task(seed.project(), assignee=busy)

        loads = compute_workload(db, principal(admin))
        assert [w.name for w in loads] == ["Busy", "Idle"]
        assert loads[1].workload_intensity == WorkloadIntensity.GREEN

    def test_pm_sees_developers_on_managed_projects(self, db, seed):
        pm = seed.user(UserRole.PROJECT_MANAGER)
        mine = seed.user(UserRole.DEVELOPER, name="Mine")
        foreign = seed.user(UserRole.DEVELOPER, name="Foreign")
        seed.task(seed.project(pm=pm), assignee=mine)
        seed.task(seed.project(), assignee=foreign)

        loads = compute_workload(db, principal(pm))
        assert [w.name for w in loads] == ["Mine"]

    def test_pm_counts_all_active_tasks_of_managed_developers(self, db, seed):
        pm = seed.user(UserRole.PROJECT_MANAGER)
        dev = seed.user(UserRole.DEVELOPER)
        seed.task(seed.project(pm=pm), assignee=dev)
        seed.task(seed.project(), assignee=dev)

        [load] = compute_workload(db, principal(pm))
        assert load.active_tasks_count == 2

    def test_pm_without_projects_sees_nobody(self, db, seed):
        pm = seed.user(UserRole.PROJECT_MANAGER)
        seed.task(seed.project(), assignee=seed.user(UserRole.DEVELOPER))
        assert compute_workload(db, principal(pm)) == []

    def test_developer_sees_only_self(self, db, seed):
        dev = seed.user(UserRole.DEVELOPER)
        seed.user(UserRole.DEVELOPER)

        loads = compute_workload(db, principal(dev))
        assert [w.id for w in loads] == [dev.id]

    @pytest.mark.parametrize("role", [UserRole.STAFF, UserRole.PUBLIC])
    def test_staff_and_public_get_empty_list(self, db, seed, role):
        seed.user(UserRole.DEVELOPER)
        assert compute_workload(db, principal(seed.user(role))) == []
