"""API tests for /api/tasks"""

import math

import pytest

from workforce.models import Notification, Task, User, UserStatus


class TestCreate:
    def test_create_returns_denormalized_task(self, client, register):
        owner = register()
        response = client.post(
            "/api/tasks",
            json={
                "title": "  Quarterly report  ",
                "description": "Numbers for Q3",
                "priority": "high",
                "dueDate": "2030-01-15T12:00:00+02:00",
                "estimatedHours": 4.5,
                "tags": ["finance", "q3"],
                "assignedTo": owner.id,
            },
            headers=owner.headers,
        )
        assert response.status_code == 201
        task = response.json()
        assert task["title"] == "Quarterly report"
        assert task["status"] == "todo"
        assert task["priority"] == "high"
        assert task["createdBy"] == owner.id
        assert task["assignedTo"] == owner.id
        assert task["actualHours"] == 0
        assert task["dueDate"].startswith("2030-01-15T10:00:00")
        assert task["creator"] == {"id": owner.id, "name": owner.user["name"], "email": owner.email}
        assert task["assignee"]["id"] == owner.id
        assert task["completedAt"] is None

    def test_defaults_and_null_assignee(self, client, register, create_task):
        owner = register()
        task = create_task(owner)
        assert task["priority"] == "medium"
        assert task["tags"] == []
        assert task["assignee"] is None

    def test_tags_keep_order_as_a_list(self, client, register, create_task):
        owner = register()
        created = create_task(owner, tags=["a", "b"])
        fetched = client.get(f"/api/tasks/{created['id']}", headers=owner.headers).json()
        assert fetched["tags"] == ["a", "b"]

    @pytest.mark.parametrize(
        "body",
        [
            {"title": "   "},
            {"title": "x" * 256},
            {},
            {"title": "ok", "priority": "critical"},
            {"title": "ok", "status": "pending"},
            {"title": "ok", "estimatedHours": -1},
            {"title": "ok", "dueDate": "next tuesday"},
            {"title": "ok", "tags": ["x" * 51]},
            {"title": "ok", "tags": [str(i) for i in range(21)]},
        ],
    )
    def test_invalid_payloads_are_rejected(self, client, register, body):
        owner = register()
        response = client.post("/api/tasks", json=body, headers=owner.headers)
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.parametrize("state", ["missing", "inactive"])
    def test_invalid_assignee_inserts_nothing(self, client, register, db, state):
        manager = register(role="manager")
        if state == "missing":
            assignee_id = 9999
        else:
            assignee_id = register().id
            db.query(User).filter(User.id == assignee_id).update({User.status: UserStatus.INACTIVE})
            db.commit()

        response = client.post(
            "/api/tasks", json={"title": "Orphan", "assignedTo": assignee_id}, headers=manager.headers
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ASSIGNEE"
        assert db.query(Task).count() == 0

    def test_invalid_board(self, client, register):
        owner = register()
        response = client.post("/api/tasks", json={"title": "x", "boardId": 404}, headers=owner.headers)
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_BOARD"

    def test_employee_cannot_assign_someone_else(self, client, register, db):
        employee = register()
        other = register()
        response = client.post(
            "/api/tasks", json={"title": "For you", "assignedTo": other.id}, headers=employee.headers
        )
        assert response.status_code == 403
        assert db.query(Task).count() == 0

    def test_unknown_assignee_is_reported_before_the_assignment_policy(self, client, register):
        employee = register()
        response = client.post("/api/tasks", json={"title": "x", "assignedTo": 9999}, headers=employee.headers)
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ASSIGNEE"

    def test_manager_assignment_notifies_assignee(self, client, register, db):
        manager = register(role="manager")
        employee = register()
        client.post("/api/tasks", json={"title": "Audit", "assignedTo": employee.id}, headers=manager.headers)

        notes = db.query(Notification).filter(Notification.user_id == employee.id).all()
        assert len(notes) == 1
        assert notes[0].related_type == "task"
        assert notes[0].notification_type.value == "task"

    def test_requires_authentication(self, client):
        assert client.post("/api/tasks", json={"title": "x"}).status_code == 401


class TestAccess:
    def test_end_to_end_roles(self, client, register, create_task):
        a = register()
        b = register(role="manager")
        c = register()

        task = create_task(a, title="A's work", assignedTo=a.id)
        url = f"/api/tasks/{task['id']}"

        assert client.get(url, headers=b.headers).status_code == 200
        updated = client.put(url, json={"priority": "urgent"}, headers=b.headers)
        assert updated.status_code == 200
        assert updated.json()["priority"] == "urgent"

        denied = client.get(url, headers=c.headers)
        assert denied.status_code == 403
        assert denied.json()["code"] == "ACCESS_DENIED"
        listed = client.get("/api/tasks", headers=c.headers).json()
        assert listed["tasks"] == []
        assert listed["pagination"]["total"] == 0

        assert client.delete(url, headers=b.headers).status_code == 200
        assert client.get(url, headers=a.headers).status_code == 404

    def test_missing_task_is_404(self, client, register):
        owner = register()
        response = client.get("/api/tasks/12345", headers=owner.headers)
        assert response.status_code == 404
        assert response.json()["code"] == "TASK_NOT_FOUND"

    def test_assignee_can_read_and_update(self, client, register, create_task):
        manager = register(role="manager")
        employee = register()
        task = create_task(manager, assignedTo=employee.id)

        url = f"/api/tasks/{task['id']}"
        assert client.get(url, headers=employee.headers).status_code == 200
        response = client.put(url, json={"actualHours": 2}, headers=employee.headers)
        assert response.status_code == 200
        assert response.json()["actualHours"] == 2

    def test_assignee_cannot_delete(self, client, register, create_task):
        manager = register(role="manager")
        employee = register()
        task = create_task(manager, assignedTo=employee.id)
        response = client.delete(f"/api/tasks/{task['id']}", headers=employee.headers)
        assert response.status_code == 403

    def test_list_never_leaks_other_users_tasks(self, client, register, create_task):
        manager = register(role="manager")
        me = register()
        other = register()

        mine = create_task(me, title="mine")
        assigned = create_task(manager, title="assigned to me", assignedTo=me.id)
        create_task(other, title="not mine")
        create_task(manager, title="assigned elsewhere", assignedTo=other.id)

        # Filters cannot widen what an employee sees
        response = client.get(f"/api/tasks?createdBy={other.id}", headers=me.headers).json()
        assert response["tasks"] == []

        ids = {t["id"] for t in client.get("/api/tasks", headers=me.headers).json()["tasks"]}
        assert ids == {mine["id"], assigned["id"]}
        for task in client.get("/api/tasks", headers=me.headers).json()["tasks"]:
            assert me.id in (task["createdBy"], task["assignedTo"])

        assert client.get("/api/tasks", headers=manager.headers).json()["pagination"]["total"] == 4


class TestUpdate:
    def test_partial_update_only_touches_given_fields(self, client, register, create_task):
        owner = register()
        task = create_task(owner, description="keep me", tags=["x"], priority="low")
        response = client.put(f"/api/tasks/{task['id']}", json={"title": "Renamed"}, headers=owner.headers)
        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Renamed"
        assert body["description"] == "keep me"
        assert body["tags"] == ["x"]
        assert body["priority"] == "low"
        assert body["updatedAt"] >= task["updatedAt"]

    def test_update_validates_like_create(self, client, register, create_task):
        owner = register()
        task = create_task(owner)
        url = f"/api/tasks/{task['id']}"
        assert client.put(url, json={"title": ""}, headers=owner.headers).status_code == 400
        assert client.put(url, json={"title": None}, headers=owner.headers).status_code == 400
        assert client.put(url, json={"status": None}, headers=owner.headers).status_code == 400
        assert client.put(url, json={"assignedTo": 999}, headers=owner.headers).json()["code"] == "INVALID_ASSIGNEE"

    def test_employee_cannot_reassign_to_third_party(self, client, register, create_task):
        owner = register()
        other = register()
        task = create_task(owner, assignedTo=owner.id)
        response = client.put(f"/api/tasks/{task['id']}", json={"assignedTo": other.id}, headers=owner.headers)
        assert response.status_code == 403
        assert response.json()["code"] == "REASSIGNMENT_DENIED"

    def test_employee_can_take_own_task_and_resend_same_assignee(self, client, register, create_task):
        owner = register()
        task = create_task(owner)
        url = f"/api/tasks/{task['id']}"
        assert client.put(url, json={"assignedTo": owner.id}, headers=owner.headers).status_code == 200
        assert client.put(url, json={"assignedTo": owner.id, "title": "again"}, headers=owner.headers).status_code == 200

    def test_manager_reassigns(self, client, register, create_task):
        manager = register(role="manager")
        first = register()
        second = register()
        task = create_task(manager, assignedTo=first.id)
        response = client.put(f"/api/tasks/{task['id']}", json={"assignedTo": second.id}, headers=manager.headers)
        assert response.status_code == 200
        assert response.json()["assignee"]["id"] == second.id
        assert client.get(f"/api/tasks/{task['id']}", headers=first.headers).status_code == 403

    def test_completion_stamps_and_clears_completed_at(self, client, register, create_task):
        owner = register()
        task = create_task(owner)
        url = f"/api/tasks/{task['id']}"
        done = client.put(url, json={"status": "completed"}, headers=owner.headers).json()
        assert done["completedAt"] is not None
        reopened = client.put(url, json={"status": "review"}, headers=owner.headers).json()
        assert reopened["completedAt"] is None


class TestStatusPatch:
    def test_any_transition_is_allowed(self, client, register, create_task):
        owner = register()
        task = create_task(owner)
        url = f"/api/tasks/{task['id']}/status"
        for status in ("completed", "todo", "cancelled", "in_progress"):
            response = client.patch(url, json={"status": status}, headers=owner.headers)
            assert response.status_code == 200
            assert response.json()["status"] == status

    def test_status_patch_checks_access_and_value(self, client, register, create_task):
        owner = register()
        stranger = register()
        task = create_task(owner)
        url = f"/api/tasks/{task['id']}/status"
        assert client.patch(url, json={"status": "done"}, headers=owner.headers).status_code == 400
        assert client.patch(url, json={"status": "review"}, headers=stranger.headers).status_code == 403

    def test_assignee_status_change_notifies_creator(self, client, register, create_task, db):
        manager = register(role="manager")
        employee = register()
        task = create_task(manager, assignedTo=employee.id)
        client.patch(f"/api/tasks/{task['id']}/status", json={"status": "review"}, headers=employee.headers)

        notes = db.query(Notification).filter(Notification.user_id == manager.id).all()
        assert len(notes) == 1
        assert "review" in notes[0].content


class TestDelete:
    def test_soft_delete_hides_task_everywhere(self, client, register, create_task, db):
        owner = register()
        task = create_task(owner)
        url = f"/api/tasks/{task['id']}"

        response = client.delete(url, headers=owner.headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Task deleted successfully"

        assert client.get(url, headers=owner.headers).status_code == 404
        assert client.put(url, json={"title": "zombie"}, headers=owner.headers).status_code == 404
        assert client.delete(url, headers=owner.headers).status_code == 404
        assert client.get("/api/tasks", headers=owner.headers).json()["tasks"] == []
        assert client.get("/api/tasks/stats", headers=owner.headers).json()["total"] == 0

        row = db.query(Task).filter(Task.id == task["id"]).one()
        assert row.deleted_at is not None


class TestListing:
    def test_pages_cover_every_task_once(self, client, register, create_task):
        owner = register()
        total = 7
        for i in range(total):
            create_task(owner, title=f"task {i}")

        limit = 3
        seen = []
        first = client.get(f"/api/tasks?limit={limit}", headers=owner.headers).json()
        assert first["pagination"]["totalPages"] == math.ceil(total / limit)
        assert first["pagination"]["hasNext"] is True
        assert first["pagination"]["hasPrev"] is False
        for page in range(1, first["pagination"]["totalPages"] + 1):
            data = client.get(f"/api/tasks?limit={limit}&page={page}", headers=owner.headers).json()
            seen.extend(t["id"] for t in data["tasks"])
        assert len(seen) == len(set(seen)) == total

        beyond = client.get(f"/api/tasks?limit={limit}&page=99", headers=owner.headers)
        assert beyond.status_code == 200
        assert beyond.json()["tasks"] == []
        assert beyond.json()["pagination"]["total"] == total

    def test_limit_is_clamped(self, client, register, create_task):
        owner = register()
        create_task(owner)
        data = client.get("/api/tasks?limit=1000&page=0", headers=owner.headers).json()
        assert data["pagination"]["limit"] == 100
        assert data["pagination"]["page"] == 1

    def test_unknown_sort_falls_back_to_created_at_desc(self, client, register, create_task):
        owner = register()
        ids = [create_task(owner, title=title)["id"] for title in ("b", "c", "a")]
        response = client.get(
            "/api/tasks", params={"sortBy": "hacked;DROP", "sortOrder": "sideways"}, headers=owner.headers
        )
        assert response.status_code == 200
        assert [t["id"] for t in response.json()["tasks"]] == list(reversed(ids))

    def test_sort_by_title_ascending(self, client, register, create_task):
        owner = register()
        for title in ("b", "c", "a"):
            create_task(owner, title=title)
        data = client.get("/api/tasks?sortBy=title&sortOrder=asc", headers=owner.headers).json()
        assert [t["title"] for t in data["tasks"]] == ["a", "b", "c"]

    def test_filters_and_search(self, client, register, create_task):
        owner = register()
        create_task(owner, title="Fix login bug", priority="urgent", status="in_progress")
        create_task(owner, title="Write docs", description="login flow", priority="low")
        create_task(owner, title="Plan sprint", priority="urgent")

        def titles(query):
            data = client.get(f"/api/tasks?{query}", headers=owner.headers).json()
            return sorted(t["title"] for t in data["tasks"])

        assert titles("priority=urgent") == ["Fix login bug", "Plan sprint"]
        assert titles("status=in_progress") == ["Fix login bug"]
        assert titles("search=LOGIN") == ["Fix login bug", "Write docs"]
        assert titles("search=login&priority=low") == ["Write docs"]
        assert titles(f"createdBy={owner.id}&assignedTo={owner.id}") == []

    def test_invalid_filter_value_is_rejected(self, client, register):
        owner = register()
        response = client.get("/api/tasks?status=bogus", headers=owner.headers)
        assert response.status_code == 400


class TestStats:
    def test_stats_cover_visible_tasks(self, client, register, create_task):
        owner = register()
        other = register()
        create_task(owner, status="completed")
        create_task(owner, priority="urgent", dueDate="2000-01-01T00:00:00Z")
        create_task(owner, status="cancelled", dueDate="2000-01-01T00:00:00Z")
        create_task(other)

        for path in ("/api/tasks/stats", "/api/tasks/stats/overview"):
            stats = client.get(path, headers=owner.headers)
            assert stats.status_code == 200
            data = stats.json()
            assert data["total"] == 3
            assert data["byStatus"]["completed"] == 1
            assert data["byStatus"]["todo"] == 1
            assert data["byStatus"]["review"] == 0
            assert data["byPriority"]["urgent"] == 1
            assert data["byPriority"]["medium"] == 2
            assert data["overdue"] == 1
            assert data["completionRate"] == pytest.approx(33.33)
            assert len(data["monthlyTrend"]) == 6
            current = data["monthlyTrend"][-1]
            assert current["created"] == 3
            assert current["completed"] == 1
