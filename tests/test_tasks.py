"""Tests for the task manager endpoints."""

import pytest

import tasks
from errors import InvalidInputError, NotFoundError
from schemas import Task, TaskUpdate


class TestTaskService:
    def test_create_defaults(self, db):
        task = tasks.create_task(db, Task(title="  Write docs  "))
        assert task["title"] == "Write docs"
        assert task["status"] == "todo"
        assert task["priority"] == "medium"
        assert "createdAt" in task

    def test_list_newest_first(self, db):
        first = tasks.create_task(db, Task(title="first"))
        second = tasks.create_task(db, Task(title="second"))
        assert [t["id"] for t in tasks.list_tasks(db)] == [second["id"], first["id"]]

    def test_partial_update(self, db):
        task = tasks.create_task(db, Task(title="t", priority="high"))
        updated = tasks.update_task(db, task["id"], TaskUpdate(status="completed"))
        assert updated["status"] == "completed"
        assert updated["priority"] == "high"
        assert updated["title"] == "t"

    def test_update_rejects_empty_and_null(self, db):
        task = tasks.create_task(db, Task(title="t"))
        with pytest.raises(InvalidInputError):
            tasks.update_task(db, task["id"], TaskUpdate())
        with pytest.raises(InvalidInputError):
            tasks.update_task(db, task["id"], TaskUpdate(title=None))

    def test_missing_task(self, db):
        with pytest.raises(NotFoundError):
            tasks.get_task(db, "64b000000000000000000000")
        with pytest.raises(NotFoundError):
            tasks.update_task(db, "bad-id", TaskUpdate(status="todo"))
        with pytest.raises(NotFoundError):
            tasks.delete_task(db, "64b000000000000000000000")


class TestTasksApi:
    def test_crud_flow(self, client):
        response = client.post("/tasks", json={"title": "Ship it", "priority": "high", "dueDate": "2026-11-01T00:00:00"})
        assert response.status_code == 201
        task = response.json()
        assert task["dueDate"].startswith("2026-11-01")

        response = client.get(f"/tasks/{task['id']}")
        assert response.status_code == 200
        assert response.json()["title"] == "Ship it"

        response = client.put(f"/tasks/{task['id']}", json={"status": "in-progress"})
        assert response.status_code == 200
        assert response.json()["status"] == "in-progress"

        response = client.get("/tasks")
        assert [t["id"] for t in response.json()] == [task["id"]]

        response = client.delete(f"/tasks/{task['id']}")
        assert response.status_code == 200
        assert response.json() == {"message": "Task deleted successfully"}

        assert client.get(f"/tasks/{task['id']}").status_code == 404

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"title": ""},
            {"title": "x" * 101},
            {"title": "ok", "description": "d" * 501},
            {"title": "ok", "status": "blocked"},
            {"title": "ok", "priority": "urgent"},
        ],
    )
    def test_create_validation(self, client, body):
        response = client.post("/tasks", json=body)
        assert response.status_code == 400
        assert "error" in response.json()

    def test_update_validation(self, client):
        task = client.post("/tasks", json={"title": "t"}).json()
        response = client.put(f"/tasks/{task['id']}", json={"title": "x" * 101})
        assert response.status_code == 400

    def test_not_found(self, client):
        response = client.get("/tasks/64b000000000000000000000")
        assert response.status_code == 404
        assert response.json() == {"error": "Task not found"}
        assert client.put("/tasks/nope", json={"status": "todo"}).status_code == 404
        assert client.delete("/tasks/nope").status_code == 404
