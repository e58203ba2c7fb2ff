import pytest


@pytest.fixture
def project_id(make_project, users):
    return make_project("EZ Cut Media", user_ids=[users["rahul"].id])


def _create(client, project_id, **fields):
    res = client.post("/tasks/", json={"project_id": project_id, "title": "Design UI", **fields})
    assert res.status_code == 201, res.text
    return res.json()


def _count(client, project_id):
    projects = {p["id"]: p for p in client.get("/projects/").json()}
    return projects[project_id]["task_count"]


def test_create_task_defaults(client_for, project_id):
    task = _create(client_for("rahul"), project_id, due_date="2026-11-01")

    assert task["status"] == "TO_START"
    assert task["priority"] == 1
    assert task["completed_at"] is None
    assert task["is_soft_deleted"] is False
    assert task["due_date"] == "2026-11-01"


def test_create_task_validation(client_for, project_id):
    client = client_for("rahul")
    assert client.post("/tasks/", json={"project_id": project_id, "title": "  "}).status_code == 400
    assert client.post("/tasks/", json={"project_id": project_id, "title": "x", "priority": 5}).status_code == 422
    assert client.post("/tasks/", json={"project_id": project_id, "title": "x", "due_date": "soon"}).status_code == 422


def test_non_member_cannot_reach_tasks(client_for, make_project, users):
    other = make_project("Private")
    sarada = client_for("sarada")
    task = _create(sarada, other)
    rahul = client_for("rahul")

    assert rahul.post("/tasks/", json={"project_id": other, "title": "x"}).status_code == 404
    assert rahul.get(f"/tasks/{task['id']}").status_code == 404
    assert rahul.patch(f"/tasks/{task['id']}/status", json={"status": "COMPLETED"}).status_code == 404
    assert rahul.delete(f"/tasks/{task['id']}").status_code == 404


def test_completed_at_follows_status(client_for, project_id):
    client = client_for("rahul")
    task = _create(client, project_id)

    moved = client.patch(f"/tasks/{task['id']}/status", json={"status": "IN_PROGRESS"}).json()
    assert moved["status"] == "IN_PROGRESS"
    assert moved["completed_at"] is None

    done = client.patch(f"/tasks/{task['id']}/status", json={"status": "COMPLETED"}).json()
    assert done["completed_at"] is not None

    again = client.patch(f"/tasks/{task['id']}/status", json={"status": "COMPLETED"}).json()
    assert again["completed_at"] == done["completed_at"]

    back = client.patch(f"/tasks/{task['id']}/status", json={"status": "TO_START"}).json()
    assert back["completed_at"] is None


def test_unknown_status_is_rejected(client_for, project_id):
    client = client_for("rahul")
    task = _create(client, project_id)
    assert client.patch(f"/tasks/{task['id']}/status", json={"status": "DONE"}).status_code == 422


def test_edit_task_fields(client_for, project_id):
    client = client_for("rahul")
    task = _create(client, project_id)
    client.patch(f"/tasks/{task['id']}/status", json={"status": "COMPLETED"})

    res = client.put(f"/tasks/{task['id']}", json={"title": "Final UI", "priority": 3, "due_date": "2026-12-24"})
    assert res.status_code == 200
    edited = res.json()
    assert edited["title"] == "Final UI"
    assert edited["priority"] == 3
    assert edited["due_date"] == "2026-12-24"
    assert edited["status"] == "COMPLETED"
    assert edited["completed_at"] is not None

    assert client.put(f"/tasks/{task['id']}", json={"title": ""}).status_code == 400


def test_edit_cannot_null_out_priority(client_for, project_id):
    client = client_for("rahul")
    task = _create(client, project_id, priority=3)

    assert client.put(f"/tasks/{task['id']}", json={"priority": None}).status_code == 400
    assert client.get(f"/tasks/{task['id']}").json()["priority"] == 3


@pytest.mark.parametrize("username", ["sarada", "rahul"])
def test_non_super_admin_delete_is_soft(client_for, project_id, username):
    client = client_for(username)
    task = _create(client, project_id)
    before = _count(client, project_id)

    res = client.delete(f"/tasks/{task['id']}")
    assert res.status_code == 200
    assert res.json() == {"task_id": task["id"], "mode": "soft_deleted"}

    stored = client.get(f"/tasks/{task['id']}").json()
    assert stored["is_soft_deleted"] is True
    assert stored["status"] == "TO_START"
    assert _count(client, project_id) == before

    # Inert for everyone but the super-admin
    assert client.patch(f"/tasks/{task['id']}/status", json={"status": "COMPLETED"}).status_code == 403
    assert client.put(f"/tasks/{task['id']}", json={"title": "again"}).status_code == 403
    assert client.delete(f"/tasks/{task['id']}").status_code == 403


def test_super_admin_delete_erases(client_for, project_id):
    admin = client_for("nkc")
    task = _create(admin, project_id)
    before = _count(admin, project_id)

    res = admin.delete(f"/tasks/{task['id']}")
    assert res.json() == {"task_id": task["id"], "mode": "erased"}
    assert admin.get(f"/tasks/{task['id']}").status_code == 404
    assert _count(admin, project_id) == before - 1


def test_super_admin_can_erase_soft_deleted_task(client_for, project_id):
    task = _create(client_for("rahul"), project_id)
    client_for("sarada").delete(f"/tasks/{task['id']}")

    admin = client_for("nkc")
    assert admin.delete(f"/tasks/{task['id']}").json()["mode"] == "erased"
    assert admin.get(f"/tasks/{task['id']}").status_code == 404


def test_missing_task_is_not_found(client_for, project_id):
    client = client_for("nkc")
    assert client.get("/tasks/9999").status_code == 404
    assert client.delete("/tasks/9999").status_code == 404
