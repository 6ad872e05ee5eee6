from helpers import API, PASSWORD, application_payload, job_payload


class TestAdmin:
    def test_requires_admin_role(self, client, register):
        _, h = register("client")
        r = client.get(f"{API}/admin/users", headers=h)
        assert r.status_code == 403
        assert client.get(f"{API}/admin/users").status_code == 401

    def test_list_users_with_filters(self, client, register, admin_headers):
        register("client")
        register("developer")
        register("developer")

        r = client.get(f"{API}/admin/users", headers=admin_headers)
        assert r.status_code == 200
        assert r.json()["total"] == 4
        r = client.get(f"{API}/admin/users", params={"role": "developer"}, headers=admin_headers)
        data = r.json()
        assert data["total"] == 2
        assert all(u["email"] for u in data["items"])

    def test_toggle_user_status(self, client, register, admin_headers):
        dev_id, dev_h = register("developer")
        r = client.put(f"{API}/admin/users/{dev_id}/toggle-status", headers=admin_headers)
        assert r.status_code == 200
        assert r.json()["is_active"] is False
        assert client.get(f"{API}/auth/me", headers=dev_h).status_code == 401
        r = client.post(f"{API}/auth/login", json={"email": "developer1@skillsync.dev", "password": PASSWORD})
        assert r.status_code == 401

        r = client.put(f"{API}/admin/users/{dev_id}/toggle-status", headers=admin_headers)
        assert r.json()["is_active"] is True

    def test_cannot_toggle_admin(self, client, admin_headers):
        admin_id = client.get(f"{API}/auth/me", headers=admin_headers).json()["id"]
        r = client.put(f"{API}/admin/users/{admin_id}/toggle-status", headers=admin_headers)
        assert r.status_code == 403

    def test_admin_delete_follows_lifecycle(self, client, register, admin_headers):
        _, client_h = register("client")
        dev_id, dev_h = register("developer")
        open_id = client.post(f"{API}/jobs", json=job_payload(), headers=client_h).json()["id"]
        busy_id = client.post(f"{API}/jobs", json=job_payload(), headers=client_h).json()["id"]
        client.post(f"{API}/applications/job/{busy_id}", json=application_payload(), headers=dev_h)
        client.post(f"{API}/jobs/hire", json={"job_id": busy_id, "developer_id": dev_id}, headers=client_h)

        assert client.delete(f"{API}/admin/jobs/{open_id}", headers=admin_headers).status_code == 204
        r = client.delete(f"{API}/admin/jobs/{busy_id}", headers=admin_headers)
        assert r.status_code == 409
        assert r.json()["kind"] == "state_conflict"

    def test_list_jobs_and_statistics(self, client, register, admin_headers):
        _, client_h = register("client")
        _, dev_h = register("developer")
        job_id = client.post(f"{API}/jobs", json=job_payload(), headers=client_h).json()["id"]
        cancelled = client.post(f"{API}/jobs", json=job_payload(), headers=client_h).json()["id"]
        client.post(f"{API}/jobs/{cancelled}/cancel", headers=client_h)
        client.post(f"{API}/applications/job/{job_id}", json=application_payload(), headers=dev_h)

        r = client.get(f"{API}/admin/jobs", headers=admin_headers)
        assert r.json()["total"] == 2
        r = client.get(f"{API}/admin/jobs", params={"status": "cancelled"}, headers=admin_headers)
        assert [j["id"] for j in r.json()["items"]] == [cancelled]

        stats = client.get(f"{API}/admin/statistics", headers=admin_headers).json()
        assert stats["users"]["by_role"] == {"client": 1, "developer": 1, "admin": 1}
        assert stats["jobs"]["by_status"]["open"] == 1
        assert stats["jobs"]["by_status"]["cancelled"] == 1
        assert stats["applications"]["total"] == 1
        assert stats["ratings"] == {"total": 0, "average": 0.0}


def _hired_job(client, client_h, dev_id, dev_h) -> str:
    job_id = client.post(f"{API}/jobs", json=job_payload(), headers=client_h).json()["id"]
    client.post(f"{API}/applications/job/{job_id}", json=application_payload(), headers=dev_h)
    r = client.post(f"{API}/jobs/hire", json={"job_id": job_id, "developer_id": dev_id}, headers=client_h)
    assert r.status_code == 200, r.text
    return job_id


def _rated_job(client, client_h, dev_id, dev_h, score: int) -> str:
    job_id = _hired_job(client, client_h, dev_id, dev_h)
    client.post(f"{API}/jobs/{job_id}/complete", headers=client_h)
    r = client.post(f"{API}/ratings", json={"job_id": job_id, "developer_id": dev_id, "rating": score}, headers=client_h)
    assert r.status_code == 201, r.text
    return job_id


class TestAdminDeleteUser:
    def test_delete_client_cascades_and_recomputes_rating(self, client, register, admin_headers):
        client1_id, client1_h = register("client")
        _, client2_h = register("client")
        dev_id, dev_h = register("developer")
        other_dev_id, other_dev_h = register("developer")

        rated_id = _rated_job(client, client1_h, dev_id, dev_h, 5)
        kept_id = _rated_job(client, client2_h, dev_id, dev_h, 3)
        open_id = client.post(f"{API}/jobs", json=job_payload(), headers=client1_h).json()["id"]
        client.post(f"{API}/applications/job/{open_id}", json=application_payload(), headers=other_dev_h)
        assert client.get(f"{API}/auth/me", headers=dev_h).json()["rating"] == 4.0

        r = client.delete(f"{API}/admin/users/{client1_id}", headers=admin_headers)
        assert r.status_code == 204

        assert client.get(f"{API}/users/{client1_id}", headers=admin_headers).status_code == 404
        assert client.get(f"{API}/auth/me", headers=client1_h).status_code == 401
        assert client.get(f"{API}/jobs/{rated_id}").status_code == 404
        assert client.get(f"{API}/jobs/{open_id}").status_code == 404
        assert client.get(f"{API}/jobs/{kept_id}").status_code == 200

        me = client.get(f"{API}/auth/me", headers=dev_h).json()
        assert me["rating"] == 3.0
        assert me["total_ratings"] == 1
        r = client.get(f"{API}/applications/my-applications", headers=other_dev_h)
        assert r.json()["total"] == 0

    def test_delete_developer_removes_applications(self, client, register, admin_headers):
        _, client_h = register("client")
        dev_id, dev_h = register("developer")
        job_id = client.post(f"{API}/jobs", json=job_payload(), headers=client_h).json()["id"]
        client.post(f"{API}/applications/job/{job_id}", json=application_payload(), headers=dev_h)

        assert client.delete(f"{API}/admin/users/{dev_id}", headers=admin_headers).status_code == 204
        assert client.get(f"{API}/auth/me", headers=dev_h).status_code == 401
        r = client.get(f"{API}/applications/job/{job_id}", headers=client_h)
        assert r.json() == []
        assert client.get(f"{API}/jobs/{job_id}").json()["status"] == "open"

    def test_refuses_users_with_work_in_progress(self, client, register, admin_headers):
        client_id, client_h = register("client")
        dev_id, dev_h = register("developer")
        job_id = _hired_job(client, client_h, dev_id, dev_h)

        for user_id in (client_id, dev_id):
            r = client.delete(f"{API}/admin/users/{user_id}", headers=admin_headers)
            assert r.status_code == 409
            assert r.json()["kind"] == "state_conflict"
        assert client.get(f"{API}/auth/me", headers=dev_h).status_code == 200
        assert client.get(f"{API}/jobs/{job_id}").json()["status"] == "in_progress"

    def test_refuses_hired_developer_of_completed_job(self, client, register, admin_headers):
        _, client_h = register("client")
        dev_id, dev_h = register("developer")
        _rated_job(client, client_h, dev_id, dev_h, 4)

        r = client.delete(f"{API}/admin/users/{dev_id}", headers=admin_headers)
        assert r.status_code == 409
        assert r.json()["kind"] == "state_conflict"

    def test_cannot_delete_admin(self, client, admin_headers):
        admin_id = client.get(f"{API}/auth/me", headers=admin_headers).json()["id"]
        r = client.delete(f"{API}/admin/users/{admin_id}", headers=admin_headers)
        assert r.status_code == 403
        assert r.json()["kind"] == "forbidden"

    def test_missing_user_is_404(self, client, admin_headers):
        assert client.delete(f"{API}/admin/users/nope", headers=admin_headers).status_code == 404
