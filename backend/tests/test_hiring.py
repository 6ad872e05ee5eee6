from helpers import API, application_payload, job_payload


class TestHiring:
    def _job_with_applicants(self, client, register, count=2):
        _, client_h = register("client")
        job_id = client.post(f"{API}/jobs", json=job_payload(), headers=client_h).json()["id"]
        devs = []
        for _ in range(count):
            dev_id, dev_h = register("developer")
            app_id = client.post(
                f"{API}/applications/job/{job_id}", json=application_payload(), headers=dev_h
            ).json()["id"]
            devs.append((dev_id, dev_h, app_id))
        return job_id, client_h, devs

    def test_hire_accepts_chosen_and_rejects_others(self, client, register):
        job_id, client_h, devs = self._job_with_applicants(client, register, count=3)
        (d1, d1_h, a1), (_, d2_h, a2), (_, d3_h, a3) = devs

        r = client.post(f"{API}/jobs/hire", json={"job_id": job_id, "developer_id": d1}, headers=client_h)
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "in_progress"
        assert data["hired_developer_id"] == d1

        assert client.get(f"{API}/applications/{a1}", headers=d1_h).json()["status"] == "accepted"
        assert client.get(f"{API}/applications/{a2}", headers=d2_h).json()["status"] == "rejected"
        assert client.get(f"{API}/applications/{a3}", headers=d3_h).json()["status"] == "rejected"

    def test_withdrawn_competitor_is_rejected_too(self, client, register):
        job_id, client_h, devs = self._job_with_applicants(client, register)
        (d1, _, _), (_, d2_h, a2) = devs
        client.put(f"{API}/applications/{a2}/withdraw", headers=d2_h)

        client.post(f"{API}/jobs/hire", json={"job_id": job_id, "developer_id": d1}, headers=client_h)
        assert client.get(f"{API}/applications/{a2}", headers=d2_h).json()["status"] == "rejected"

    def test_second_hire_is_state_conflict(self, client, register):
        job_id, client_h, devs = self._job_with_applicants(client, register)
        (d1, _, _), (d2, _, _) = devs

        client.post(f"{API}/jobs/hire", json={"job_id": job_id, "developer_id": d1}, headers=client_h)
        r = client.post(f"{API}/jobs/hire", json={"job_id": job_id, "developer_id": d2}, headers=client_h)
        assert r.status_code == 409
        assert r.json()["kind"] == "state_conflict"
        assert client.get(f"{API}/jobs/{job_id}").json()["hired_developer_id"] == d1

    def test_hire_without_application_is_not_found(self, client, register):
        job_id, client_h, _ = self._job_with_applicants(client, register, count=1)
        outsider_id, _ = register("developer")
        r = client.post(f"{API}/jobs/hire", json={"job_id": job_id, "developer_id": outsider_id}, headers=client_h)
        assert r.status_code == 404
        assert client.get(f"{API}/jobs/{job_id}").json()["status"] == "open"

    def test_hire_withdrawn_applicant_is_not_found(self, client, register):
        job_id, client_h, devs = self._job_with_applicants(client, register, count=1)
        d1, d1_h, a1 = devs[0]
        client.put(f"{API}/applications/{a1}/withdraw", headers=d1_h)
        r = client.post(f"{API}/jobs/hire", json={"job_id": job_id, "developer_id": d1}, headers=client_h)
        assert r.status_code == 404

    def test_only_owner_can_hire(self, client, register):
        job_id, _, devs = self._job_with_applicants(client, register, count=1)
        _, other_h = register("client")
        r = client.post(f"{API}/jobs/hire", json={"job_id": job_id, "developer_id": devs[0][0]}, headers=other_h)
        assert r.status_code == 403

    def test_in_progress_job_is_locked(self, client, register):
        job_id, client_h, devs = self._job_with_applicants(client, register, count=1)
        client.post(f"{API}/jobs/hire", json={"job_id": job_id, "developer_id": devs[0][0]}, headers=client_h)

        assert client.put(f"{API}/jobs/{job_id}", json={"budget": 10}, headers=client_h).status_code == 409
        assert client.post(f"{API}/jobs/{job_id}/cancel", headers=client_h).status_code == 409
        r = client.delete(f"{API}/jobs/{job_id}", headers=client_h)
        assert r.status_code == 409
        assert r.json()["detail"] == "Cannot delete job that is in progress"

        _, late_h = register("developer")
        r = client.post(f"{API}/applications/job/{job_id}", json=application_payload(), headers=late_h)
        assert r.status_code == 409

    def test_complete_increments_completed_projects(self, client, register):
        job_id, client_h, devs = self._job_with_applicants(client, register, count=1)
        dev_id, dev_h, _ = devs[0]
        client.post(f"{API}/jobs/hire", json={"job_id": job_id, "developer_id": dev_id}, headers=client_h)

        r = client.post(f"{API}/jobs/{job_id}/complete", headers=client_h)
        assert r.status_code == 200
        assert r.json()["status"] == "completed"
        assert r.json()["hired_developer_id"] == dev_id
        assert client.get(f"{API}/auth/me", headers=dev_h).json()["completed_projects"] == 1

        assert client.post(f"{API}/jobs/{job_id}/complete", headers=client_h).status_code == 409
        assert client.get(f"{API}/auth/me", headers=dev_h).json()["completed_projects"] == 1

    def test_release_payment_once(self, client, register):
        job_id, client_h, devs = self._job_with_applicants(client, register, count=1)
        client.post(f"{API}/jobs/hire", json={"job_id": job_id, "developer_id": devs[0][0]}, headers=client_h)
        client.post(f"{API}/jobs/{job_id}/complete", headers=client_h)

        assert client.post(f"{API}/jobs/{job_id}/release-payment", headers=client_h).status_code == 200
        assert client.get(f"{API}/jobs/{job_id}").json()["payment_released"] is True
        assert client.post(f"{API}/jobs/{job_id}/release-payment", headers=client_h).status_code == 409
