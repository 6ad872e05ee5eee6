import pytest

from skillsync.config import settings
from skillsync.services.notification_service import EmailMessage, Notifier, notifier

from helpers import API, application_payload, job_payload


class TestLifecycleNotifications:
    def test_events_reach_the_right_inbox(self, client, register, outbox):
        _, client_h = register("client", first_name="Carol")
        dev_id, dev_h = register("developer", first_name="Dave")
        job_id = client.post(f"{API}/jobs", json=job_payload(), headers=client_h).json()["id"]

        client.post(f"{API}/applications/job/{job_id}", json=application_payload(), headers=dev_h)
        assert len(outbox) == 1
        assert outbox[0].to == "client1@skillsync.dev"
        assert outbox[0].subject == "New Application for Your Job Post"
        assert "Dave User" in outbox[0].body

        client.post(f"{API}/jobs/hire", json={"job_id": job_id, "developer_id": dev_id}, headers=client_h)
        assert outbox[1].to == "developer2@skillsync.dev"
        assert outbox[1].subject == "You've Been Hired!"

        client.post(f"{API}/jobs/{job_id}/complete", headers=client_h)
        assert outbox[2].to == "developer2@skillsync.dev"
        assert outbox[2].subject == "Job Marked as Completed"
        assert all(m.sender == settings.mail_from for m in outbox)

    def test_failed_delivery_does_not_fail_request(self, client, register):
        async def broken(message):
            raise ConnectionError("smtp down")

        notifier.transport = broken
        _, client_h = register("client")
        _, dev_h = register("developer")
        job_id = client.post(f"{API}/jobs", json=job_payload(), headers=client_h).json()["id"]
        r = client.post(f"{API}/applications/job/{job_id}", json=application_payload(), headers=dev_h)
        assert r.status_code == 201

    def test_rejected_action_sends_nothing(self, client, register, outbox):
        _, client_h = register("client")
        job_id = client.post(f"{API}/jobs", json=job_payload(), headers=client_h).json()["id"]
        client.post(f"{API}/jobs/{job_id}/cancel", headers=client_h)
        _, dev_h = register("developer")
        client.post(f"{API}/applications/job/{job_id}", json=application_payload(), headers=dev_h)
        assert outbox == []


class TestNotifier:
    @pytest.mark.asyncio
    async def test_disabled_notifications_skip_transport(self, monkeypatch):
        sent = []

        async def capture(message):
            sent.append(message)

        monkeypatch.setattr(settings, "notifications_enabled", False)
        delivered = await Notifier(capture)._deliver(EmailMessage(to="a@skillsync.dev", subject="s", body="b"))
        assert delivered is False
        assert sent == []

    @pytest.mark.asyncio
    async def test_transport_errors_are_logged(self, caplog):
        async def broken(message):
            raise RuntimeError("boom")

        delivered = await Notifier(broken)._deliver(EmailMessage(to="a@skillsync.dev", subject="Hi", body="b"))
        assert delivered is False
        assert "Failed to deliver 'Hi' to a@skillsync.dev" in caplog.text
