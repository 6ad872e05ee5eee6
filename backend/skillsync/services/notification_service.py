"""Outbound notifications for lifecycle events.

Notifications are fire-and-forget: routers schedule them as background tasks
that run after the response is sent, and any delivery failure is logged here
rather than propagated. The actual mail delivery is a pluggable async
transport; the default one only logs the rendered message.
"""
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from skillsync.config import settings
from skillsync.models.job import Job
from skillsync.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class EmailMessage:
    to: str
    subject: str
    body: str
    sender: str = ""


Transport = Callable[[EmailMessage], Awaitable[None]]


async def log_transport(message: EmailMessage) -> None:
    logger.info("Email to %s: %s", message.to, message.subject)


class Notifier:
    def __init__(self, transport: Transport | None = None):
        self.transport = transport or log_transport

    async def _deliver(self, message: EmailMessage) -> bool:
        if not settings.notifications_enabled:
            return False
        message.sender = message.sender or settings.mail_from
        try:
            await self.transport(message)
        except Exception:
            logger.exception("Failed to deliver '%s' to %s", message.subject, message.to)
            return False
        return True

    async def application_submitted(self, client: User, job: Job, developer: User) -> bool:
        return await self._deliver(EmailMessage(
            to=client.email,
            subject="New Application for Your Job Post",
            body=(
                f"You have received a new application for your job post: {job.title}\n"
                f"Applicant: {developer.full_name}\n"
                f"Review it at {settings.client_url}/dashboard"
            ),
        ))

    async def developer_hired(self, developer: User, job: Job, client: User) -> bool:
        return await self._deliver(EmailMessage(
            to=developer.email,
            subject="You've Been Hired!",
            body=(
                f"{client.full_name} has hired you for: {job.title}\n"
                f"Get started at {settings.client_url}/dashboard"
            ),
        ))

    async def job_completed(self, developer: User, job: Job, client: User) -> bool:
        return await self._deliver(EmailMessage(
            to=developer.email,
            subject="Job Marked as Completed",
            body=(
                f"{client.full_name} has marked the job {job.title} as completed.\n"
                f"Thank you for your work!"
            ),
        ))


notifier = Notifier()
