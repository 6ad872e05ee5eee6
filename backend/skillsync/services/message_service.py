import logging
import uuid

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from skillsync.errors import ForbiddenError, NotFoundError, StateConflictError, ValidationFailedError
from skillsync.models.job import Job
from skillsync.models.message import Message
from skillsync.schemas.message import MessageCreate
from skillsync.services.auth_service import Principal
from skillsync.services.job_service import get_job
from skillsync.utils.pagination import paginate
from skillsync.utils.timestamps import utc_now_iso

logger = logging.getLogger(__name__)


def participants(job: Job) -> tuple[str, str | None]:
    return job.client_id, job.hired_developer_id


def ensure_participant(job: Job, principal: Principal):
    if principal.id not in participants(job):
        raise ForbiddenError("Not authorized")


async def send_message(db: AsyncSession, principal: Principal, req: MessageCreate) -> Message:
    job = await get_job(db, req.job_id)
    ensure_participant(job, principal)
    if job.hired_developer_id is None:
        raise StateConflictError("Messaging opens once a developer is hired")

    client_id, developer_id = participants(job)
    other = developer_id if principal.id == client_id else client_id
    if req.recipient_id != other:
        raise ValidationFailedError("Recipient must be the other participant on this job")

    message = Message(
        id=str(uuid.uuid4()),
        job_id=job.id,
        sender_id=principal.id,
        recipient_id=req.recipient_id,
        content=req.content.strip(),
        attachments=[a.model_dump() for a in req.attachments],
        is_read=False,
        read_at=None,
        created_at=utc_now_iso(),
    )
    db.add(message)
    await db.commit()
    logger.debug("Message %s sent on job %s", message.id, job.id)
    return message


async def list_job_messages(
    db: AsyncSession, principal: Principal, job_id: str, *, page: int, limit: int
) -> tuple[list[Message], int]:
    """Return one page of a job's conversation.

    Page 1 holds the most recent messages; each page reads oldest first.

    Fetching the conversation counts as reading it, so the caller's unread
    messages on this job are marked read.
    """
    job = await get_job(db, job_id)
    ensure_participant(job, principal)

    await db.execute(
        update(Message)
        .where(Message.job_id == job_id, Message.recipient_id == principal.id, Message.is_read.is_(False))
        .values(is_read=True, read_at=utc_now_iso())
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    query = (
        select(Message)
        .where(Message.job_id == job_id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .execution_options(populate_existing=True)
    )
    messages, total = await paginate(db, query, page, limit)
    messages.reverse()
    return messages, total


async def mark_read(db: AsyncSession, principal: Principal, message_id: str) -> Message:
    message = await db.get(Message, message_id, populate_existing=True)
    # Senders and bystanders get the same answer as for a missing message
    if message is None or message.recipient_id != principal.id:
        raise NotFoundError("Message not found")
    if not message.is_read:
        message.is_read = True
        message.read_at = utc_now_iso()
        await db.commit()
    return message


async def unread_count(db: AsyncSession, principal: Principal) -> int:
    return await db.scalar(
        select(func.count(Message.id)).where(Message.recipient_id == principal.id, Message.is_read.is_(False))
    ) or 0


async def conversations(db: AsyncSession, principal: Principal) -> list[dict]:
    """One entry per job the caller has exchanged messages on, most recent first."""
    result = await db.scalars(
        select(Message)
        .where(or_(Message.sender_id == principal.id, Message.recipient_id == principal.id))
        .order_by(Message.created_at.desc(), Message.id.desc())
    )
    latest: dict[str, Message] = {}
    unread: dict[str, int] = {}
    for message in result.all():
        latest.setdefault(message.job_id, message)
        if message.recipient_id == principal.id and not message.is_read:
            unread[message.job_id] = unread.get(message.job_id, 0) + 1

    if not latest:
        return []
    titles = dict((await db.execute(select(Job.id, Job.title).where(Job.id.in_(list(latest))))).all())

    entries = []
    for job_id, message in latest.items():
        other = message.recipient_id if message.sender_id == principal.id else message.sender_id
        entries.append({
            "job_id": job_id,
            "job_title": titles.get(job_id, ""),
            "other_user_id": other,
            "last_message": message,
            "unread_count": unread.get(job_id, 0),
        })
    return entries
