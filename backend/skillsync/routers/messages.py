from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from skillsync.database import get_db
from skillsync.dependencies import PageParams, get_current_principal, page_params
from skillsync.models.message import Message
from skillsync.schemas.common import Page
from skillsync.schemas.message import (
    ChatMessageResponse,
    ConversationResponse,
    MessageCreate,
    UnreadCountResponse,
)
from skillsync.services import message_service
from skillsync.services.auth_service import Principal
from skillsync.utils.pagination import total_pages

router = APIRouter(prefix="/messages", tags=["messages"])


def _message_to_response(message: Message) -> ChatMessageResponse:
    return ChatMessageResponse(
        id=message.id,
        job_id=message.job_id,
        sender_id=message.sender_id,
        recipient_id=message.recipient_id,
        content=message.content,
        attachments=message.attachments or [],
        is_read=message.is_read,
        read_at=message.read_at,
        created_at=message.created_at,
    )


@router.post("", response_model=ChatMessageResponse, status_code=201)
async def send_message(
    req: MessageCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return _message_to_response(await message_service.send_message(db, principal, req))


@router.get("/conversations", response_model=list[ConversationResponse])
async def conversations(principal: Principal = Depends(get_current_principal), db: AsyncSession = Depends(get_db)):
    entries = await message_service.conversations(db, principal)
    return [
        ConversationResponse(**{**e, "last_message": _message_to_response(e["last_message"])})
        for e in entries
    ]


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(principal: Principal = Depends(get_current_principal), db: AsyncSession = Depends(get_db)):
    return UnreadCountResponse(unread_count=await message_service.unread_count(db, principal))


@router.get("/job/{job_id}", response_model=Page[ChatMessageResponse])
async def job_messages(
    job_id: str,
    paging: PageParams = Depends(page_params),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    messages, total = await message_service.list_job_messages(
        db, principal, job_id, page=paging.page, limit=paging.limit
    )
    return Page[ChatMessageResponse](
        items=[_message_to_response(m) for m in messages],
        current_page=paging.page,
        total_pages=total_pages(total, paging.limit),
        total=total,
    )


@router.put("/{message_id}/read", response_model=ChatMessageResponse)
async def mark_read(
    message_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return _message_to_response(await message_service.mark_read(db, principal, message_id))
