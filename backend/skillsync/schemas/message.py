from pydantic import BaseModel, Field

from skillsync.schemas.common import AttachmentRef


class MessageCreate(BaseModel):
    job_id: str
    recipient_id: str
    content: str = Field(min_length=1, max_length=2000)
    attachments: list[AttachmentRef] = Field(default=[], max_length=5)


class ChatMessageResponse(BaseModel):
    id: str
    job_id: str
    sender_id: str
    recipient_id: str
    content: str
    attachments: list[AttachmentRef]
    is_read: bool
    read_at: str | None
    created_at: str


class ConversationResponse(BaseModel):
    job_id: str
    job_title: str
    other_user_id: str
    last_message: ChatMessageResponse
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int
