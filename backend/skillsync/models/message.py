from sqlalchemy import JSON, Boolean, Column, ForeignKey, Text
from skillsync.database import Base


class Message(Base):
    __tablename__ = "messages"

    id = Column(Text, primary_key=True)
    job_id = Column(Text, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    recipient_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    attachments = Column(JSON, nullable=False, default=list)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(Text)
    created_at = Column(Text, nullable=False)
