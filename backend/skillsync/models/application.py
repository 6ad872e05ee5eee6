from sqlalchemy import JSON, CheckConstraint, Column, Float, ForeignKey, Text, UniqueConstraint
from skillsync.database import Base


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (
        # One application per developer per job, whatever its status
        UniqueConstraint("job_id", "developer_id", name="uq_applications_job_developer"),
        CheckConstraint(
            "status IN ('pending','accepted','rejected','withdrawn')", name="ck_applications_status"
        ),
        CheckConstraint("proposed_rate >= 0", name="ck_applications_rate"),
    )

    id = Column(Text, primary_key=True)
    job_id = Column(Text, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    developer_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    cover_letter = Column(Text, nullable=False)
    proposed_rate = Column(Float, nullable=False)
    estimated_duration = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    portfolio = Column(JSON, nullable=False, default=list)
    attachments = Column(JSON, nullable=False, default=list)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)
