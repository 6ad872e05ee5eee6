from sqlalchemy import Boolean, CheckConstraint, Column, Float, ForeignKey, Text
from sqlalchemy.orm import relationship
from skillsync.database import Base


class Job(Base):
    __tablename__ = "jobs"
    __table_args__ = (
        CheckConstraint(
            "status IN ('open','in_progress','completed','cancelled')", name="ck_jobs_status"
        ),
        CheckConstraint("budget >= 0", name="ck_jobs_budget"),
        CheckConstraint("budget_type IN ('fixed','hourly')", name="ck_jobs_budget_type"),
        # A hired developer is present exactly in the in_progress and completed states
        CheckConstraint(
            "(hired_developer_id IS NOT NULL) = (status IN ('in_progress','completed'))",
            name="ck_jobs_hired_developer",
        ),
    )

    id = Column(Text, primary_key=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    budget = Column(Float, nullable=False)
    budget_type = Column(Text, nullable=False)
    deadline = Column(Text, nullable=False)
    experience_level = Column(Text, nullable=False)
    category = Column(Text, nullable=False)
    estimated_duration = Column(Text)
    status = Column(Text, nullable=False, default="open")
    client_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    hired_developer_id = Column(Text, ForeignKey("users.id"), index=True)
    is_urgent = Column(Boolean, nullable=False, default=False)
    payment_released = Column(Boolean, nullable=False, default=False)
    created_at = Column(Text, nullable=False, index=True)
    updated_at = Column(Text, nullable=False)

    skills = relationship(
        "JobSkill", back_populates="job", cascade="all, delete-orphan", lazy="selectin",
        order_by="JobSkill.skill",
    )

    @property
    def skill_names(self) -> list[str]:
        return [s.skill for s in self.skills]


class JobSkill(Base):
    __tablename__ = "job_skills"

    job_id = Column(Text, ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True)
    skill = Column(Text, primary_key=True, index=True)

    job = relationship("Job", back_populates="skills")
