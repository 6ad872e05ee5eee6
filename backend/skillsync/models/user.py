from sqlalchemy import Boolean, CheckConstraint, Column, Float, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from skillsync.database import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('client','developer','admin')", name="ck_users_role"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_users_rating"),
    )

    id = Column(Text, primary_key=True)
    email = Column(Text, nullable=False, unique=True)
    password_hash = Column(Text, nullable=False)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    role = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    bio = Column(Text)
    hourly_rate = Column(Float)
    experience = Column(Text)
    company = Column(Text)
    phone_number = Column(Text)
    # References into the attachment store; the files themselves live elsewhere
    avatar_url = Column(Text)
    resume_url = Column(Text)
    portfolio_url = Column(Text)

    rating = Column(Float, nullable=False, default=0.0)
    total_ratings = Column(Integer, nullable=False, default=0)
    completed_projects = Column(Integer, nullable=False, default=0)

    last_login_at = Column(Text)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    skills = relationship(
        "UserSkill", back_populates="user", cascade="all, delete-orphan", lazy="selectin",
        order_by="UserSkill.skill",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def skill_names(self) -> list[str]:
        return [s.skill for s in self.skills]


class UserSkill(Base):
    __tablename__ = "user_skills"

    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    skill = Column(Text, primary_key=True)

    user = relationship("User", back_populates="skills")
