from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Text
from skillsync.database import Base


class Rating(Base):
    __tablename__ = "ratings"
    __table_args__ = (
        CheckConstraint("score BETWEEN 1 AND 5", name="ck_ratings_score"),
        CheckConstraint("communication IS NULL OR communication BETWEEN 1 AND 5", name="ck_ratings_communication"),
        CheckConstraint("quality IS NULL OR quality BETWEEN 1 AND 5", name="ck_ratings_quality"),
        CheckConstraint("timeliness IS NULL OR timeliness BETWEEN 1 AND 5", name="ck_ratings_timeliness"),
    )

    id = Column(Text, primary_key=True)
    job_id = Column(Text, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, unique=True)
    client_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    developer_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    score = Column(Integer, nullable=False)
    review = Column(Text)
    communication = Column(Integer)
    quality = Column(Integer)
    timeliness = Column(Integer)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)
