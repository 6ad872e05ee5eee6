from skillsync.models.user import User, UserSkill
from skillsync.models.job import Job, JobSkill
from skillsync.models.application import Application
from skillsync.models.rating import Rating
from skillsync.models.message import Message

__all__ = ["User", "UserSkill", "Job", "JobSkill", "Application", "Rating", "Message"]
