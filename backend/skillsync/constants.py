ROLE_CLIENT = "client"
ROLE_DEVELOPER = "developer"
ROLE_ADMIN = "admin"
ROLES = (ROLE_CLIENT, ROLE_DEVELOPER, ROLE_ADMIN)
SELF_REGISTER_ROLES = (ROLE_CLIENT, ROLE_DEVELOPER)

JOB_OPEN = "open"
JOB_IN_PROGRESS = "in_progress"
JOB_COMPLETED = "completed"
JOB_CANCELLED = "cancelled"
JOB_STATUSES = (JOB_OPEN, JOB_IN_PROGRESS, JOB_COMPLETED, JOB_CANCELLED)

# Forward-only edges of the job state machine. Terminal states map to an empty set.
VALID_JOB_TRANSITIONS = {
    JOB_OPEN: {JOB_IN_PROGRESS, JOB_CANCELLED},
    JOB_IN_PROGRESS: {JOB_COMPLETED},
    JOB_COMPLETED: set(),
    JOB_CANCELLED: set(),
}

DELETABLE_JOB_STATUSES = (JOB_OPEN, JOB_COMPLETED, JOB_CANCELLED)

APPLICATION_PENDING = "pending"
APPLICATION_ACCEPTED = "accepted"
APPLICATION_REJECTED = "rejected"
APPLICATION_WITHDRAWN = "withdrawn"
APPLICATION_STATUSES = (
    APPLICATION_PENDING,
    APPLICATION_ACCEPTED,
    APPLICATION_REJECTED,
    APPLICATION_WITHDRAWN,
)

RATING_MIN = 1
RATING_MAX = 5
# Developer aggregate is stored at display precision
RATING_PRECISION = 2
