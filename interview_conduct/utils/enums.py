from enum import Enum


class SessionStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"


class QuestionFormat(str, Enum):
    YES_NO_WITH_JUSTIFICATION = "yes_no_with_justification"
    RATING_WITH_JUSTIFICATION = "rating_with_justification"
    SHORT_DESCRIPTION = "short_description"
    LONG_DESCRIPTION = "long_description"


class Recommendation(str, Enum):
    STRONG_HIRE = "strong_hire"
    HIRE = "hire"
    NO_HIRE = "no_hire"
    STRONG_NO_HIRE = "strong_no_hire"


class InterviewResult(str, Enum):
    PASS = "Pass"
    FAIL = "Fail"


class InterviewStatus(str, Enum):
    SCHEDULED = "Scheduled"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    RESCHEDULED = "Rescheduled"
    NO_SHOW = "No Show"


class InterviewType(str, Enum):
    PHONE_SCREEN = "Phone Screen"
    TECHNICAL = "Technical"
    BEHAVIORAL = "Behavioral"
    FINAL = "Final"
    PANEL = "Panel"
    CULTURE_FIT = "Culture Fit"
    CASE_STUDY = "Case Study"
    PRESENTATION = "Presentation"


class ProgressStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class NotifyKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class StageChangeReason(str, Enum):
    MANUAL_MOVE = "manual_move"
    INTERVIEW_COMPLETED = "interview_completed"
