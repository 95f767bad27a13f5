"""
Error taxonomy for the conduct core.

ValidationError and SessionStateError block an action before any I/O.
PersistenceError is raised by collaborators; whether it is fatal depends on
the step that hit it. StageAdvancementError never leaves the advancement
policy.
"""


class ConductError(Exception):
    """Base class for every error raised by the conduct core."""


class ValidationError(ConductError):
    pass


class SessionStateError(ConductError, ValueError):
    """Raised on an illegal lifecycle transition (e.g. pausing a paused session)."""


class PersistenceError(ConductError):
    pass


class NotFoundError(ConductError, LookupError):
    pass


class StageAdvancementError(ConductError):
    pass
