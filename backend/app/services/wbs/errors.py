"""Business-rule failures raised by the WBS and schedule services.

Every error carries a message meant to be shown to the end user as-is and the
HTTP status the API layer answers with.
"""


class WbsError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(WbsError):
    status_code = 404


class TypeHierarchyViolation(WbsError):
    pass


class BudgetContainmentViolation(WbsError):
    pass


class ScheduleFieldViolation(WbsError):
    pass


class ProtectedItem(WbsError):
    pass


class ProjectBudgetLocked(WbsError):
    pass


class SelfDependency(WbsError):
    pass


class InvalidDependencyEndpoints(WbsError):
    pass


class DependencyConflict(WbsError):
    status_code = 409


class ScheduleCycleError(WbsError):
    status_code = 409


class PersistenceFailure(WbsError):
    status_code = 500
