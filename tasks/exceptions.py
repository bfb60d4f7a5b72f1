from teamhub.exceptions import ConflictError, NotFoundError, ValidationError


class TaskNotFoundError(NotFoundError):
    default_message = 'Task not found'


class InvalidStageError(ValidationError):
    default_message = 'Invalid stage'


class StageConflictError(ConflictError):
    default_message = 'Task was modified by someone else. Reload and try again.'
