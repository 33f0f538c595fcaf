class InvariantViolation(Exception):
    """Raised when a component or component list breaks a structural rule."""


class ConfirmationRequired(Exception):
    """
    Raised by destructive editor operations invoked without confirmation.

    The caller is expected to ask the user and retry with ``confirmed=True``.
    """

    def __init__(self, action: str, message: str):
        super().__init__(message)
        self.action = action
