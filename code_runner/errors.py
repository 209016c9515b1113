"""Exceptions raised by the execution pipeline.

Timeouts and compile/runtime failures are not exceptions; they are states of
an ExecutionResult and are handled by the classifier.
"""


class RunnerError(Exception):
    """Base class for pipeline errors."""


class ValidationError(RunnerError):
    """
    Request is malformed or outside policy.

    Carries the envelope fields returned to the client as-is.
    """

    def __init__(self, output: str, error_message: str = "", response_code: int = 203):
        super().__init__(output)
        self.output = output
        self.error_message = error_message
        self.response_code = response_code


class WorkspaceError(RunnerError):
    """Workspace directory could not be created or populated."""
