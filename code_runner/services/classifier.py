"""Turns pipeline outcomes into response envelopes.

responseCode values:
    201  program ran successfully
    202  execution failure (timeout, compilation, runtime, internal)
    203  request validation failure
    400  invalid Java source (class name missing)
"""

from dataclasses import dataclass

from code_runner.errors import ValidationError
from code_runner.models.response import RunProgramResponse
from code_runner.services.executor import ExecutionResult

SUCCESS = 201
EXECUTION_FAILED = 202

COMPILATION_ERROR = "Compilation error occurred."
RUNTIME_ERROR = "Runtime error occurred."
INTERNAL_ERROR = "Internal server error occurred."
INVALID_BODY = "Invalid request body."


@dataclass(frozen=True)
class Outcome:
    status_code: int
    response: RunProgramResponse


def timeout_message(timeout_seconds: float) -> str:
    return f"Execution timed out after {timeout_seconds:g} seconds."


def classify_execution(result: ExecutionResult, timeout_seconds: float) -> Outcome:
    if result.timed_out:
        return Outcome(500, RunProgramResponse(
            response_code=EXECUTION_FAILED,
            output="",
            error_message=timeout_message(timeout_seconds),
        ))

    if result.failed:
        # Inherited heuristic: any "error" in stderr counts as a compile failure
        message = COMPILATION_ERROR if "error" in result.stderr else RUNTIME_ERROR
        return Outcome(500, RunProgramResponse(
            response_code=EXECUTION_FAILED,
            output=result.stderr.strip() or result.error,
            error_message=message,
        ))

    return Outcome(200, RunProgramResponse(
        response_code=SUCCESS,
        output=result.stdout.strip(),
        error_message="",
    ))


def validation_failure(error: ValidationError) -> Outcome:
    return Outcome(400, RunProgramResponse(
        response_code=error.response_code,
        output=error.output,
        error_message=error.error_message,
    ))


def internal_failure() -> Outcome:
    return Outcome(500, RunProgramResponse(
        response_code=EXECUTION_FAILED,
        output="",
        error_message=INTERNAL_ERROR,
    ))


def malformed_body(detail: str) -> Outcome:
    return Outcome(400, RunProgramResponse(
        response_code=203,
        output=INVALID_BODY,
        error_message=detail,
    ))
