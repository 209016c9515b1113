from fastapi import APIRouter, Depends, Request, Response
from code_runner.errors import ValidationError
from code_runner.models.request import RunProgramRequest
from code_runner.models.response import RunProgramResponse
from code_runner.services.classifier import internal_failure, validation_failure
from code_runner.services.runner import ProgramRunner


def get_runner(request: Request) -> ProgramRunner:
    return request.app.state.runner


# Create router
router = APIRouter()


@router.post("/run-program", response_model=RunProgramResponse)
async def run_program(
    payload: RunProgramRequest,
    request: Request,
    response: Response,
    runner: ProgramRunner = Depends(get_runner)
) -> RunProgramResponse:
    logger = request.app.state.logger

    try:
        outcome = await runner.run(payload)

    except ValidationError as e:
        # Rejected before anything was executed
        outcome = validation_failure(e)

    except Exception:
        # Anything else is hidden from the client
        logger.exception("Internal server error")
        outcome = internal_failure()

    response.status_code = outcome.status_code
    return outcome.response
