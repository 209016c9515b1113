import logging

from code_runner.core.config import Settings
from code_runner.errors import ValidationError
from code_runner.models.request import RunProgramRequest
from code_runner.services.classifier import Outcome, classify_execution
from code_runner.services.commands import CommandSynthesizer, Toolchain
from code_runner.services.executor import CodeExecutor
from code_runner.services.materializer import SourceMaterializer
from code_runner.services.workspace import WorkspaceManager

FIELDS_REQUIRED = "Code and language are required."
PAYLOAD_TOO_LARGE = "Code or input is too large. Please limit their sizes."


class ProgramRunner:
    """Runs one request through the pipeline: workspace, sources, command, execution."""

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        workspaces: WorkspaceManager = None,
        materializer: SourceMaterializer = None,
        synthesizer: CommandSynthesizer = None,
        executor: CodeExecutor = None,
    ):
        self.settings = settings
        self.logger = logger
        self.workspaces = workspaces or WorkspaceManager(
            settings.WORKSPACE_ROOT, logger.getChild("workspace")
        )
        self.materializer = materializer or SourceMaterializer()
        self.synthesizer = synthesizer or CommandSynthesizer(Toolchain.from_settings(settings))
        self.executor = executor or CodeExecutor(
            logger.getChild("executor"), max_output_bytes=settings.MAX_OUTPUT_BYTES
        )

    def validate(self, request: RunProgramRequest) -> None:
        """
        Field presence and size checks, done before any workspace exists.

        Raises:
            ValidationError: on missing fields or oversized payload
        """
        if not request.code or not request.language:
            raise ValidationError(FIELDS_REQUIRED, FIELDS_REQUIRED, response_code=203)

        if (
            len(request.code) > self.settings.MAX_CODE_LENGTH
            or len(request.joined_input()) > self.settings.MAX_INPUT_LENGTH
        ):
            raise ValidationError(PAYLOAD_TOO_LARGE, "", response_code=203)

    async def run(self, request: RunProgramRequest) -> Outcome:
        """
        Execute the request and classify the result.

        Raises:
            ValidationError: request rejected before execution
            WorkspaceError: workspace could not be created or written
        """
        self.validate(request)
        timeout = self.settings.EXECUTION_TIMEOUT_SECONDS

        async with self.workspaces.session() as workspace:
            sources = await self.materializer.materialize(
                workspace, request.code, request.language, request.input
            )
            command = self.synthesizer.synthesize(
                request.language, sources.source_path, sources.input_path
            )

            self.logger.info("Running %s in workspace %s", command.render(), workspace.token)
            result = await self.executor.run(command, timeout)

        if result.timed_out:
            self.logger.warning("Workspace %s discarded after timeout", workspace.token)
        elif result.failed:
            self.logger.error("Error executing code: %s\n%s", result.error, result.stderr)
        else:
            self.logger.info("Code executed successfully")

        return classify_execution(result, timeout)
