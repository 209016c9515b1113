import asyncio
import logging
import shutil
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator

from code_runner.errors import WorkspaceError


@dataclass
class Workspace:
    """Temporary directory owned by exactly one request."""

    token: str
    path: Path
    destroyed: bool = False


class WorkspaceManager:
    """Creates and removes per-request workspace directories under a fixed root."""

    def __init__(self, root: Path, logger: logging.Logger):
        self.root = Path(root)
        self.logger = logger

    async def create(self) -> Workspace:
        """
        Allocate a fresh directory named with a new uuid4 token.

        Raises:
            WorkspaceError: if the directory cannot be created
        """
        token = uuid.uuid4().hex
        path = self.root / token

        try:
            await asyncio.to_thread(path.mkdir, parents=True, exist_ok=False)
        except OSError as e:
            raise WorkspaceError(f"Could not create workspace {path}: {e}") from e

        self.logger.debug("Created workspace %s", path)
        return Workspace(token=token, path=path)

    async def destroy(self, workspace: Workspace) -> None:
        """
        Recursively remove a workspace.

        Never raises: cleanup is best-effort and must not block the response.
        """
        if workspace.destroyed:
            self.logger.warning("Workspace %s already destroyed", workspace.token)
            return

        workspace.destroyed = True
        try:
            await asyncio.to_thread(shutil.rmtree, workspace.path)
        except FileNotFoundError:
            pass
        except OSError:
            self.logger.exception("Error during cleanup of %s", workspace.path)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Workspace]:
        """Yield a new workspace and destroy it on every exit path."""
        workspace = await self.create()
        try:
            yield workspace
        finally:
            await self.destroy(workspace)
