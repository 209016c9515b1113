"""Keeps a fixed pool of worker processes alive.

The supervisor forks `size` workers, waits for any of them to exit and forks a
replacement right away. Workers share nothing with the supervisor or with each
other; the only signal the supervisor consumes is a worker's exit.
"""

import logging
import multiprocessing
import signal
from multiprocessing.connection import wait
from typing import Callable, Dict, List, Optional, Tuple

from code_runner.core.config import get_settings
from code_runner.core.logging import setup_logging
from code_runner.services.platform_utils import available_cores, supports_reuse_port
from code_runner.worker import serve_worker

# Seconds between checks for a stop request while waiting on workers
POLL_INTERVAL = 1.0


class Supervisor:
    """Restart-on-exit pool of identical worker processes."""

    def __init__(
        self,
        target: Callable,
        size: int,
        logger: logging.Logger,
        args: Tuple = (),
    ):
        self.target = target
        self.size = size
        self.logger = logger
        self.args = args
        self.workers: Dict[int, multiprocessing.Process] = {}
        self._stopping = False

    def start(self) -> None:
        """Fork the initial pool."""
        self.logger.info("Master process running. Forking %d workers.", self.size)
        for _ in range(self.size):
            self._spawn()

    def replace_exited(self, timeout: Optional[float] = None) -> List[int]:
        """
        Wait for worker exits and fork one replacement per exited worker.

        Args:
            timeout: seconds to wait; None blocks until a worker exits

        Returns:
            PIDs of the workers that exited
        """
        by_sentinel = {proc.sentinel: proc for proc in self.workers.values()}
        if not by_sentinel:
            return []

        exited = []
        for sentinel in wait(list(by_sentinel), timeout):
            proc = by_sentinel[sentinel]
            proc.join()
            del self.workers[proc.pid]
            exited.append(proc.pid)

            if self._stopping:
                continue
            self.logger.info(
                "Worker %s exited with code %s. Forking a new one.", proc.pid, proc.exitcode
            )
            self._spawn()

        return exited

    def run(self) -> None:
        """Supervise until a stop is requested, then shut the pool down."""
        self.start()
        try:
            while not self._stopping:
                self.replace_exited(POLL_INTERVAL)
        finally:
            self.shutdown()

    def request_stop(self, *_) -> None:
        self._stopping = True

    def shutdown(self, timeout: float = 5.0) -> None:
        """Terminate all workers, killing those that ignore SIGTERM."""
        self._stopping = True
        procs = list(self.workers.values())

        for proc in procs:
            if proc.is_alive():
                proc.terminate()
        for proc in procs:
            proc.join(timeout)
            if proc.is_alive():
                proc.kill()
                proc.join()

        self.workers.clear()
        self.logger.info("All workers stopped")

    def _spawn(self) -> multiprocessing.Process:
        proc = multiprocessing.Process(target=self.target, args=self.args, daemon=True)
        proc.start()
        self.workers[proc.pid] = proc
        self.logger.info("Started worker %s", proc.pid)
        return proc


def main() -> None:
    settings = get_settings()
    logger = setup_logging(settings.LOG_LEVEL)

    size = settings.WORKERS or available_cores()
    if size > 1 and not supports_reuse_port():
        logger.warning("SO_REUSEPORT not available; running a single worker")
        size = 1

    supervisor = Supervisor(serve_worker, size, logger.getChild("supervisor"))
    signal.signal(signal.SIGTERM, supervisor.request_stop)
    signal.signal(signal.SIGINT, supervisor.request_stop)
    supervisor.run()


if __name__ == "__main__":
    main()
