"""Worker process entry point: one independent HTTP server on the shared port."""

import socket

import uvicorn

from code_runner.core.config import Settings, get_settings
from code_runner.core.logging import setup_logging
from code_runner.main import create_app
from code_runner.services.platform_utils import supports_reuse_port


def bind_socket(host: str, port: int) -> socket.socket:
    """Listening socket other workers can bind as well (SO_REUSEPORT)."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    if supports_reuse_port():
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)
    sock.bind((host, port))
    sock.set_inheritable(True)
    return sock


def serve_worker(settings: Settings = None) -> None:
    settings = settings or get_settings()
    logger = setup_logging(settings.LOG_LEVEL)

    app = create_app(settings, logger)
    config = uvicorn.Config(
        app,
        log_config=None,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=settings.ACCESS_LOG,
    )
    server = uvicorn.Server(config)

    sock = bind_socket(settings.HOST, settings.PORT)
    logger.info("Worker running on port %s", settings.PORT)
    server.run(sockets=[sock])
