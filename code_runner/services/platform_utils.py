"""Platform detection utilities."""

import os
import platform
import socket

import psutil


def is_linux() -> bool:
    """
    Check if running on Linux.

    Returns:
        True if platform is Linux, False otherwise
    """
    return platform.system() == "Linux"


def supports_reuse_port() -> bool:
    """
    Check if several processes can bind the same port.

    Returns:
        True if the socket module exposes SO_REUSEPORT
    """
    return hasattr(socket, "SO_REUSEPORT")


def available_cores() -> int:
    """
    Number of CPU cores this process may run on.

    Honors CPU affinity on Linux (containers, taskset).

    Returns:
        Core count, at least 1
    """
    if is_linux() and hasattr(os, "sched_getaffinity"):
        return max(1, len(os.sched_getaffinity(0)))
    return psutil.cpu_count() or 1
