"""Cross-platform CPU detection and worker sizing."""

import os
import platform
import subprocess
from functools import lru_cache
from typing import Optional


@lru_cache(maxsize=1)
def get_platform() -> str:
    """Return 'darwin' for macOS, 'linux' for Linux."""
    return platform.system().lower()


@lru_cache(maxsize=1)
def get_cpu_count() -> int:
    """
    Get CPU count in a cross-platform way.

    Can be overridden with LOGSHARK_CPUS env var.
    """
    override = os.environ.get("LOGSHARK_CPUS")
    if override:
        try:
            return max(1, int(override))
        except ValueError:
            pass

    if hasattr(os, "sched_getaffinity"):
        return len(os.sched_getaffinity(0)) or 1

    if get_platform() == "darwin":
        try:
            result = subprocess.run(
                ["sysctl", "-n", "hw.ncpu"],
                capture_output=True,
                text=True,
                timeout=5,
            )
            if result.returncode == 0:
                return int(result.stdout.strip())
        except (subprocess.TimeoutExpired, ValueError, FileNotFoundError):
            pass

    return os.cpu_count() or 1


def get_parallel_workers(requested: Optional[int] = None) -> int:
    """Get number of parallel workers to use.

    Args:
        requested: Specific number of workers requested by user.
                   None means auto-detect based on CPU count.

    Returns:
        Number of workers to use (minimum 1).
    """
    if requested is not None:
        return max(1, requested)
    return get_cpu_count()


def chunked(items: list, size: int) -> list[list]:
    """Split a list into consecutive slices of at most size items."""
    if size < 1:
        raise ValueError("chunk size must be >= 1")
    return [items[i : i + size] for i in range(0, len(items), size)]


def clear_cpu_cache() -> None:
    """Clear cached platform and CPU detection results.

    Use this after changing LOGSHARK_CPUS to re-detect.

    Example:
        >>> from logshark.tools import clear_cpu_cache
        >>> clear_cpu_cache()
    """
    get_platform.cache_clear()
    get_cpu_count.cache_clear()
