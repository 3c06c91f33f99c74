"""Thin wrapper around ``subprocess.run`` for external telemetry tools."""

from __future__ import annotations

import subprocess
from typing import Sequence

from loguru import logger

from sysdash import settings

__all__ = ["run_command"]


def run_command(args: Sequence[str], timeout: float | None = None) -> str | None:
    """Run ``args`` and return stdout, or ``None`` if the tool is missing, hangs or fails."""
    if timeout is None:
        timeout = settings.COMMAND_TIMEOUT
    try:
        completed = subprocess.run(
            list(args),
            capture_output=True,
            text=True,
            check=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        logger.debug(f"{args[0]} executable not found")
        return None
    except subprocess.TimeoutExpired:
        logger.debug(f"{args[0]} timed out after {timeout}s")
        return None
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        logger.debug(f"{args[0]} failed (exit code {exc.returncode}): {stderr}")
        return None
    except OSError as exc:
        logger.debug(f"Could not run {args[0]}: {exc}")
        return None

    return completed.stdout
