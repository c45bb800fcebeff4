"""
Centralized runner for the git and gh executables.

Every subprocess the hotfix run starts goes through here, so failures always
surface as GitCommandError carrying the command line and its stderr. Commands
are never retried: a failed fetch, cherry-pick or push aborts the run.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from ..errors import GitCommandError

logger = logging.getLogger(__name__)

ALLOWED_EXECUTABLES = ("git", "gh")


def run_command(
    cmd: List[str],
    cwd: Optional[Path] = None,
    timeout: Optional[float] = None,
) -> subprocess.CompletedProcess:
    """
    Run a git or gh command and capture its output as text.

    Args:
        cmd: Command as a list (e.g., ["git", "status"])
        cwd: Working directory for the command
        timeout: Optional timeout in seconds

    Returns:
        CompletedProcess instance with the command result

    Raises:
        ValueError: If the command does not start with git or gh
        GitCommandError: If the command exits non-zero, times out or the
            executable is missing
    """
    if not cmd or cmd[0] not in ALLOWED_EXECUTABLES:
        raise ValueError(f"Command must start with one of {ALLOWED_EXECUTABLES}")

    command_line = " ".join(cmd)
    logger.debug(f"Running '{command_line}' in {cwd or Path.cwd()}")

    try:
        return subprocess.run(
            cmd,
            cwd=cwd,
            check=True,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.CalledProcessError as e:
        logger.error(f"'{command_line}' failed with exit code {e.returncode}")
        raise GitCommandError(
            f"Error during '{command_line}' (exit code {e.returncode})",
            command=cmd,
            stderr=e.stderr,
        ) from e
    except subprocess.TimeoutExpired as e:
        logger.error(f"'{command_line}' timed out after {timeout}s")
        raise GitCommandError(
            f"'{command_line}' timed out after {timeout} seconds", command=cmd
        ) from e
    except FileNotFoundError as e:
        raise GitCommandError(
            f"Executable '{cmd[0]}' not found on PATH", command=cmd
        ) from e


def run_git_command(
    cmd: List[str],
    cwd: Optional[Path] = None,
    timeout: Optional[float] = None,
) -> subprocess.CompletedProcess:
    """Run a git command; see run_command."""
    if not cmd or cmd[0] != "git":
        raise ValueError("Command must start with 'git'")
    return run_command(cmd, cwd=cwd, timeout=timeout)
