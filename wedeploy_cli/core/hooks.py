"""Run user-defined hook commands (before_deploy, after_deploy, ...)"""

import shlex
import subprocess
from pathlib import Path
from typing import Optional

from wedeploy_cli.exceptions import HookError
from wedeploy_cli.logger import debug


def run_hook(command: str, cwd: Optional[Path] = None) -> None:
    """
    Run a hook synchronously, inheriting stdout and stderr.

    Raises:
        HookError: The command exited with a non-zero status
        FileNotFoundError: The executable does not exist
    """
    args = shlex.split(command)
    if not args:
        return

    debug(f"Running hook: {command} (cwd={cwd or '.'})")
    result = subprocess.run(args, cwd=str(cwd) if cwd else None)

    if result.returncode != 0:
        raise HookError(command, result.returncode)
