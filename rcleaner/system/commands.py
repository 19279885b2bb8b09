from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from result import Err, Ok, Result

from rcleaner.models.enums import ErrorCode
from rcleaner.models.errors import CleanerError

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class CommandOutput:
    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def message(self) -> str:
        """Stderr if it says anything, otherwise stdout."""
        return self.stderr.strip() or self.stdout.strip()


class CommandRunner(Protocol):
    def run(self, program: str, args: Sequence[str]) -> Result[CommandOutput, CleanerError]: ...

    def exists(self, program: str) -> bool: ...


class SubprocessRunner:
    """Runs external tools to completion; no timeout is applied."""

    def run(self, program: str, args: Sequence[str]) -> Result[CommandOutput, CleanerError]:
        logger.debug("Running %s %s", program, " ".join(args))
        try:
            completed = subprocess.run(
                [program, *args],
                capture_output=True,
                text=True,
                errors="replace",
                check=False,
            )
        except OSError as exc:
            return Err(CleanerError(ErrorCode.COMMAND, f"Failed to run {program}: {exc}"))
        return Ok(CommandOutput(completed.stdout, completed.stderr, completed.returncode))

    def exists(self, program: str) -> bool:
        if "/" in program:
            return os.path.exists(program)
        return shutil.which(program) is not None


DEFAULT_RUNNER: CommandRunner = SubprocessRunner()


def command_failed(program: str, output: CommandOutput) -> CleanerError:
    return CleanerError(ErrorCode.COMMAND, f"{program} command failed: {output.message}")


def run_checked(runner: CommandRunner, program: str, args: Sequence[str]) -> Result[CommandOutput, CleanerError]:
    """Run *program* and turn a non-zero exit status into an ``Err``."""
    result = runner.run(program, args)
    if isinstance(result, Err):
        return result
    output = result.unwrap()
    if not output.success:
        return Err(command_failed(program, output))
    return Ok(output)


def split_lines(text: str) -> list[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def is_root() -> bool:
    return os.geteuid() == 0
