from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from result import Err, Ok, Result

from rcleaner.models.errors import CleanerError
from rcleaner.services.formatting import parse_size
from rcleaner.system.commands import DEFAULT_RUNNER, CommandRunner, run_checked, split_lines

logger = logging.getLogger(__name__)

CONTAINER_RUNTIMES = ("docker", "podman")

_IMAGE_FORMAT = "{{.Repository}}:{{.Tag}}\t{{.Size}}"
_DANGLING = "<none>:<none>"


@dataclass(slots=True, frozen=True)
class ContainerImage:
    reference: str
    size: int


class ContainerRuntime:
    """Image listing and removal for a docker-compatible CLI."""

    def __init__(self, name: str, runner: CommandRunner = DEFAULT_RUNNER) -> None:
        self.name = name
        self._runner = runner

    def is_available(self) -> bool:
        return self._runner.exists(self.name)

    def list_images(self) -> Result[list[ContainerImage], CleanerError]:
        result = run_checked(self._runner, self.name, ["images", "--format", _IMAGE_FORMAT])
        if isinstance(result, Err):
            return result
        images: list[ContainerImage] = []
        for line in split_lines(result.unwrap().stdout):
            reference, _, size_text = line.partition("\t")
            reference = reference.strip()
            if not reference or reference == _DANGLING:
                continue
            images.append(ContainerImage(reference, parse_size(size_text) or 0))
        return Ok(images)

    def remove_images(self, references: Sequence[str], dry_run: bool) -> Result[None, CleanerError]:
        if not references:
            return Ok(None)
        if dry_run:
            logger.info("[DRY RUN] %s rmi -f %s", self.name, " ".join(references))
            return Ok(None)
        removed = run_checked(self._runner, self.name, ["rmi", "-f", *references])
        if isinstance(removed, Err):
            return removed
        return Ok(None)
