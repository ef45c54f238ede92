"""
dotnet CLI toolchain adapter.

Runs ``dotnet <verb>`` as an opaque subprocess. Success is the exit status;
output lines are returned for display, with stderr lines prefixed.
"""

import logging
import subprocess
from collections.abc import Iterable
from pathlib import Path

from prjbuild.domain.interfaces import BuildToolchainInterface
from prjbuild.domain.models import ToolchainResult

logger = logging.getLogger(__name__)


class DotnetToolchain(BuildToolchainInterface):
    """Invokes the dotnet CLI for restore, build, publish, clean and package updates."""

    def __init__(
        self,
        executable: str = "dotnet",
        configuration: str = "Release",
        timeout: float | None = None,
    ):
        """
        Args:
            executable: dotnet executable name or path
            configuration: Build configuration passed with --configuration
            timeout: Optional per-command timeout in seconds (None waits forever)
        """
        self._executable = executable
        self._configuration = configuration
        self._timeout = timeout

    def restore(self, manifest_path: Path) -> ToolchainResult:
        return self._run(["restore", str(manifest_path)], manifest_path.parent)

    def build(self, manifest_path: Path, runtime: str | None = None) -> ToolchainResult:
        args = ["build", str(manifest_path), "--configuration", self._configuration]
        if runtime:
            args += ["--runtime", runtime, "--self-contained"]
        return self._run(args, manifest_path.parent)

    def publish(
        self, manifest_path: Path, runtime: str, output_dir: Path
    ) -> ToolchainResult:
        args = [
            "publish",
            str(manifest_path),
            "--configuration",
            self._configuration,
            "--runtime",
            runtime,
            "--self-contained",
            "--output",
            str(output_dir),
        ]
        return self._run(args, manifest_path.parent)

    def clean(self, manifest_path: Path) -> ToolchainResult:
        return self._run(
            ["clean", str(manifest_path), "--configuration", self._configuration],
            manifest_path.parent,
        )

    def update_packages(self, manifest_path: Path) -> ToolchainResult:
        """
        List outdated packages, then add each one again at its latest version.

        Succeeds only if the listing and every update succeed.
        """
        listed = self._run(
            ["list", str(manifest_path), "package", "--outdated"], manifest_path.parent
        )
        output = list(listed.output)
        if not listed.success:
            return ToolchainResult(False, tuple(output))

        packages = outdated_packages(listed.output)
        if not packages:
            logger.info("No outdated packages found for %s", manifest_path.stem)
            return ToolchainResult(True, tuple(output))

        success = True
        for package in packages:
            added = self._run(
                ["add", str(manifest_path), "package", package], manifest_path.parent
            )
            output.extend(added.output)
            if added.success:
                logger.info("Updated package %s for %s", package, manifest_path.stem)
            else:
                success = False
        return ToolchainResult(success, tuple(output))

    def _run(self, args: list[str], cwd: Path) -> ToolchainResult:
        command = [self._executable, *args]
        logger.debug("Running: %s", " ".join(command))
        try:
            completed = subprocess.run(
                command,
                cwd=str(cwd),
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.error("Error running dotnet command %s: %s", " ".join(args), e)
            return ToolchainResult(False, (f"Error: {e}",))

        output = [line for line in completed.stdout.splitlines() if line]
        output += [f"Error: {line}" for line in completed.stderr.splitlines() if line]
        if completed.returncode != 0:
            logger.warning(
                "dotnet %s exited with status %d", args[0], completed.returncode
            )
        return ToolchainResult(completed.returncode == 0, tuple(output))


def outdated_packages(lines: Iterable[str]) -> list[str]:
    """Package names from ``dotnet list package --outdated`` output.

    Package rows look like ``   > Newtonsoft.Json   12.0.1   12.0.1   13.0.3``.
    """
    names = []
    for line in lines:
        parts = line.split()
        if len(parts) >= 2 and parts[0] == ">" and parts[1] not in names:
            names.append(parts[1])
    return names
