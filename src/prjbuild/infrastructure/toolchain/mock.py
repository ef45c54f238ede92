"""
Mock toolchain for testing without a compiler.

Records every call and returns scripted outcomes.
"""

from collections.abc import Mapping
from pathlib import Path

from prjbuild.domain.interfaces import BuildToolchainInterface
from prjbuild.domain.models import ToolchainResult


class MockToolchain(BuildToolchainInterface):
    """Returns predefined results and records calls for assertions."""

    def __init__(
        self,
        failing: set[str] | None = None,
        publish_files: Mapping[str, str] | None = None,
    ):
        """
        Args:
            failing: Project names (manifest stems) whose calls fail
            publish_files: Relative path -> content written into every
                publish output directory on success
        """
        self._failing = failing or set()
        self._publish_files = dict(publish_files or {"app.dll": "binary"})
        self.calls: list[tuple[str, str, str | None]] = []

    def restore(self, manifest_path: Path) -> ToolchainResult:
        return self._record("restore", manifest_path)

    def build(self, manifest_path: Path, runtime: str | None = None) -> ToolchainResult:
        return self._record("build", manifest_path, runtime)

    def publish(
        self, manifest_path: Path, runtime: str, output_dir: Path
    ) -> ToolchainResult:
        result = self._record("publish", manifest_path, runtime)
        if result.success:
            for relative, content in self._publish_files.items():
                target = output_dir / relative
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content)
        return result

    def clean(self, manifest_path: Path) -> ToolchainResult:
        return self._record("clean", manifest_path)

    def update_packages(self, manifest_path: Path) -> ToolchainResult:
        return self._record("update-packages", manifest_path)

    def _record(
        self, verb: str, manifest_path: Path, runtime: str | None = None
    ) -> ToolchainResult:
        name = Path(manifest_path).stem
        self.calls.append((verb, name, runtime))
        if name in self._failing:
            return ToolchainResult(False, (f"{verb} failed for {name}",))
        return ToolchainResult(True, (f"{verb} succeeded for {name}",))

    def called_projects(self, verb: str) -> list[str]:
        """Project names passed to ``verb``, in call order."""
        return [name for v, name, _ in self.calls if v == verb]
