"""Shared pytest fixtures for prjbuild tests."""

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from prjbuild.domain.models import (
    Project,
    Solution,
    VersionSource,
    VersionSourceKind,
)
from prjbuild.domain.settings import (
    ProjectConfig,
    RootDirectoryConfig,
    Settings,
    SolutionConfig,
)
from prjbuild.infrastructure.manifests import MsBuildManifestReader
from prjbuild.infrastructure.toolchain.mock import MockToolchain


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers the CLI attaches so later tests don't write to closed streams."""
    yield
    logger = logging.getLogger("prjbuild")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def csproj_xml(version: str | None = None, references: Sequence[str] = ()) -> str:
    """Minimal SDK-style project file."""
    lines = ['<Project Sdk="Microsoft.NET.Sdk">', "  <PropertyGroup>"]
    if version is not None:
        lines.append(f"    <Version>{version}</Version>")
    lines.append("  </PropertyGroup>")
    if references:
        lines.append("  <ItemGroup>")
        for ref in references:
            lines.append(f'    <ProjectReference Include="..\\{ref}\\{ref}.csproj" />')
        lines.append("  </ItemGroup>")
    lines.append("</Project>")
    return "\n".join(lines) + "\n"


@pytest.fixture
def write_project() -> Callable[..., Path]:
    """Factory writing a project directory; returns the manifest path."""

    def _write(
        parent: Path,
        name: str,
        version: str | None = None,
        references: Sequence[str] = (),
        assembly_versions: Sequence[str] = (),
        app_manifest_version: str | None = None,
    ) -> Path:
        project_dir = parent / name
        project_dir.mkdir(parents=True, exist_ok=True)
        manifest = project_dir / f"{name}.csproj"
        manifest.write_text(csproj_xml(version, references))
        if assembly_versions:
            props = project_dir / "Properties"
            props.mkdir(exist_ok=True)
            (props / "AssemblyInfo.cs").write_text(
                "using System.Reflection;\n"
                + "".join(
                    f'[assembly: AssemblyVersion("{v}")]\n' for v in assembly_versions
                )
            )
        if app_manifest_version is not None:
            (project_dir / "app.manifest").write_text(
                '<?xml version="1.0" encoding="utf-8"?>\n'
                '<assembly manifestVersion="1.0" xmlns="urn:schemas-microsoft-com:asm.v1">\n'
                f'  <assemblyIdentity version="{app_manifest_version}" name="MyApplication.app"/>\n'
                "</assembly>\n"
            )
        return manifest

    return _write


@pytest.fixture
def workspace(tmp_path: Path, write_project: Callable[..., Path]) -> Path:
    """
    A root directory holding solution "Foo":

        root/Foo/Foo.sln
        root/Foo/src/Foo.App   (Version 2.1, references Foo.Core)
        root/Foo/src/Foo.Core  (Version 2.1)
        root/Foo/src/bin/Stale/Stale.csproj   (under an ignored directory)
        root/Foo/README.md
    """
    solution_dir = tmp_path / "root" / "Foo"
    solution_dir.mkdir(parents=True)
    (solution_dir / "Foo.sln").write_text("Microsoft Visual Studio Solution File\n")
    (solution_dir / "README.md").write_text("# Foo\n")
    write_project(solution_dir / "src", "Foo.App", "2.1", references=["Foo.Core"])
    write_project(solution_dir / "src", "Foo.Core", "2.1")
    write_project(solution_dir / "src" / "bin", "Stale", "0.1")
    return tmp_path


@pytest.fixture
def settings(workspace: Path) -> Settings:
    """Settings for the workspace fixture: one root, archives beside it."""
    return Settings(
        root_directories=(
            RootDirectoryConfig(
                path=workspace / "root", archive_directory=workspace / "archives"
            ),
        ),
        solutions=(
            SolutionConfig(
                name="Foo",
                projects=(
                    ProjectConfig(name="Foo.App", supported_runtimes=("linux-x64",)),
                    ProjectConfig(
                        name="Foo.Core",
                        supported_runtimes=("linux-x64", "win-x64"),
                    ),
                ),
            ),
        ),
        ignored_names=("bin", "obj"),
    )


@pytest.fixture
def manifest_reader() -> MsBuildManifestReader:
    return MsBuildManifestReader()


@pytest.fixture
def mock_toolchain() -> MockToolchain:
    return MockToolchain()


@pytest.fixture
def make_solution(tmp_path: Path) -> Callable[..., Solution]:
    """Factory for an in-memory solution (no files on disk).

    ``projects`` maps project name -> list of manifest version strings
    (first entry is a PROJECT_MANIFEST source, the rest ASSEMBLY_METADATA).
    """

    def _make(
        name: str = "Foo",
        projects: dict[str, list[str]] | None = None,
        runtimes: Sequence[str] = ("linux-x64",),
    ) -> Solution:
        solution = Solution(
            name=name,
            root_path=tmp_path / name,
            manifest_path=tmp_path / name / f"{name}.sln",
            archive_directory=tmp_path / "archives",
        )
        for project_name, versions in (projects or {}).items():
            sources = [
                VersionSource(
                    VersionSourceKind.PROJECT_MANIFEST
                    if i == 0
                    else VersionSourceKind.ASSEMBLY_METADATA,
                    f"{project_name}.csproj",
                    text,
                )
                for i, text in enumerate(versions)
            ]
            solution.projects.append(
                Project(
                    name=project_name,
                    root_path=solution.root_path / project_name,
                    manifest_path=solution.root_path / project_name / f"{project_name}.csproj",
                    solution=solution,
                    version_sources=sources,
                    supported_runtimes=list(runtimes),
                )
            )
        return solution

    return _make
