"""Tests for MsBuildManifestReader."""

from pathlib import Path

import pytest

from prjbuild.domain.models import VersionSourceKind
from prjbuild.infrastructure.manifests import MsBuildManifestReader


@pytest.fixture
def reader() -> MsBuildManifestReader:
    return MsBuildManifestReader()


class TestVersionSources:
    """Tests for read_version_sources()."""

    def test_all_three_kinds_in_order(self, reader, write_project, tmp_path):
        manifest = write_project(
            tmp_path,
            "Foo.App",
            "2.1",
            assembly_versions=["2.1.0.0"],
            app_manifest_version="2.1.0.0",
        )

        sources = reader.read_version_sources(manifest.parent, manifest)

        assert [(s.kind, s.raw_text) for s in sources] == [
            (VersionSourceKind.PROJECT_MANIFEST, "2.1"),
            (VersionSourceKind.ASSEMBLY_METADATA, "2.1.0.0"),
            (VersionSourceKind.APP_MANIFEST, "2.1.0.0"),
        ]
        assert sources[0].origin_path == str(manifest)

    def test_no_version_files_gives_empty_list(self, reader, write_project, tmp_path):
        manifest = write_project(tmp_path, "Foo.App")

        assert reader.read_version_sources(manifest.parent, manifest) == []

    def test_first_version_element_wins(self, reader, tmp_path):
        manifest = tmp_path / "Foo.csproj"
        manifest.write_text(
            '<Project Sdk="Microsoft.NET.Sdk">\n'
            "  <PropertyGroup><Version> 1.0 </Version></PropertyGroup>\n"
            "  <PropertyGroup><Version>9.9</Version></PropertyGroup>\n"
            "</Project>\n"
        )

        sources = reader.read_version_sources(tmp_path, manifest)

        assert [s.raw_text for s in sources] == ["1.0"]

    def test_commented_out_version_is_ignored(self, reader, tmp_path):
        manifest = tmp_path / "Foo.csproj"
        manifest.write_text(
            '<Project Sdk="Microsoft.NET.Sdk">\n'
            "  <!-- <PropertyGroup><Version>0.9</Version></PropertyGroup> -->\n"
            "  <PropertyGroup><Version>1.0</Version></PropertyGroup>\n"
            "</Project>\n"
        )

        sources = reader.read_version_sources(tmp_path, manifest)

        assert [s.raw_text for s in sources] == ["1.0"]

    def test_namespaced_legacy_project_file(self, reader, tmp_path):
        manifest = tmp_path / "Legacy.csproj"
        manifest.write_text(
            '<?xml version="1.0" encoding="utf-8"?>\n'
            '<Project ToolsVersion="15.0" '
            'xmlns="http://schemas.microsoft.com/developer/msbuild/2003">\n'
            "  <PropertyGroup><Version>3.4.5</Version></PropertyGroup>\n"
            "</Project>\n"
        )

        sources = reader.read_version_sources(tmp_path, manifest)

        assert sources[0].parsed is not None
        assert str(sources[0].parsed) == "3.4.5.0"

    def test_assembly_info_comments_are_skipped(self, reader, tmp_path):
        manifest = tmp_path / "Foo.csproj"
        manifest.write_text("<Project />\n")
        props = tmp_path / "Properties"
        props.mkdir()
        (props / "AssemblyInfo.cs").write_text(
            "using System.Reflection;\n"
            '// [assembly: AssemblyVersion("0.0.0.1")]\n'
            '[assembly: AssemblyVersion("1.0.*")]\n'
            '[assembly: AssemblyFileVersion("1.0.0.0")]\n'
        )

        sources = reader.read_version_sources(tmp_path, manifest)

        assert [(s.kind, s.raw_text) for s in sources] == [
            (VersionSourceKind.ASSEMBLY_METADATA, "1.0.*"),
        ]
        assert sources[0].parsed is None

    def test_app_manifest_under_properties(self, reader, tmp_path):
        manifest = tmp_path / "Foo.csproj"
        manifest.write_text("<Project />\n")
        props = tmp_path / "Properties"
        props.mkdir()
        (props / "app.manifest").write_text(
            '<assembly xmlns="urn:schemas-microsoft-com:asm.v1">'
            '<assemblyIdentity version="4.0.0.0" name="x"/></assembly>'
        )

        sources = reader.read_version_sources(tmp_path, manifest)

        assert [(s.kind, s.raw_text) for s in sources] == [
            (VersionSourceKind.APP_MANIFEST, "4.0.0.0"),
        ]

    def test_malformed_manifest_is_logged_and_skipped(
        self, reader, tmp_path, caplog
    ):
        manifest = tmp_path / "Broken.csproj"
        manifest.write_text("<Project><PropertyGroup>")
        (tmp_path / "app.manifest").write_text(
            '<assembly><assemblyIdentity version="1.2"/></assembly>'
        )

        sources = reader.read_version_sources(tmp_path, manifest)

        assert [s.kind for s in sources] == [VersionSourceKind.APP_MANIFEST]
        assert "Broken.csproj" in caplog.text


class TestProjectReferences:
    """Tests for read_project_references()."""

    def test_reference_names_from_include_paths(self, reader, write_project, tmp_path):
        manifest = write_project(
            tmp_path, "Foo.App", references=["Foo.Core", "Foo.Data"]
        )

        assert reader.read_project_references(manifest) == ["Foo.Core", "Foo.Data"]

    def test_forward_slash_includes(self, reader, tmp_path):
        manifest = tmp_path / "Foo.csproj"
        manifest.write_text(
            "<Project><ItemGroup>"
            '<ProjectReference Include="../Lib/Lib.csproj" />'
            '<ProjectReference Include="../Lib/Lib.csproj" />'
            "<ProjectReference />"
            "</ItemGroup></Project>"
        )

        assert reader.read_project_references(manifest) == ["Lib"]

    def test_missing_manifest_has_no_references(self, reader, tmp_path):
        assert reader.read_project_references(tmp_path / "Missing.csproj") == []
