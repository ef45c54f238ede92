"""Tests for build toolchain adapters."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from prjbuild.infrastructure.toolchain import DotnetToolchain, MockToolchain

MANIFEST = Path("/work/Foo/src/Foo.App/Foo.App.csproj")


def completed(returncode=0, stdout="", stderr=""):
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


class TestDotnetToolchain:
    """Tests for DotnetToolchain command lines and result mapping."""

    def test_restore_command(self):
        """restore runs in the project directory."""
        with patch("subprocess.run", return_value=completed()) as mock_run:
            result = DotnetToolchain().restore(MANIFEST)

        assert result.success
        args, kwargs = mock_run.call_args
        assert args[0] == ["dotnet", "restore", str(MANIFEST)]
        assert kwargs["cwd"] == str(MANIFEST.parent)
        assert kwargs["capture_output"] is True

    def test_build_with_runtime(self):
        with patch("subprocess.run", return_value=completed()) as mock_run:
            DotnetToolchain(configuration="Debug").build(MANIFEST, runtime="linux-x64")

        assert mock_run.call_args[0][0] == [
            "dotnet",
            "build",
            str(MANIFEST),
            "--configuration",
            "Debug",
            "--runtime",
            "linux-x64",
            "--self-contained",
        ]

    def test_publish_command(self):
        output = Path("/work/out")
        with patch("subprocess.run", return_value=completed()) as mock_run:
            DotnetToolchain(executable="/opt/dotnet/dotnet").publish(
                MANIFEST, "win-x64", output
            )

        command = mock_run.call_args[0][0]
        assert command[:3] == ["/opt/dotnet/dotnet", "publish", str(MANIFEST)]
        assert command[command.index("--runtime") + 1] == "win-x64"
        assert command[command.index("--output") + 1] == str(output)
        assert "--self-contained" in command

    def test_output_lines_and_stderr_prefix(self):
        run_result = completed(0, stdout="Restored\n\nDone\n", stderr="warn\n")
        with patch("subprocess.run", return_value=run_result):
            result = DotnetToolchain().clean(MANIFEST)

        assert result.output == ("Restored", "Done", "Error: warn")

    def test_nonzero_exit_is_failure(self):
        with patch("subprocess.run", return_value=completed(1, stderr="CS1002")):
            result = DotnetToolchain().build(MANIFEST)

        assert not result.success
        assert result.output == ("Error: CS1002",)

    def test_missing_executable_is_failure(self):
        """A missing dotnet executable yields a failed result, not an exception."""
        with patch("subprocess.run", side_effect=FileNotFoundError("dotnet")):
            result = DotnetToolchain().restore(MANIFEST)

        assert not result.success
        assert result.output[0].startswith("Error:")

    def test_timeout_is_failure(self):
        with patch(
            "subprocess.run", side_effect=subprocess.TimeoutExpired("dotnet", 5)
        ):
            result = DotnetToolchain(timeout=5).build(MANIFEST)

        assert not result.success

    def test_update_packages_adds_each_outdated_package(self):
        """Rows marked with > in the outdated listing are added again."""
        listing = (
            "Project `Foo.App` has the following updates to its packages\n"
            "   [net8.0]: \n"
            "   Top-level Package      Requested   Resolved   Latest\n"
            "   > Newtonsoft.Json      12.0.1      12.0.1     13.0.3\n"
            "   > Serilog              2.10.0      2.10.0     4.0.0\n"
        )
        with patch(
            "subprocess.run",
            side_effect=[completed(stdout=listing), completed(), completed()],
        ) as mock_run:
            result = DotnetToolchain().update_packages(MANIFEST)

        assert result.success
        commands = [c[0][0] for c in mock_run.call_args_list]
        assert commands == [
            ["dotnet", "list", str(MANIFEST), "package", "--outdated"],
            ["dotnet", "add", str(MANIFEST), "package", "Newtonsoft.Json"],
            ["dotnet", "add", str(MANIFEST), "package", "Serilog"],
        ]

    def test_update_packages_with_nothing_outdated(self):
        listing = "The given project `Foo.App` has no updates.\n"
        with patch(
            "subprocess.run", return_value=completed(stdout=listing)
        ) as mock_run:
            result = DotnetToolchain().update_packages(MANIFEST)

        assert result.success
        assert mock_run.call_count == 1

    def test_update_packages_fails_when_any_add_fails(self):
        listing = "   > Newtonsoft.Json   12.0.1   12.0.1   13.0.3\n"
        with patch(
            "subprocess.run",
            side_effect=[completed(stdout=listing), completed(1, stderr="NU1101")],
        ):
            result = DotnetToolchain().update_packages(MANIFEST)

        assert not result.success
        assert "Error: NU1101" in result.output

    def test_update_packages_stops_when_listing_fails(self):
        failed = completed(1, stderr="no such file")
        with patch("subprocess.run", return_value=failed) as mock_run:
            result = DotnetToolchain().update_packages(MANIFEST)

        assert not result.success
        assert mock_run.call_count == 1


class TestMockToolchain:
    """Tests for MockToolchain."""

    def test_records_calls(self):
        toolchain = MockToolchain()

        toolchain.restore(MANIFEST)
        toolchain.build(MANIFEST, runtime="linux-x64")

        assert toolchain.calls == [
            ("restore", "Foo.App", None),
            ("build", "Foo.App", "linux-x64"),
        ]
        assert toolchain.called_projects("build") == ["Foo.App"]

    def test_scripted_failures(self):
        toolchain = MockToolchain(failing={"Foo.App"})

        result = toolchain.clean(MANIFEST)

        assert not result.success
        assert result.output == ("clean failed for Foo.App",)

    def test_publish_materializes_files(self, tmp_path):
        toolchain = MockToolchain(publish_files={"lib/a.dll": "a", "app.exe": "x"})

        result = toolchain.publish(MANIFEST, "linux-x64", tmp_path / "out")

        assert result.success
        assert (tmp_path / "out" / "lib" / "a.dll").read_text() == "a"
        assert (tmp_path / "out" / "app.exe").is_file()

    def test_failed_publish_writes_nothing(self, tmp_path):
        toolchain = MockToolchain(failing={"Foo.App"})

        toolchain.publish(MANIFEST, "linux-x64", tmp_path / "out")

        assert not (tmp_path / "out").exists()

    @pytest.mark.parametrize("verb", ["restore", "clean"])
    def test_success_message(self, verb):
        result = getattr(MockToolchain(), verb)(MANIFEST)

        assert result.output == (f"{verb} succeeded for Foo.App",)

    def test_records_package_updates(self):
        toolchain = MockToolchain()

        result = toolchain.update_packages(MANIFEST)

        assert result.success
        assert toolchain.called_projects("update-packages") == ["Foo.App"]
