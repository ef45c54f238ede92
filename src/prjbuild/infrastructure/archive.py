"""
Zip implementation of the archive writer.

Traversal is fully determined by sorting: at each directory every
subdirectory is processed completely (case-insensitive ordinal order) before
the directory's own files are added, in the same order. Entry names are
relative to the source directory with forward slashes. A UTF-8 (BOM) manifest
listing the entries in insertion order is written next to the archive.
"""

import logging
import os
import zipfile
from collections.abc import Iterable
from pathlib import Path

from prjbuild.domain.interfaces import ArchiveWriterInterface
from prjbuild.domain.models import ArchiveResult, PolicyConfig
from prjbuild.domain.naming import manifest_path_for
from prjbuild.domain.policy import is_ignored

logger = logging.getLogger(__name__)

MANIFEST_ENCODING = "utf-8-sig"


def ordinal_ignore_case(name: str) -> tuple[str, str]:
    """Sort key: upper-cased ordinal order, exact name as tie-break."""
    return (name.upper(), name)


class ZipArchiveWriter(ArchiveWriterInterface):
    """Writes deflate-compressed zip archives with a sibling entry manifest."""

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED):
        self._compression = compression

    def write_archive(
        self,
        source_dir: Path,
        dest_path: Path,
        ignored_names: Iterable[str] = (),
        ignored_path_fragments: Iterable[str] = (),
    ) -> ArchiveResult:
        source_dir = Path(source_dir)
        dest_path = Path(dest_path)
        manifest_path = manifest_path_for(dest_path)
        policy = PolicyConfig(frozenset(ignored_names), frozenset(ignored_path_fragments))
        # Never archive our own outputs when they live inside the source tree
        own_outputs = {dest_path.resolve(), manifest_path.resolve()}

        try:
            if not source_dir.is_dir():
                raise FileNotFoundError(f"Source directory not found: {source_dir}")
            for path in (dest_path, manifest_path):
                if path.exists():
                    path.unlink()
            dest_path.parent.mkdir(parents=True, exist_ok=True)

            entries: list[str] = []
            with zipfile.ZipFile(
                dest_path, "w", compression=self._compression, strict_timestamps=False
            ) as zf:
                self._add_directory(zf, source_dir, "", policy, own_outputs, entries)

            with open(manifest_path, "w", encoding=MANIFEST_ENCODING, newline="\n") as f:
                for entry in entries:
                    f.write(f"{entry}\n")

        except (OSError, ValueError) as e:
            # ValueError covers names zip cannot encode (UnicodeEncodeError)
            logger.error(
                "Error creating archive %s from %s: %s", dest_path, source_dir, e
            )
            self._remove_partial(dest_path, manifest_path)
            return ArchiveResult(
                success=False,
                archive_path=dest_path,
                manifest_path=manifest_path,
                error=str(e),
            )

        logger.info(
            "Created archive %s from %s (%d entries)", dest_path, source_dir, len(entries)
        )
        return ArchiveResult(
            success=True,
            archive_path=dest_path,
            manifest_path=manifest_path,
            entries=tuple(entries),
        )

    def _add_directory(
        self,
        zf: zipfile.ZipFile,
        directory: Path,
        relative: str,
        policy: PolicyConfig,
        own_outputs: set[Path],
        entries: list[str],
    ) -> None:
        with os.scandir(directory) as it:
            children = list(it)

        subdirs = sorted(
            (c for c in children if c.is_dir(follow_symlinks=False)),
            key=lambda c: ordinal_ignore_case(c.name),
        )
        files = sorted(
            (c for c in children if c.is_file()),
            key=lambda c: ordinal_ignore_case(c.name),
        )

        for child in subdirs:
            child_relative = f"{relative}{child.name}"
            if is_ignored(child.name, child_relative, policy):
                logger.debug("Ignoring directory %s", child.path)
                continue
            self._add_directory(
                zf, Path(child.path), f"{child_relative}/", policy, own_outputs, entries
            )

        for child in files:
            entry_name = f"{relative}{child.name}"
            if is_ignored(child.name, entry_name, policy):
                logger.debug("Ignoring file %s", child.path)
                continue
            if Path(child.path).resolve() in own_outputs:
                continue
            if "\n" in entry_name or "\r" in entry_name:
                # the manifest holds one entry per line
                logger.warning(
                    "Skipping file with a line break in its name: %r", child.path
                )
                continue
            zf.write(child.path, arcname=entry_name)
            entries.append(entry_name)

    @staticmethod
    def _remove_partial(*paths: Path) -> None:
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Could not remove partial output %s: %s", path, e)
