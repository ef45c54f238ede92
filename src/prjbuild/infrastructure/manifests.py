"""
MSBuild-style manifest reader.

Version declarations come from three places per project:

- the project file's first ``<Version>`` element,
- ``Properties/AssemblyInfo.cs`` lines declaring ``AssemblyVersion("...")``,
- ``app.manifest``'s ``<assemblyIdentity version="..."/>``.

Project references are the ``<ProjectReference Include="..."/>`` items of the
project file, reduced to the referenced project's name.
"""

import logging
from collections.abc import Iterator
from pathlib import Path, PureWindowsPath

import lxml.etree

from prjbuild.domain.interfaces import ManifestReaderInterface
from prjbuild.domain.models import VersionSource, VersionSourceKind

logger = logging.getLogger(__name__)

ASSEMBLY_INFO_PATH = Path("Properties") / "AssemblyInfo.cs"
APP_MANIFEST_PATHS = (Path("app.manifest"), Path("Properties") / "app.manifest")

PARSER = lxml.etree.XMLParser(
    remove_comments=True, remove_pis=True, resolve_entities=False
)


def _parse_xml(path: Path) -> lxml.etree._Element | None:
    try:
        return lxml.etree.parse(str(path), PARSER).getroot()
    except (OSError, lxml.etree.XMLSyntaxError) as e:
        logger.error("Error reading %s: %s", path, e)
        return None


def _elements(
    root: lxml.etree._Element, local_name: str
) -> Iterator[lxml.etree._Element]:
    """Elements with this name anywhere in the tree, in any namespace."""
    for element in root.iter(lxml.etree.Element):
        if lxml.etree.QName(element).localname == local_name:
            yield element


class MsBuildManifestReader(ManifestReaderInterface):
    """Reads .csproj, AssemblyInfo.cs and app.manifest files."""

    def read_version_sources(
        self, project_dir: Path, manifest_path: Path
    ) -> list[VersionSource]:
        sources: list[VersionSource] = []

        source = self._project_manifest_version(manifest_path)
        if source is not None:
            sources.append(source)

        sources.extend(self._assembly_info_versions(project_dir / ASSEMBLY_INFO_PATH))

        for relative in APP_MANIFEST_PATHS:
            candidate = project_dir / relative
            if candidate.is_file():
                source = self._app_manifest_version(candidate)
                if source is not None:
                    sources.append(source)
                break

        return sources

    def read_project_references(self, manifest_path: Path) -> list[str]:
        root = _parse_xml(manifest_path) if manifest_path.is_file() else None
        if root is None:
            return []

        names = []
        for element in _elements(root, "ProjectReference"):
            include = element.get("Include")
            if not include:
                continue
            # Include paths are usually written with backslashes
            name = PureWindowsPath(include).stem
            if name and name not in names:
                names.append(name)
        return names

    def _project_manifest_version(self, manifest_path: Path) -> VersionSource | None:
        root = _parse_xml(manifest_path) if manifest_path.is_file() else None
        if root is None:
            return None

        for element in _elements(root, "Version"):
            text = (element.text or "").strip()
            logger.debug("Extracted version %s from project file %s", text, manifest_path)
            return VersionSource(
                VersionSourceKind.PROJECT_MANIFEST, str(manifest_path), text
            )
        return None

    def _assembly_info_versions(self, path: Path) -> list[VersionSource]:
        if not path.is_file():
            return []
        try:
            lines = path.read_text(encoding="utf-8-sig").splitlines()
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Error reading %s: %s", path, e)
            return []

        sources = []
        for line in lines:
            if line.lstrip().startswith("//"):
                continue
            if "AssemblyVersion" not in line or '"' not in line:
                continue
            start = line.index('"') + 1
            end = line.rindex('"')
            if end > start:
                text = line[start:end]
                sources.append(
                    VersionSource(VersionSourceKind.ASSEMBLY_METADATA, str(path), text)
                )
                logger.debug("Extracted version %s from %s", text, path)
        return sources

    def _app_manifest_version(self, path: Path) -> VersionSource | None:
        root = _parse_xml(path)
        if root is None:
            return None

        for element in _elements(root, "assemblyIdentity"):
            version = element.get("version")
            if version is None:
                continue
            logger.debug("Extracted version %s from application manifest %s", version, path)
            return VersionSource(VersionSourceKind.APP_MANIFEST, str(path), version)
        return None
