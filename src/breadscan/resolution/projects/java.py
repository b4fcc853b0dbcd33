"""Java adapter: Maven pom.xml files and POMs from Maven Central."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from lxml import etree

from breadscan.cache.keys import CacheKeys
from breadscan.core.exceptions import ManifestError, ResolutionError
from breadscan.core.models import DependencyReference
from breadscan.core.types import Ecosystem, SelectionPolicy
from breadscan.resolution.base import ScanResult
from breadscan.resolution.projects.base import ProjectEcosystem

if TYPE_CHECKING:
    from breadscan.resolution.context import ResolutionContext

logger = logging.getLogger(__name__)

# Plugins may omit their group
DEFAULT_PLUGIN_GROUP = "org.apache.maven.plugins"

# POMs are namespaced inconsistently, match on local names only
_COORDINATE_ELEMENTS = "//*[local-name()='dependency' or local-name()='extension' or local-name()='plugin']"
_MODULES = "//*[local-name()='modules']/*[local-name()='module']"
_SCM_URL = "normalize-space(//*[local-name()='scm']/*[local-name()='url'])"


def parse_pom(raw: bytes) -> etree._Element:
    """Parse POM bytes without resolving external entities."""
    parser = etree.XMLParser(resolve_entities=False, no_network=True, recover=False)
    return etree.fromstring(raw, parser=parser)


def _child_text(node: etree._Element, name: str) -> str:
    return node.xpath("normalize-space(./*[local-name()=$name])", name=name)


class JavaEcosystem(ProjectEcosystem):
    """
    Maven projects.

    Each dependency, build extension and plugin is looked up by its exact
    coordinates in Maven Central, and the ``scm/url`` of that POM is the
    only candidate. ``modules/module`` entries are sub-roots.
    """

    ECOSYSTEM = Ecosystem.JAVA
    POLICY = SelectionPolicy.CANONICAL_FALLBACK
    MANIFEST = "pom.xml"
    BASE_URL = "https://search.maven.org/remotecontent"

    def load_manifest(self, raw: bytes) -> etree._Element:
        try:
            return parse_pom(raw)
        except etree.XMLSyntaxError as e:
            raise ManifestError(f"Error parsing pom.xml: {e}") from e

    async def parse_manifest(self, root: Path, document: etree._Element) -> ScanResult:
        result = ScanResult()
        for node in document.xpath(_COORDINATE_ELEMENTS):
            group = _child_text(node, "groupId")
            artifact = _child_text(node, "artifactId")
            version = _child_text(node, "version")
            if not group and etree.QName(node).localname == "plugin":
                group = DEFAULT_PLUGIN_GROUP
            if not (group and artifact and version) or "${" in version:
                logger.debug(f"Skipping unversioned Maven artifact {group}:{artifact} in {root}")
                continue
            result.references.append(self.reference(f"{group}:{artifact}", version=version))

        for module in document.xpath(_MODULES):
            if name := (module.text or "").strip():
                result.sub_roots.append(root / name)
        return result

    def cache_key(self, reference: DependencyReference) -> str | None:
        group, _, artifact = reference.identifier.partition(":")
        return CacheKeys.maven(group, artifact, reference.version or "")

    def pom_url(self, reference: DependencyReference) -> str:
        group, _, artifact = reference.identifier.partition(":")
        version = reference.version
        filepath = f"{group.replace('.', '/')}/{artifact}/{version}/{artifact}-{version}.pom"
        return f"{self.BASE_URL}?filepath={filepath}"

    async def fetch_metadata(
        self,
        reference: DependencyReference,
        context: ResolutionContext,
    ) -> bytes | None:
        return await context.fetcher.get_bytes(self.pom_url(reference), accept="application/xml")

    def parse_candidates(self, reference: DependencyReference, payload: bytes | None) -> list[str]:
        if not payload:
            return []
        try:
            pom = parse_pom(payload)
        except etree.XMLSyntaxError as e:
            raise ResolutionError(f"Error parsing POM of {reference.label}: {e}") from e
        url = pom.xpath(_SCM_URL)
        return [url] if url else []
