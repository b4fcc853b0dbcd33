"""Tests for the Maven adapter."""

from __future__ import annotations

from pathlib import Path

import pytest
import respx
from httpx import Response

from breadscan.core.exceptions import ManifestError, ResolutionError
from breadscan.core.types import SelectionPolicy
from breadscan.resolution.context import ResolutionContext
from breadscan.resolution.projects import JavaEcosystem


@pytest.fixture
def ecosystem() -> JavaEcosystem:
    return JavaEcosystem()


POM_XML = """<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>
  <modules>
    <module>core</module>
    <module>cli</module>
  </modules>
  <dependencies>
    <dependency>
      <groupId>com.google.guava</groupId>
      <artifactId>guava</artifactId>
      <version>32.1.2-jre</version>
    </dependency>
    <dependency>
      <groupId>org.slf4j</groupId>
      <artifactId>slf4j-api</artifactId>
      <version>${slf4j.version}</version>
    </dependency>
    <dependency>
      <groupId>junit</groupId>
      <artifactId>junit</artifactId>
    </dependency>
  </dependencies>
  <build>
    <extensions>
      <extension>
        <groupId>kr.motd.maven</groupId>
        <artifactId>os-maven-plugin</artifactId>
        <version>1.7.1</version>
      </extension>
    </extensions>
    <plugins>
      <plugin>
        <artifactId>maven-compiler-plugin</artifactId>
        <version>3.11.0</version>
      </plugin>
    </plugins>
  </build>
</project>
"""

CENTRAL_POM = b"""<project>
  <scm>
    <url> https://github.com/google/guava </url>
    <connection>scm:git:https://github.com/google/guava.git</connection>
  </scm>
</project>"""


# ============================================================================
# Manifest Tests
# ============================================================================


class TestPomManifest:
    """Tests for reading pom.xml."""

    async def test_coordinates(self, ecosystem: JavaEcosystem, tmp_path: Path):
        (tmp_path / "pom.xml").write_text(POM_XML)

        result = await ecosystem.scan(tmp_path)

        assert [(ref.identifier, ref.version) for ref in result.references] == [
            ("com.google.guava:guava", "32.1.2-jre"),
            ("kr.motd.maven:os-maven-plugin", "1.7.1"),
            ("org.apache.maven.plugins:maven-compiler-plugin", "3.11.0"),
        ]

    async def test_modules(self, ecosystem: JavaEcosystem, tmp_path: Path):
        (tmp_path / "pom.xml").write_text(POM_XML)

        result = await ecosystem.scan(tmp_path)

        assert result.sub_roots == [tmp_path / "core", tmp_path / "cli"]

    async def test_malformed(self, ecosystem: JavaEcosystem, tmp_path: Path):
        (tmp_path / "pom.xml").write_text("<project><dependencies>")
        with pytest.raises(ManifestError):
            await ecosystem.scan(tmp_path)


# ============================================================================
# Maven Central Tests
# ============================================================================


class TestMavenCentral:
    """Tests for POM lookups by exact coordinates."""

    def test_policy(self, ecosystem: JavaEcosystem):
        assert ecosystem.policy == SelectionPolicy.CANONICAL_FALLBACK

    def test_pom_url(self, ecosystem: JavaEcosystem):
        reference = ecosystem.reference("com.google.guava:guava", version="32.1.2-jre")
        assert ecosystem.pom_url(reference) == (
            "https://search.maven.org/remotecontent"
            "?filepath=com/google/guava/guava/32.1.2-jre/guava-32.1.2-jre.pom"
        )

    def test_cache_key_includes_version(self, ecosystem: JavaEcosystem):
        reference = ecosystem.reference("com.google.guava:guava", version="32.1.2-jre")
        assert ecosystem.cache_key(reference) == "maven-com.google.guava:guava:32.1.2-jre"

    @respx.mock
    async def test_scm_url(self, ecosystem: JavaEcosystem, context: ResolutionContext):
        reference = ecosystem.reference("com.google.guava:guava", version="32.1.2-jre")
        respx.get(ecosystem.pom_url(reference)).mock(return_value=Response(200, content=CENTRAL_POM))

        payload = await ecosystem.fetch_metadata(reference, context)

        assert ecosystem.parse_candidates(reference, payload) == ["https://github.com/google/guava"]

    @respx.mock
    async def test_unknown_artifact(self, ecosystem: JavaEcosystem, context: ResolutionContext):
        reference = ecosystem.reference("org.example:nope", version="1")
        respx.get(ecosystem.pom_url(reference)).mock(return_value=Response(404))

        payload = await ecosystem.fetch_metadata(reference, context)

        assert ecosystem.parse_candidates(reference, payload) == []

    def test_pom_without_scm(self, ecosystem: JavaEcosystem):
        reference = ecosystem.reference("a:b", version="1")
        assert ecosystem.parse_candidates(reference, b"<project/>") == []

    def test_corrupt_pom(self, ecosystem: JavaEcosystem):
        reference = ecosystem.reference("a:b", version="1")
        with pytest.raises(ResolutionError):
            ecosystem.parse_candidates(reference, b"<project>")
