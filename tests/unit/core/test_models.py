"""Tests for dependency references and weight models."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from breadscan.core.documents import dump_config, parse_config, read_config, write_config
from breadscan.core.models import (
    AccountWeight,
    ConfigV1,
    DependencyReference,
    VersionedConfig,
    Weights,
    WorkingWeights,
)
from breadscan.core.types import Ecosystem

# ============================================================================
# DependencyReference Tests
# ============================================================================


class TestDependencyReference:
    """Tests for the DependencyReference model."""

    def test_registry_shape(self, sample_reference: DependencyReference):
        assert sample_reference.url is None
        assert sample_reference.path is None
        assert sample_reference.label == "rust:serde"

    def test_immutable(self, sample_reference: DependencyReference):
        with pytest.raises(ValidationError):
            sample_reference.identifier = "other"

    def test_url_and_path_exclusive(self):
        """A reference cannot be both an explicit URL and a local path."""
        with pytest.raises(ValidationError):
            DependencyReference(
                ecosystem=Ecosystem.RUST,
                identifier="x",
                url="https://github.com/a/b",
                path=Path("../x"),
            )

    def test_empty_identifier_rejected(self):
        with pytest.raises(ValidationError):
            DependencyReference(ecosystem=Ecosystem.PYTHON, identifier="")


# ============================================================================
# WorkingWeights Tests
# ============================================================================


class TestWorkingWeights:
    """Tests for the in-memory aggregation target."""

    def test_later_write_overwrites(self):
        weights = WorkingWeights()
        weights.add_project("https://github.com/a/b", 10)
        weights.add_project("https://github.com/a/b", 20)
        assert weights.projects == {"https://github.com/a/b": 20}

    def test_none_is_distinct_from_weight(self):
        weights = WorkingWeights()
        weights.add_project("https://github.com/a/b")
        assert "https://github.com/a/b" in weights.projects
        assert weights.projects["https://github.com/a/b"] is None

    def test_merge_explicit_wins(self):
        running = WorkingWeights()
        running.add_project("P", 50)
        later = WorkingWeights()
        later.add_project("P", 100)
        running.merge(later)
        assert running.projects["P"] == 100

    def test_merge_none_keeps_known_weight(self):
        """A bare contribution must not blank out a previously known weight."""
        running = WorkingWeights()
        running.add_project("P", 50)
        running.add_account("acct", memo="kept", weight=5)
        later = WorkingWeights()
        later.add_project("P")
        later.add_project("Q")
        later.add_account("acct")
        running.merge(later)
        assert running.projects == {"P": 50, "Q": None}
        assert running.accounts["acct"].weight == 5
        assert running.accounts["acct"].memo == "kept"

    def test_merge_sums_failures(self):
        running = WorkingWeights()
        running.record_failure()
        later = WorkingWeights()
        later.record_failure()
        later.record_failure()
        running.merge(later)
        assert running.failures == 3
        assert running.complete is False

    def test_len_and_repr(self, sample_working_weights: WorkingWeights):
        assert len(sample_working_weights) == 3
        assert "projects=2" in repr(sample_working_weights)


# ============================================================================
# Document Tests
# ============================================================================


class TestWeights:
    """Tests for persisted weights."""

    def test_to_working_is_explicit(self, sample_weights: Weights):
        working = sample_weights.to_working()
        assert working.projects["https://gitlab.com/foo/bar"] == 70
        assert working.accounts["acct-1"].weight == 10

    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError):
            AccountWeight(weight=-1)


class TestVersionedConfig:
    """Tests for the V1 document and its YAML form."""

    def test_parse_v1(self):
        config = parse_config(
            "V1:\n"
            "  weights:\n"
            "    accounts:\n"
            "      acct-1:\n"
            "        weight: 3\n"
            "    projects:\n"
            "      https://github.com/a/b: 40\n"
        )
        assert config.latest.weights.projects == {"https://github.com/a/b": 40}
        assert config.latest.weights.accounts["acct-1"].weight == 3
        assert config.latest.disabled is False

    def test_empty_document(self):
        assert parse_config("") == VersionedConfig()

    @pytest.mark.parametrize("text", ["V2: {}", "- a\n- b\n", "V1: {weights: {projects: {x: notanumber}}}", "V1: ["])
    def test_invalid_documents(self, text: str):
        with pytest.raises(ValueError):
            parse_config(text)

    def test_dump_sorted_with_weight_only_accounts(self):
        config = VersionedConfig(
            V1=ConfigV1(
                weights=Weights(
                    accounts={"b": AccountWeight(weight=1, memo="m")},
                    projects={"https://z.com": 1, "https://a.com": 2},
                )
            )
        )
        document = config.to_document()
        assert list(document["V1"]["weights"]["projects"]) == ["https://a.com", "https://z.com"]
        assert document["V1"]["weights"]["accounts"] == {"b": {"weight": 1}}
        assert dump_config(config).startswith("V1:")

    def test_file_round_trip(self, tmp_path: Path, sample_weights: Weights):
        path = tmp_path / "nested" / ".bread.yml"
        assert read_config(path) is None

        write_config(path, VersionedConfig(V1=ConfigV1(weights=sample_weights)))

        loaded = read_config(path)
        assert loaded.latest.weights.projects == sample_weights.projects
        assert [p.name for p in path.parent.iterdir()] == [".bread.yml"]
