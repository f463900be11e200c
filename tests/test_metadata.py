"""Tests for the project metadata sidecar and structural tier detection."""

from __future__ import annotations

import pytest
import yaml

from healthgen.metadata import (
    METADATA_FILENAME,
    detect_project,
    read_metadata,
    tier_summary,
    write_metadata,
)
from healthgen.tiers import Tier

pytestmark = pytest.mark.unit


class TestSidecar:
    def test_write_and_read(self, make_context, tmp_path, fixed_timestamp):
        ctx = make_context("advanced", description="Pinger")
        path = write_metadata(tmp_path, ctx)
        assert path == tmp_path / METADATA_FILENAME

        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert raw["name"] == "demo-svc"
        assert raw["tier"] == "advanced"
        assert raw["module"] == "github.com/acme/demo-svc"

        meta = read_metadata(tmp_path)
        assert meta is not None
        assert meta.tier is Tier.ADVANCED
        assert meta.description == "Pinger"
        assert meta.generated_at == fixed_timestamp
        assert meta.features["opentelemetry"] is True
        assert meta.detected is False

    def test_read_missing(self, tmp_path):
        assert read_metadata(tmp_path) is None


class TestDetectProject:
    def test_prefers_sidecar(self, make_context, tmp_path):
        write_metadata(tmp_path, make_context("intermediate"))
        (tmp_path / "internal/security").mkdir(parents=True)
        assert detect_project(tmp_path).tier is Tier.INTERMEDIATE

    @pytest.mark.parametrize(
        "marker, expected",
        [
            (None, Tier.BASIC),
            ("internal/handlers/dependencies.go", Tier.INTERMEDIATE),
            ("internal/events/emitter.go", Tier.ADVANCED),
            ("internal/compliance/audit.go", Tier.ENTERPRISE),
            ("internal/security/mtls.go", Tier.ENTERPRISE),
        ],
    )
    def test_structural_detection(self, tmp_path, marker, expected):
        project = tmp_path / "svc"
        project.mkdir()
        (project / "go.mod").write_text("module example.com/svc\n\ngo 1.21\n")
        if marker:
            (project / marker).parent.mkdir(parents=True, exist_ok=True)
            (project / marker).write_text("package x\n")

        meta = detect_project(project)
        assert meta.tier is expected
        assert meta.module == "example.com/svc"
        assert meta.name == "svc"
        assert meta.detected is True

    def test_no_go_mod(self, tmp_path):
        assert detect_project(tmp_path).module == "unknown"


class TestTierSummary:
    def test_basic(self):
        summary = tier_summary("basic")
        assert summary["name"] == "basic"
        assert summary["version"] == "1.0.0"
        assert summary["features"] == ["kubernetes", "typescript", "docker"]
        assert "ServerTime" in summary["description"]

    def test_enterprise_lists_everything(self):
        assert "compliance" in tier_summary(Tier.ENTERPRISE)["features"]
