"""Unit tests for GeneratorConfig (healthgen.config).

Tests cover:
- Defaults and validation
- Derived output directory
- save/load round trip
- from_env and keyword overrides
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from healthgen.config import GeneratorConfig
from healthgen.errors import InvalidTierError
from healthgen.tiers import Tier


class TestGeneratorConfig:
    @pytest.mark.unit
    def test_defaults(self):
        cfg = GeneratorConfig()
        assert cfg.tier is Tier.BASIC
        assert cfg.version == "1.0.0"
        assert cfg.parallel is True
        assert cfg.max_workers == 4
        assert cfg.write_metadata is True
        assert cfg.verbose is False

    @pytest.mark.unit
    def test_tier_parsed(self):
        assert GeneratorConfig(tier=" Advanced ").tier is Tier.ADVANCED

    @pytest.mark.unit
    def test_invalid_tier(self):
        with pytest.raises(InvalidTierError):
            GeneratorConfig(tier="gold")

    @pytest.mark.unit
    def test_max_workers_min(self):
        with pytest.raises(ValidationError):
            GeneratorConfig(max_workers=0)

    @pytest.mark.unit
    def test_output_dir_defaults_to_project_name(self):
        cfg = GeneratorConfig(project_name="svc")
        assert cfg.resolved_output_dir == Path("svc")

    @pytest.mark.unit
    def test_output_dir_explicit(self, tmp_path):
        cfg = GeneratorConfig(project_name="svc", output_dir=tmp_path / "x")
        assert cfg.resolved_output_dir == tmp_path / "x"

    @pytest.mark.unit
    def test_to_project_spec(self):
        cfg = GeneratorConfig(project_name="svc", module_uri="m", tier="enterprise")
        spec = cfg.to_project_spec()
        assert spec.project_name == "svc"
        assert spec.tier == "enterprise"


class TestPersistence:
    @pytest.mark.unit
    def test_save_load(self, tmp_path):
        cfg = GeneratorConfig(project_name="svc", module_uri="m", tier="advanced", max_workers=2)
        path = cfg.save(tmp_path / "nested" / "config.json")
        assert path.is_file()
        loaded = GeneratorConfig.load(path)
        assert loaded == cfg


class TestFromEnv:
    @pytest.mark.unit
    def test_reads_environment(self):
        env = {
            "HEALTHGEN_PROJECT_NAME": "env-svc",
            "HEALTHGEN_MODULE": "example.com/env-svc",
            "HEALTHGEN_TIER": "intermediate",
            "HEALTHGEN_OUTPUT_DIR": "/tmp/env-svc",
            "HEALTHGEN_PARALLEL": "false",
            "HEALTHGEN_MAX_WORKERS": "2",
            "HEALTHGEN_VERBOSE": "yes",
        }
        with patch.dict(os.environ, env, clear=True):
            cfg = GeneratorConfig.from_env()
        assert cfg.project_name == "env-svc"
        assert cfg.module_uri == "example.com/env-svc"
        assert cfg.tier is Tier.INTERMEDIATE
        assert cfg.output_dir == Path("/tmp/env-svc")
        assert cfg.parallel is False
        assert cfg.max_workers == 2
        assert cfg.verbose is True
        assert cfg.write_metadata is True

    @pytest.mark.unit
    def test_overrides_win(self):
        with patch.dict(os.environ, {"HEALTHGEN_TIER": "advanced"}, clear=True):
            cfg = GeneratorConfig.from_env(tier="enterprise", description=None)
        assert cfg.tier is Tier.ENTERPRISE
        assert cfg.description is None

    @pytest.mark.unit
    def test_empty_environment(self):
        with patch.dict(os.environ, {}, clear=True):
            assert GeneratorConfig.from_env() == GeneratorConfig()
