"""Unit tests for the feature catalog (healthgen.tiers).

Tests cover:
- Tier ordering, parsing and descriptions
- features_for_tier for every tier, including case/whitespace handling
- Monotonicity of feature sets across tier upgrades
- FeatureSet mapping behaviour and immutability
"""

from __future__ import annotations

import pytest

from healthgen.errors import InvalidTierError
from healthgen.tiers import (
    FEATURE_CATALOG,
    FeatureSet,
    Tier,
    feature_names,
    features_for_tier,
    introduced_at,
    tiers,
)

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Tier
# ---------------------------------------------------------------------------


class TestTier:
    def test_order(self):
        assert tiers() == (Tier.BASIC, Tier.INTERMEDIATE, Tier.ADVANCED, Tier.ENTERPRISE)
        assert Tier.BASIC < Tier.INTERMEDIATE < Tier.ADVANCED < Tier.ENTERPRISE

    def test_ordering_is_by_rank_not_alphabetical(self):
        # alphabetically "advanced" < "basic"
        assert Tier.ADVANCED > Tier.BASIC
        assert Tier.ENTERPRISE >= Tier.ADVANCED
        assert not Tier.BASIC > Tier.BASIC

    def test_rank(self):
        assert [t.rank for t in tiers()] == [0, 1, 2, 3]

    @pytest.mark.parametrize("raw", ["advanced", "ADVANCED", "  Advanced  ", Tier.ADVANCED])
    def test_parse_accepts_variants(self, raw):
        assert Tier.parse(raw) is Tier.ADVANCED

    @pytest.mark.parametrize("raw", ["", "premium", "basic-plus", None, 3])
    def test_parse_rejects_unknown(self, raw):
        with pytest.raises(InvalidTierError) as excinfo:
            Tier.parse(raw)
        assert excinfo.value.value == raw
        assert "basic" in excinfo.value.valid

    def test_descriptions(self):
        assert "ServerTime" in Tier.BASIC.description
        assert "OpenTelemetry" in Tier.ADVANCED.description
        for tier in tiers():
            assert tier.description

    def test_str_is_value(self):
        assert str(Tier.ENTERPRISE) == "enterprise"


# ---------------------------------------------------------------------------
# features_for_tier
# ---------------------------------------------------------------------------


class TestFeaturesForTier:
    def test_basic(self):
        fs = features_for_tier("basic")
        assert fs.enabled == ("kubernetes", "typescript", "docker")
        assert fs["dependencies"] is False
        assert fs.tier is Tier.BASIC

    def test_intermediate_adds_dependencies(self):
        fs = features_for_tier("intermediate")
        assert fs["dependencies"] is True
        assert fs["server_timing"] is True
        assert fs["opentelemetry"] is False

    def test_advanced(self):
        fs = features_for_tier(Tier.ADVANCED)
        assert fs.is_enabled("opentelemetry")
        assert fs.is_enabled("cloudevents")
        assert not fs.is_enabled("mtls")

    def test_enterprise_enables_everything(self):
        fs = features_for_tier("enterprise")
        assert set(fs.enabled) == set(FEATURE_CATALOG)

    def test_every_tier_has_every_key(self):
        for tier in tiers():
            assert list(features_for_tier(tier)) == feature_names()

    def test_case_and_whitespace_insensitive(self):
        assert features_for_tier(" Enterprise ") == features_for_tier("enterprise")

    def test_invalid_tier(self):
        with pytest.raises(InvalidTierError):
            features_for_tier("platinum")

    def test_deterministic(self):
        assert features_for_tier("advanced") == features_for_tier("advanced")
        assert hash(features_for_tier("advanced")) == hash(features_for_tier("advanced"))

    def test_monotonic_across_upgrades(self):
        ordered = tiers()
        for i, lower in enumerate(ordered):
            for higher in ordered[i + 1:]:
                low_fs = features_for_tier(lower)
                high_fs = features_for_tier(higher)
                for name in low_fs.enabled:
                    assert high_fs[name], f"{name} lost going {lower} -> {higher}"

    def test_introduced_at(self):
        assert introduced_at("kubernetes") is Tier.BASIC
        assert introduced_at("dependencies") is Tier.INTERMEDIATE
        assert introduced_at("compliance") is Tier.ENTERPRISE
        with pytest.raises(KeyError):
            introduced_at("nope")


# ---------------------------------------------------------------------------
# FeatureSet
# ---------------------------------------------------------------------------


class TestFeatureSet:
    def test_is_immutable(self):
        fs = features_for_tier("basic")
        with pytest.raises(TypeError):
            fs.flags["dependencies"] = True  # type: ignore[index]

    def test_as_dict_is_a_copy(self):
        fs = features_for_tier("basic")
        d = fs.as_dict()
        d["dependencies"] = True
        assert fs["dependencies"] is False

    def test_unknown_feature_is_disabled(self):
        assert features_for_tier("enterprise").is_enabled("quantum") is False

    def test_mapping_protocol(self):
        fs = FeatureSet(tier=Tier.BASIC, flags={"a": True, "b": False})
        assert len(fs) == 2
        assert dict(fs) == {"a": True, "b": False}
        assert "a" in fs
