"""Feature catalog: tiers and the features each one enables.

Tiers are totally ordered (basic < intermediate < advanced < enterprise).
Each feature is introduced at exactly one tier and stays enabled at every
higher tier, so ``features_for_tier`` can never drop a feature on upgrade.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from .errors import InvalidTierError


# ---------------------------------------------------------------------------
# Tier enumeration
# ---------------------------------------------------------------------------


class Tier(str, Enum):
    """Complexity tier of a generated project."""

    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    ENTERPRISE = "enterprise"

    @property
    def rank(self) -> int:
        """Position of the tier in the upgrade order (0-based)."""
        return _TIER_ORDER.index(self)

    @property
    def description(self) -> str:
        return _TIER_DESCRIPTIONS[self]

    @classmethod
    def parse(cls, value: "str | Tier") -> "Tier":
        """Coerce *value* to a ``Tier``.

        Raises:
            InvalidTierError: If *value* is not a known tier name.
        """
        if isinstance(value, Tier):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for tier in cls:
                if tier.value == normalized:
                    return tier
        raise InvalidTierError(value, [t.value for t in cls])

    # str already defines ordering, so every comparison is overridden to
    # compare by rank instead of alphabetically.
    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank >= other.rank

    def __str__(self) -> str:
        return self.value


_TIER_ORDER: tuple[Tier, ...] = (
    Tier.BASIC,
    Tier.INTERMEDIATE,
    Tier.ADVANCED,
    Tier.ENTERPRISE,
)

_TIER_DESCRIPTIONS: dict[Tier, str] = {
    Tier.BASIC: "Basic health endpoints with ServerTime API (~5 min deployment)",
    Tier.INTERMEDIATE: (
        "Production-ready with dependency checks and basic observability "
        "(~15 min deployment)"
    ),
    Tier.ADVANCED: (
        "Full observability with OpenTelemetry and CloudEvents (~30 min deployment)"
    ),
    Tier.ENTERPRISE: (
        "Enterprise-grade with compliance and advanced monitoring (~45 min deployment)"
    ),
}


# ---------------------------------------------------------------------------
# Feature catalog
# ---------------------------------------------------------------------------

# Feature name -> tier that introduces it.  Insertion order is the canonical
# feature order used in every FeatureSet.
FEATURE_CATALOG: dict[str, Tier] = {
    "kubernetes": Tier.BASIC,
    "typescript": Tier.BASIC,
    "docker": Tier.BASIC,
    "dependencies": Tier.INTERMEDIATE,
    "server_timing": Tier.INTERMEDIATE,
    "opentelemetry": Tier.ADVANCED,
    "cloudevents": Tier.ADVANCED,
    "mtls": Tier.ENTERPRISE,
    "rbac": Tier.ENTERPRISE,
    "audit": Tier.ENTERPRISE,
    "compliance": Tier.ENTERPRISE,
}


@dataclass(frozen=True)
class FeatureSet(Mapping[str, bool]):
    """Immutable feature name -> enabled mapping resolved for one tier."""

    tier: Tier
    flags: Mapping[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "flags", MappingProxyType(dict(self.flags)))

    def __getitem__(self, name: str) -> bool:
        return self.flags[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.flags)

    def __len__(self) -> int:
        return len(self.flags)

    def __hash__(self) -> int:
        return hash((self.tier, tuple(self.flags.items())))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FeatureSet):
            return self.tier == other.tier and dict(self.flags) == dict(other.flags)
        return NotImplemented

    def is_enabled(self, name: str) -> bool:
        """Return ``True`` if *name* is a known feature and is enabled."""
        return bool(self.flags.get(name, False))

    @property
    def enabled(self) -> tuple[str, ...]:
        """Enabled feature names in catalog order."""
        return tuple(name for name, on in self.flags.items() if on)

    def as_dict(self) -> dict[str, bool]:
        return dict(self.flags)


def tiers() -> tuple[Tier, ...]:
    """All tiers in upgrade order."""
    return _TIER_ORDER


def feature_names() -> list[str]:
    """All known feature names in catalog order."""
    return list(FEATURE_CATALOG)


def introduced_at(feature: str) -> Tier:
    """Return the tier that first enables *feature*.

    Raises:
        KeyError: If *feature* is not in the catalog.
    """
    return FEATURE_CATALOG[feature]


def features_for_tier(tier: "str | Tier") -> FeatureSet:
    """Resolve the feature set for *tier*.

    Raises:
        InvalidTierError: If *tier* is not a known tier.
    """
    resolved = Tier.parse(tier)
    return FeatureSet(
        tier=resolved,
        flags={name: resolved >= since for name, since in FEATURE_CATALOG.items()},
    )
