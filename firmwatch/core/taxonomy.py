"""Keyword taxonomy used by the classifier.

All tables are read-only and ordered; equipment resolution depends on the
order of EQUIPMENT_KEYWORDS (first match wins), issue-type resolution reports
matches in ISSUE_TYPE_KEYWORDS order.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

FIRMWARE_KEYWORDS: tuple[str, ...] = (
    "firmware",
    "update",
    "upgrade",
    "version",
    "flash",
    "boot",
    "brick",
    "downgrade",
    "rollback",
    "beta",
    "stable",
    "release",
    "patch",
)

# "gateway" under router shadows "security gateway"; table order is significant.
EQUIPMENT_KEYWORDS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "router": ("udm", "dream machine", "udr", "gateway"),
        "switch": ("switch", "usw", "aggregation"),
        "access-point": ("access point", "ap", "wifi", "wireless", "u6", "u7"),
        "camera": ("camera", "protect", "nvr", "surveillance"),
        "security-gateway": ("usg", "security gateway"),
        "nvr": ("nvr", "network video recorder"),
    }
)

ISSUE_TYPE_KEYWORDS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "connectivity": ("disconnect", "offline", "connection", "network", "ping"),
        "performance": ("slow", "latency", "speed", "throughput", "lag"),
        "stability": ("crash", "reboot", "freeze", "hang", "unstable"),
        "security": ("vulnerability", "exploit", "security", "patch", "cve"),
        "configuration": ("config", "setting", "setup", "configure"),
        "hardware": ("hardware", "fan", "temperature", "power", "led"),
    }
)

HIGH_SEVERITY_KEYWORDS: tuple[str, ...] = (
    "brick",
    "crash",
    "dead",
    "broke",
    "unusable",
    "critical",
)

MEDIUM_SEVERITY_KEYWORDS: tuple[str, ...] = (
    "problem",
    "issue",
    "bug",
    "error",
    "fail",
)

# Tried in order; group 1 (when present) holds the version.
VERSION_PATTERNS: tuple[str, ...] = (
    r"(?:version|v|firmware)\s*(\d+\.\d+\.\d+)",
    r"\d+\.\d+\.\d+",
)

FALLBACK_ISSUE_TYPE = "other"


@dataclass(frozen=True)
class Taxonomy:
    """Immutable bundle of keyword tables; swap in a custom one to extend classification."""

    firmware_keywords: tuple[str, ...] = FIRMWARE_KEYWORDS
    equipment_keywords: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: EQUIPMENT_KEYWORDS
    )
    issue_type_keywords: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: ISSUE_TYPE_KEYWORDS
    )
    high_severity_keywords: tuple[str, ...] = HIGH_SEVERITY_KEYWORDS
    medium_severity_keywords: tuple[str, ...] = MEDIUM_SEVERITY_KEYWORDS
    version_patterns: tuple[str, ...] = VERSION_PATTERNS

    def __post_init__(self) -> None:
        # Freeze caller-supplied dicts so the tables stay read-only after construction.
        for name in ("equipment_keywords", "issue_type_keywords"):
            table = getattr(self, name)
            if not isinstance(table, MappingProxyType):
                frozen = MappingProxyType({k: tuple(v) for k, v in table.items()})
                object.__setattr__(self, name, frozen)


DEFAULT_TAXONOMY = Taxonomy()
