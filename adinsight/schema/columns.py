"""Analysis configuration - column aliases, defaults and view constants.

Centralizes everything the ingestion and dataset layers treat as data
rather than code:

- which header spellings map to each canonical record field, and the
  default value a field takes when no header matches
- the channel groups used for the cross-channel comparison
- the ROAS noise threshold and the row limits of the table views and
  export slices

``build_default_config()`` returns the configuration for the platform's
native (Turkish) export headers plus generic English aliases.  Configs
round-trip through YAML via :mod:`adinsight.schema.loader`.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class MatchMode(Enum):
    """How a header cell is compared against an alias."""
    EXACT = "exact"          # lowercased header equals the alias
    CONTAINS = "contains"    # lowercased header contains the alias


# ---------------------------------------------------------------------------
# Canonical fields
# ---------------------------------------------------------------------------

TEXT_FIELDS = ["date", "brand", "account", "channel", "device", "campaign"]
NUMERIC_FIELDS = ["spend", "revenue", "clicks", "impressions"]
CANONICAL_FIELDS = TEXT_FIELDS + NUMERIC_FIELDS

# Canonical field -> Record attribute
RECORD_ATTRIBUTES = {
    "date": "date",
    "brand": "brand",
    "account": "account",
    "channel": "channel",
    "device": "device",
    "campaign": "campaign_name",
    "spend": "spend",
    "revenue": "revenue",
    "clicks": "clicks",
    "impressions": "impressions",
}


def _default_value(value) -> Any:
    # YAML `default: null` (or an omitted key) means an empty value.
    return "" if value is None else value


@dataclass
class FieldSpec:
    """Accepted header spellings and fallback value for one canonical field."""
    name: str
    aliases: list[str]
    default: Any = ""
    match: MatchMode = MatchMode.EXACT

    @property
    def is_numeric(self) -> bool:
        return self.name in NUMERIC_FIELDS

    def matches(self, header: str) -> bool:
        """True when the normalized *header* cell satisfies any alias."""
        if self.match == MatchMode.CONTAINS:
            return any(alias in header for alias in self.aliases)
        return header in self.aliases

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"name": self.name, "aliases": list(self.aliases),
                             "default": self.default}
        if self.match != MatchMode.EXACT:
            d["match"] = self.match.value
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "FieldSpec":
        return cls(
            name=d["name"],
            aliases=[str(a).lower() for a in d.get("aliases", [])],
            default=_default_value(d.get("default")),
            match=MatchMode(d.get("match", "exact")),
        )


@dataclass
class ChannelGroup:
    """A named channel bucket matched by case-insensitive substrings."""
    name: str
    patterns: list[str]

    def matches(self, channel: str) -> bool:
        lowered = channel.lower()
        return any(p in lowered for p in self.patterns)

    def to_dict(self) -> dict:
        return {"name": self.name, "patterns": list(self.patterns)}

    @classmethod
    def from_dict(cls, d: dict) -> "ChannelGroup":
        return cls(name=d["name"],
                   patterns=[str(p).lower() for p in d.get("patterns", [])])


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------

@dataclass
class AnalysisConfig:
    """Everything the ingestion, dataset and export layers read as constants."""
    fields: list[FieldSpec] = field(default_factory=list)
    channel_groups: list[ChannelGroup] = field(default_factory=list)
    roas_min_spend: float = 100.0
    table_limit: int = 20
    all_rows_limit: int = 50
    export_slice_limit: int = 50
    context_row_limit: int = 3000
    default_window_days: int = 30
    min_row_fields: int = 5

    def get_field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(f"No field spec for '{name}'")

    def default_for(self, name: str) -> Any:
        try:
            return self.get_field(name).default
        except KeyError:
            return 0.0 if name in NUMERIC_FIELDS else ""

    def to_dict(self) -> dict:
        return {
            "fields": [f.to_dict() for f in self.fields],
            "channel_groups": [g.to_dict() for g in self.channel_groups],
            "roas_min_spend": self.roas_min_spend,
            "table_limit": self.table_limit,
            "all_rows_limit": self.all_rows_limit,
            "export_slice_limit": self.export_slice_limit,
            "context_row_limit": self.context_row_limit,
            "default_window_days": self.default_window_days,
            "min_row_fields": self.min_row_fields,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "AnalysisConfig":
        defaults = build_default_config()
        fields = [FieldSpec.from_dict(f) for f in d.get("fields", [])]
        unknown = [f.name for f in fields if f.name not in CANONICAL_FIELDS]
        if unknown:
            raise ValueError(
                f"Unknown field(s) {', '.join(unknown)}. "
                f"Valid fields: {', '.join(CANONICAL_FIELDS)}"
            )
        # Fields omitted from the file keep their built-in aliases.
        given = {f.name for f in fields}
        fields += [f for f in defaults.fields if f.name not in given]
        fields.sort(key=lambda f: CANONICAL_FIELDS.index(f.name))

        groups = d.get("channel_groups")
        return cls(
            fields=fields,
            channel_groups=(
                [ChannelGroup.from_dict(g) for g in groups]
                if groups is not None else defaults.channel_groups
            ),
            roas_min_spend=float(d.get("roas_min_spend", defaults.roas_min_spend)),
            table_limit=int(d.get("table_limit", defaults.table_limit)),
            all_rows_limit=int(d.get("all_rows_limit", defaults.all_rows_limit)),
            export_slice_limit=int(d.get("export_slice_limit", defaults.export_slice_limit)),
            context_row_limit=int(d.get("context_row_limit", defaults.context_row_limit)),
            default_window_days=int(d.get("default_window_days", defaults.default_window_days)),
            min_row_fields=int(d.get("min_row_fields", defaults.min_row_fields)),
        )


def build_default_config() -> AnalysisConfig:
    """Return the built-in configuration."""
    return AnalysisConfig(
        fields=[
            FieldSpec("date", ["tarih", "date"], "", MatchMode.CONTAINS),
            FieldSpec("brand", ["co_marka", "brand", "marka"], "Unknown Brand"),
            FieldSpec("account", ["hesap_adi", "account"], "Unknown Account"),
            FieldSpec("channel", ["platform", "mecra"], "Other"),
            FieldSpec("device", ["cihaz_platformu", "cihaz", "device"], "Other"),
            FieldSpec("campaign", ["kampanya_adi", "campaign"], "Campaign"),
            FieldSpec("spend", ["harcama", "spend", "cost"], 0.0),
            FieldSpec("revenue", ["donusum", "gelir", "revenue"], 0.0),
            FieldSpec("clicks", ["tiklama", "clicks"], 0.0),
            FieldSpec("impressions", ["gosterim", "impressions"], 0.0),
        ],
        channel_groups=[
            ChannelGroup("meta", ["meta", "facebook", "instagram"]),
            ChannelGroup("google", ["google", "youtube"]),
        ],
    )
