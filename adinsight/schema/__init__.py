"""Schema package - typed models and configuration for the analysis core.

Provides the contract between ingestion, the dataset store and export:

- models.py: Core dataclasses (Record, FilterState, KpiSnapshot, etc.)
- columns.py: Column aliases, defaults, channel groups and view limits
- design_system.py: Value formatting functions (currency, ratio, percentage)
- loader.py: YAML serialization/deserialization of the configuration
"""

from .columns import (
    CANONICAL_FIELDS,
    AnalysisConfig,
    ChannelGroup,
    FieldSpec,
    MatchMode,
    build_default_config,
)
from .design_system import (
    format_amount,
    format_currency,
    format_integer,
    format_percentage,
    format_ratio,
)
from .loader import load_config, save_config
from .models import (
    ALL,
    ChannelBucket,
    DailyTotal,
    FilterState,
    KpiSnapshot,
    Record,
)

__all__ = [
    # Models
    "ALL",
    "ChannelBucket",
    "DailyTotal",
    "FilterState",
    "KpiSnapshot",
    "Record",
    # Config
    "CANONICAL_FIELDS",
    "AnalysisConfig",
    "ChannelGroup",
    "FieldSpec",
    "MatchMode",
    "build_default_config",
    # Loader
    "load_config",
    "save_config",
    # Formatting
    "format_amount",
    "format_currency",
    "format_integer",
    "format_percentage",
    "format_ratio",
]
