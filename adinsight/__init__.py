"""Ad Insight - campaign export ingestion, filtering and KPI analysis."""

__version__ = "0.1.0"
