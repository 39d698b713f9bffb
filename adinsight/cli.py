"""CLI entry point for Ad Insight.

Orchestrates the pipeline: config loading, data ingestion (file or mock
feed), filtering, and the dashboard views or the sync payload export.

Usage::

    # KPI summary of the last 30 days in the export
    python -m adinsight.cli summary --data data/export.csv

    # Top ROAS rows for one brand on Meta
    python -m adinsight.cli table --data data/export.csv \\
        --view top_roas --brand "LCW" --channel meta

    # Daily spend / revenue series for a fixed range
    python -m adinsight.cli timeseries --mock google \\
        --start 2024-01-01 --end 2024-01-31

    # Write the chat-bot sync payload
    python -m adinsight.cli export --data data/export.csv \\
        --report "Narrative text" -o output/payload.json

    # Dump the built-in column/channel configuration for editing
    python -m adinsight.cli config -o output/config.yaml
"""

import argparse
import sys
from pathlib import Path

from adinsight.processor.dataset import TABLE_VIEWS
from adinsight.processor.connectors import MOCK_SOURCES
from adinsight.processor.export import payload_to_json
from adinsight.processor.session import AnalysisSession
from adinsight.schema.columns import build_default_config
from adinsight.schema.design_system import (
    format_amount,
    format_currency,
    format_integer,
    format_percentage,
    format_ratio,
)
from adinsight.schema.loader import load_config, save_config


# ---------------------------------------------------------------------------
# Config and data loading
# ---------------------------------------------------------------------------

def _load_config(args):
    """Load an AnalysisConfig from --config, or the built-in one."""
    path = getattr(args, "config", None)
    if not path:
        return build_default_config()
    path = Path(path)
    if not path.exists():
        _error(f"Config file not found: {path}")
    try:
        return load_config(path)
    except ValueError as e:
        _error(str(e))


def _load_session(args) -> AnalysisSession:
    """Build a session from --data or --mock and apply the filter flags."""
    session = AnalysisSession(_load_config(args))

    if args.data:
        p = Path(args.data)
        if not p.exists():
            _error(f"Data file not found: {p}")
        _info(f"Ingesting {p}")
        try:
            result = session.load_file(p)
        except ValueError as e:  # includes NoDataError
            _error(str(e))
        _info(f"Parsed {len(result.records):,} row(s) "
              f"(delimiter {result.delimiter!r})")
        for w in result.warnings:
            _warn(w)
    else:
        _info(f"Generating mock {args.mock} feed")
        session.load_mock(args.mock, seed=args.seed)
        _info(f"Generated {len(session.store):,} row(s)")

    session.filters = _apply_filter_args(session.filters, args)
    return session


def _apply_filter_args(filters, args):
    """Override the data-derived defaults with any filter flags given."""
    changes = {}
    if args.start is not None:
        changes["start_date"] = args.start
    if args.end is not None:
        changes["end_date"] = args.end
    if args.brand is not None:
        changes["brand"] = args.brand
    if args.account is not None:
        changes["account"] = args.account
    if args.channel:
        changes["channels"] = tuple(args.channel)
    if args.device:
        changes["devices"] = tuple(args.device)
    return filters.replace(**changes) if changes else filters


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_summary(args):
    """Print KPIs, filter options and the channel-group comparison."""
    session = _load_session(args)
    views = session.views
    f = views.filters
    kpi = views.kpi

    print(f"Date range:  {f.start_date or '*'} .. {f.end_date or '*'}")
    print(f"Brand:       {f.brand}")
    print(f"Account:     {f.account}")
    print(f"Channels:    {', '.join(f.channels) or 'All'}")
    print(f"Devices:     {', '.join(f.devices) or 'All'}")
    print(f"Rows:        {len(views.filtered):,} of {len(session.store):,}")
    print()
    print(f"Spend:       {format_currency(kpi.total_spend)}")
    print(f"Revenue:     {format_currency(kpi.total_revenue)}")
    print(f"ROAS:        {format_ratio(kpi.roas)}")
    print(f"CPC:         {format_amount(kpi.cpc)}")
    print(f"CTR:         {format_percentage(kpi.ctr)}")
    print(f"Clicks:      {format_integer(kpi.total_clicks)}")
    print(f"Impressions: {format_integer(kpi.total_impressions)}")

    if views.channel_split:
        print()
        for bucket in views.channel_split:
            print(f"  {bucket.name:<8} {bucket.count:>6,} row(s)  "
                  f"spend {format_currency(bucket.kpi.total_spend)}  "
                  f"revenue {format_currency(bucket.kpi.total_revenue)}  "
                  f"ROAS {format_ratio(bucket.kpi.roas)}")

    if args.verbose:
        print()
        for key, values in views.options.items():
            print(f"  {key}: {', '.join(values) or '-'}")


def cmd_table(args):
    """Print one of the table views."""
    session = _load_session(args)
    rows = session.views.tables[args.view]
    _info(f"View {args.view}: {len(rows)} row(s)")

    print(f"{'date':<10}  {'channel':<12}  {'device':<8}  {'spend':>10}  "
          f"{'revenue':>10}  {'roas':>7}  {'clicks':>8}  {'impr.':>10}  campaign")
    for r in rows:
        print(f"{r.date:<10}  {r.channel[:12]:<12}  {r.device[:8]:<8}  "
              f"{r.spend:>10,.0f}  {r.revenue:>10,.0f}  {format_ratio(r.roas):>7}  "
              f"{r.clicks:>8,.0f}  {r.impressions:>10,.0f}  {r.campaign_name}")


def cmd_timeseries(args):
    """Print spend and revenue per date."""
    session = _load_session(args)
    for point in session.views.time_series:
        print(f"{point.date},{point.spend:.2f},{point.revenue:.2f}")


def cmd_export(args):
    """Write the chat-bot sync payload as JSON."""
    session = _load_session(args)
    if args.context:
        payload = session.analysis_context(args.report or "")
    else:
        payload = session.sync_payload(args.report or "")
    text = payload_to_json(payload)

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
        _info(f"Written: {output} ({len(text):,} chars)")
    else:
        print(text)


def cmd_config(args):
    """Write the built-in configuration as YAML."""
    output = Path(args.output)
    save_config(build_default_config(), output)
    _info(f"Written: {output}")


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------

def _info(msg):
    print(f"  {msg}", file=sys.stderr)


def _warn(msg):
    print(f"  WARNING: {msg}", file=sys.stderr)


def _error(msg):
    print(f"  ERROR: {msg}", file=sys.stderr)
    sys.exit(1)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="adinsight",
        description="Filter and summarize advertising campaign exports.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---- summary ----
    summ = subparsers.add_parser(
        "summary",
        help="Show KPI totals and the channel-group comparison.",
    )
    _add_source_args(summ)
    _add_filter_args(summ)
    summ.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Also list the available filter options.",
    )
    summ.set_defaults(func=cmd_summary)

    # ---- table ----
    tab = subparsers.add_parser(
        "table",
        help="Show a sorted table view of the filtered rows.",
    )
    _add_source_args(tab)
    _add_filter_args(tab)
    tab.add_argument(
        "--view",
        choices=TABLE_VIEWS,
        default="all",
        help="Table view (default: all).",
    )
    tab.set_defaults(func=cmd_table)

    # ---- timeseries ----
    ts = subparsers.add_parser(
        "timeseries",
        help="Print daily spend and revenue as CSV.",
    )
    _add_source_args(ts)
    _add_filter_args(ts)
    ts.set_defaults(func=cmd_timeseries)

    # ---- export ----
    exp = subparsers.add_parser(
        "export",
        help="Build the sync payload for the narrative service.",
    )
    _add_source_args(exp)
    _add_filter_args(exp)
    exp.add_argument(
        "--report",
        help="Narrative summary text (default: generated fallback report).",
    )
    exp.add_argument(
        "--context",
        action="store_true",
        default=False,
        help="Write the chat analysis context instead of the sync payload.",
    )
    exp.add_argument(
        "-o", "--output",
        help="Output JSON file path (default: stdout).",
    )
    exp.set_defaults(func=cmd_export)

    # ---- config ----
    cfg = subparsers.add_parser(
        "config",
        help="Write the built-in configuration as YAML.",
    )
    cfg.add_argument(
        "-o", "--output",
        required=True,
        help="Output YAML file path.",
    )
    cfg.set_defaults(func=cmd_config)

    return parser


def _add_source_args(parser):
    """Add --data / --mock / --config args to a subparser."""
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "--data",
        help="Campaign export (.csv, .txt, .xlsx, .xlsm).",
    )
    group.add_argument(
        "--mock",
        choices=sorted(MOCK_SOURCES),
        help="Use a generated mock feed instead of a file.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for --mock.",
    )
    parser.add_argument(
        "--config",
        help="Path to a YAML column/channel configuration.",
    )


def _add_filter_args(parser):
    """Add filter flags to a subparser."""
    filters = parser.add_argument_group("filters")
    filters.add_argument(
        "--start",
        help="First date, inclusive (default: 30 days before the last date).",
    )
    filters.add_argument(
        "--end",
        help="Last date, inclusive (default: last date in the data).",
    )
    filters.add_argument(
        "--brand",
        help="Brand name (default: All).",
    )
    filters.add_argument(
        "--account",
        help="Account name (default: All).",
    )
    filters.add_argument(
        "--channel",
        action="append",
        help="Channel to include; repeat for several (default: all).",
    )
    filters.add_argument(
        "--device",
        action="append",
        help="Device to include; repeat for several (default: all).",
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv=None):
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
