from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import (
    ENV_SOURCE_PATH,
    ConfigError,
    DashboardConfig,
    load_config,
    resolve_config_path,
)
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.config_models import DashboardSettings
from ..models.error_record import ErrorRecord
from ..services.filtering import ProjectFilter
from ..services.refresh import AutoRefresher, DashboardState, RefreshError, refresh
from ..services.summary import render_report, render_summary_line
from ..sheet.reader import FileRowSource

"""CLI entrypoint.

Flow:
- Load .env (python-dotenv), then the YAML config
- Build the row source over the local sheet export
- Run one refresh (or an auto refresh loop with --watch)
- Print the report (text or --json) and a SUMMARY line

Exit codes: 0 success, 1 fatal (config error or failed refresh).
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv (values override the process environment)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="project-dashboard",
        description="Normalize the project sheet and print dashboard summaries",
    )
    p.add_argument("--config", type=Path, default=None, help="YAML config (default config/dashboard.yml)")
    p.add_argument("--source", default=None, help="Sheet export to read (overrides source_path)")
    p.add_argument("--sheet", default=None, help="Excel sheet name (overrides sheet_name)")
    p.add_argument("--person", default="", help="Filter: assigned person contains")
    p.add_argument("--client", default="", help="Filter: client contains")
    p.add_argument("--status", default="", help="Filter: canonical status equals")
    p.add_argument("--json", action="store_true", help="Print the full state as JSON")
    p.add_argument("--watch", action="store_true", help="Keep refreshing every refresh_interval_seconds")
    p.add_argument("--iterations", type=int, default=None, help="Stop --watch after N refreshes")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print sheet headers & first rows then exit")
    return p.parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> DashboardConfig:
    config_path = resolve_config_path(args.config)
    fallback_source = args.source or os.getenv(ENV_SOURCE_PATH)
    if not config_path.exists() and fallback_source:
        # --source (または DASHBOARD_SOURCE) だけで設定ファイル無しでも動かせる
        cfg = DashboardConfig(source_path=fallback_source, sheet_name=None, settings=DashboardSettings())
    else:
        cfg = load_config(config_path)
    if args.source or args.sheet:
        cfg = DashboardConfig(
            source_path=args.source or cfg.source_path,
            sheet_name=args.sheet or cfg.sheet_name,
            settings=cfg.settings,
        )
    return cfg


def _print_state(state: DashboardState, settings: DashboardSettings, as_json: bool) -> None:
    if as_json:
        print(json.dumps(state.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(render_report(state, settings))


def _inspect_data(source: FileRowSource, logger) -> int:
    try:
        grid = source.fetch()
    except Exception as e:
        logger.error(f"inspect: {e}")
        return EXIT_FATAL
    print(f"SOURCE: {source.describe()} rows={len(grid) - 1}")
    print(f"  headers={grid[0]}")
    for idx, row in enumerate(grid[1:4]):
        print(f"  row[{idx}]={row}")
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む (テストで [] を渡すため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    try:
        cfg = _resolve_config(args)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    source = FileRowSource(cfg.source_path, cfg.sheet_name)
    flt = ProjectFilter(person=args.person.strip(), client=args.client.strip(), status=args.status.strip())
    logger.info(f"Reading projects from: {source.describe()}")

    if args.inspect_data:
        return _inspect_data(source, logger)

    error_log = ErrorLogBuffer()

    if args.watch:
        def _on_refresh(state: DashboardState) -> None:
            _print_state(state, cfg.settings, args.json)
            log_summary(render_summary_line(state)[len("SUMMARY "):])

        refresher = AutoRefresher(
            source,
            settings=cfg.settings,
            flt=flt,
            error_log=error_log,
            on_refresh=_on_refresh,
        )
        refresher.run(iterations=args.iterations)
        return EXIT_SUCCESS if refresher.state.refreshed_at is not None else EXIT_FATAL

    try:
        state = refresh(source, settings=cfg.settings, flt=flt)
    except RefreshError as e:
        logger.error(f"refresh: {e}")
        error_log.append(ErrorRecord.create(source.describe(), e.stage, e.error_type, str(e)))
        log_path = error_log.flush()
        if log_path is not None:
            logger.info(f"error log: {log_path}")
        return EXIT_FATAL

    _print_state(state, cfg.settings, args.json)
    # log_summary が "SUMMARY " を付けるので除去
    log_summary(render_summary_line(state)[len("SUMMARY "):])
    return EXIT_SUCCESS
