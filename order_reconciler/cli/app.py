from __future__ import annotations

import argparse
import os
import sys
from dataclasses import asdict, replace
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..errors import ReconciliationError
from ..excel.codec import OpenpyxlCodec
from ..excel.reader import preview_frame, read_input_file, read_sheet
from ..logging.anomaly_log import AnomalyLogBuffer
from ..logging.init import log_summary, setup_logging
from ..models.config_models import ReconcileConfig
from ..models.records import Corrections
from ..services.header_locator import locate_headers
from ..services.report import (
    CorrectionsFileError,
    load_corrections,
    write_corrections_template,
    write_summary_json,
    write_untouched_csv,
)
from ..services.session import ReconciliationSession
from ..services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- load .env and the YAML config
- Phase 1: scan the order sheet; stop with a corrections template when rows
  need a code (unless --corrections or --skip-unresolved is given)
- Phase 2: reconcile, write the output workbook and reports, print SUMMARY
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_NOT_FOUND = 2
EXIT_AWAITING_CORRECTIONS = 3

CONFIG_ENV_VAR = "ORDER_RECONCILER_CONFIG"


def _load_env_file(path: Path, override: bool = False) -> None:
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="order-reconciler",
        description="Reconcile a supplier order sheet against the article catalog",
    )
    p.add_argument("order", type=Path, help="Order sheet workbook (.xlsx)")
    p.add_argument("catalog", type=Path, help="Article catalog workbook (.xlsx)")
    p.add_argument("--job-reference", default=None, help="Job reference written on every output row")
    p.add_argument("--corrections", type=Path, default=None, help="YAML file with code corrections")
    p.add_argument(
        "--skip-unresolved",
        action="store_true",
        help="Skip rows whose code cannot be built instead of stopping for corrections",
    )
    p.add_argument("--output", type=Path, default=None, help="Output workbook path")
    p.add_argument("--summary-json", type=Path, default=None, help="Write the summary report as JSON")
    p.add_argument("--config", type=Path, default=None, help="Config YAML (default config/reconcile.yml)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print header layout & first rows then exit")
    return p.parse_args(argv)


def _resolve_config(args: argparse.Namespace, logger) -> ReconcileConfig:
    explicit = args.config or (Path(os.environ[CONFIG_ENV_VAR]) if os.getenv(CONFIG_ENV_VAR) else None)
    if explicit is None and not DEFAULT_CONFIG_PATH.exists():
        logger.info("no config file at %s, using built-in defaults", DEFAULT_CONFIG_PATH)
        return ReconcileConfig()
    return load_config(explicit or DEFAULT_CONFIG_PATH)


def _inspect_data(order_data: bytes, catalog_data: bytes, cfg: ReconcileConfig) -> int:
    codec = OpenpyxlCodec()
    order_sheet = read_sheet(order_data, codec, "order sheet")
    columns = locate_headers(
        order_sheet, labels=cfg.order_headers, scan_rows=cfg.header_scan_rows, require_all=False
    )
    print(f"ORDER header_row={columns.header_row + 1} missing={columns.missing_fields()}")
    layout = {k: v for k, v in asdict(columns).items() if k != "header_row"}
    print(f"  columns={layout}")
    print(preview_frame(order_data, rows=max(columns.header_row + 4, 5)).to_string())
    print("CATALOG")
    print(preview_frame(catalog_data).to_string())
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        for h in logger.handlers:
            h.setLevel("DEBUG")
        logger.setLevel("DEBUG")
        logger.debug("debug mode enabled")

    try:
        cfg = _resolve_config(args, logger)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    output_path: Path = args.output or Path(cfg.output.file_name)
    cfg = replace(cfg, output=replace(cfg.output, file_name=output_path.name))

    try:
        order_data = read_input_file(args.order)
        catalog_data = read_input_file(args.catalog)
        if args.inspect_data:
            return _inspect_data(order_data, catalog_data, cfg)

        anomalies = AnomalyLogBuffer(Path(cfg.logs_directory))
        session = ReconciliationSession(
            order_data,
            catalog_data,
            config=cfg,
            job_reference=args.job_reference,
            anomalies=anomalies,
            order_file=args.order.name,
            catalog_file=args.catalog.name,
        )
        logger.info(f"Reconciling {args.order.name} against {args.catalog.name}")
        outcome = session.start()

        if outcome.awaiting_corrections:
            if args.corrections is not None:
                outcome = session.resume(load_corrections(args.corrections))
            elif args.skip_unresolved:
                outcome = session.resume(Corrections.empty())
            else:
                template = write_corrections_template(
                    output_path.with_name("corrections.yml"), outcome.unresolved_rows
                )
                logger.warning(
                    f"{len(outcome.unresolved_rows)} row(s) need a code; fill in {template} "
                    "and rerun with --corrections, or use --skip-unresolved"
                )
                return EXIT_AWAITING_CORRECTIONS
    except (ReconciliationError, CorrectionsFileError) as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    result = outcome.result
    assert result is not None
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(result.workbook)
    logger.info(f"output written: {output_path}")

    if args.summary_json is not None:
        write_summary_json(args.summary_json, result.summary)
        logger.info(f"summary written: {args.summary_json}")
    untouched = write_untouched_csv(output_path.with_name(f"{output_path.stem}_untouched.csv"), result.summary)
    if untouched is not None:
        logger.info(f"untouched catalog rows written: {untouched}")
    log_path = anomalies.flush()
    if log_path is not None:
        logger.info(f"anomaly log written: {log_path}")

    summary_line = render_summary_line(result.summary)
    # log_summary adds the "SUMMARY " prefix itself
    log_summary(summary_line[len("SUMMARY "):])

    if result.summary.not_found:
        return EXIT_NOT_FOUND
    return EXIT_SUCCESS
