"""Operator CLI for inspecting, repairing and syncing snapshots.

Usage::

    python -m travelsync.cli.sync migrate selections.json -o upgraded.json
    python -m travelsync.cli.sync merge local.json remote.json
    python -m travelsync.cli.sync collect selections.json --retention-days 30
    python -m travelsync.cli.sync sync user-42
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from travelsync.adapters.remote.client import RemoteSnapshotClient
from travelsync.application.dto.sync_dto import SyncOutcome
from travelsync.application.use_cases.sync_selections import SyncSelectionsCommand
from travelsync.config import AppConfig, load_config
from travelsync.core.logging_utils import setup_json_logging
from travelsync.core.time_utils import DAY_MS
from travelsync.di.container import Container
from travelsync.domain.exceptions.domain_exceptions import ReferenceDataError
from travelsync.domain.models.selection import Snapshot
from travelsync.domain.services.engine import SelectionEngine
from travelsync.domain.services.reference import ReferenceData, load_reference_data

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Migrate, merge and clean travel selection snapshots",
        allow_abbrev=False,
    )
    parser.add_argument(
        "--reference",
        type=Path,
        help="Reference data JSON; defaults to REFERENCE_DATA_PATH.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level for this session.",
    )
    parser.add_argument(
        "--now",
        type=int,
        help="Clock override in epoch milliseconds.",
    )
    parser.add_argument(
        "--retention-days",
        type=int,
        help="Tombstone retention override in days.",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Write the resulting snapshot here instead of stdout.",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    migrate_cmd = commands.add_parser("migrate", help="Upgrade legacy categories.")
    migrate_cmd.add_argument("input", type=Path)

    merge_cmd = commands.add_parser("merge", help="Merge a local and a remote snapshot.")
    merge_cmd.add_argument("local", type=Path)
    merge_cmd.add_argument("remote", type=Path)

    collect_cmd = commands.add_parser("collect", help="Drop expired tombstones.")
    collect_cmd.add_argument("input", type=Path)

    sync_cmd = commands.add_parser(
        "sync", help="Merge the local store with the remote snapshot for a user."
    )
    sync_cmd.add_argument("user_id")

    return parser.parse_args(argv)


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        msg = f"Cannot read snapshot from {path}: {exc}"
        raise SystemExit(msg) from exc
    if not isinstance(data, dict):
        msg = f"Snapshot in {path} must be a JSON object"
        raise SystemExit(msg)
    return data


def _write_snapshot(snapshot: Snapshot, output: Path | None) -> None:
    text = json.dumps(snapshot.to_dict(), indent=2, sort_keys=True)
    if output is None:
        sys.stdout.write(text + "\n")
        return
    output.write_text(text + "\n", encoding="utf-8")


def _prepare_config(args: argparse.Namespace) -> AppConfig:
    """Load configuration, optionally applying CLI overrides."""
    try:
        cfg = load_config()
    except RuntimeError as exc:
        msg = f"Configuration error: {exc}"
        raise SystemExit(msg) from exc

    if args.log_level:
        cfg = replace(cfg, runtime=cfg.runtime.model_copy(update={"log_level": args.log_level}))
    return cfg


def _build_engine(args: argparse.Namespace, cfg: AppConfig) -> SelectionEngine:
    reference_path = args.reference or cfg.reference.data_path
    reference = ReferenceData.empty()
    if reference_path:
        try:
            reference = load_reference_data(reference_path)
        except ReferenceDataError as exc:
            raise SystemExit(exc.message) from exc

    retention_ms = cfg.sync.tombstone_retention_ms
    if args.retention_days is not None:
        if args.retention_days < 1:
            msg = "--retention-days must be at least 1"
            raise SystemExit(msg)
        retention_ms = args.retention_days * DAY_MS
    return SelectionEngine(reference, retention_ms=retention_ms)


async def _sync_cycle(
    container: Container, client: RemoteSnapshotClient, user_id: str
) -> SyncOutcome:
    local = await container.load_local_selections_use_case().execute()
    async with client as remote:
        use_case = container.sync_selections_use_case(remote)
        return await use_case.execute(SyncSelectionsCommand(user_id=user_id, local=local))


def _sync(args: argparse.Namespace, cfg: AppConfig, engine: SelectionEngine) -> Snapshot:
    container = Container(cfg, engine=engine)
    client = container.remote_client()
    if client is None:
        msg = "Remote sync is not configured; set SYNC_REMOTE_URL"
        raise SystemExit(msg)

    try:
        outcome = asyncio.run(_sync_cycle(container, client, args.user_id))
    finally:
        container.close()

    if not outcome.success:
        msg = f"Sync failed: {outcome.error}"
        raise SystemExit(msg)
    logger.info(
        "cli_sync_completed", extra={"user_id": args.user_id, "uploaded": outcome.uploaded}
    )
    return outcome.snapshot


def run(args: argparse.Namespace, cfg: AppConfig) -> Snapshot:
    """Execute the parsed command and write its result."""
    engine = _build_engine(args, cfg)

    if args.command == "migrate":
        result = engine.migrate(_read_json(args.input))
    elif args.command == "merge":
        local = engine.migrate(_read_json(args.local))
        remote = engine.migrate(_read_json(args.remote))
        result = engine.merge(local, remote, now=args.now)
    elif args.command == "collect":
        snapshot = engine.migrate(_read_json(args.input))
        result, removed = engine.prune_tombstones(snapshot, now=args.now)
        logger.info("cli_tombstones_collected", extra={"removed": removed})
    elif args.command == "sync":
        result = _sync(args, cfg, engine)
    else:
        msg = f"Unknown command: {args.command}"
        raise SystemExit(msg)

    _write_snapshot(result, args.output)
    logger.info("cli_command_completed", extra={"command": args.command, "count": result.count()})
    return result


def main(argv: list[str] | None = None) -> int:
    """Entry point for ``python -m travelsync.cli.sync``."""
    args = parse_args(argv)
    cfg = _prepare_config(args)
    setup_json_logging(
        cfg.runtime.log_level,
        use_loguru=cfg.runtime.use_loguru,
        log_file=cfg.runtime.log_file,
    )
    try:
        run(args, cfg)
    except Exception as exc:
        logger.exception("cli_sync_failed", exc_info=exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
