from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from ..config.loader import ConfigError, load_config
from ..db.postgres import PostgresRepository
from ..db.repository import InMemoryRepository
from ..errors import BulkImportError, ParseError
from ..excel.template import write_template
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.config_models import ImportConfig
from ..models.rows import ParsedSet
from ..schemas import ENTITY_NAMES, EntitySchema, get_schema
from ..services.batch import CancelToken
from ..services.resolver import ReferenceResolver, get_resolver
from ..services.session import ImportSession
from ..services.summary import render_failures, render_preview_line, render_summary_line

"""CLI entrypoint.

    python -m bulk_import.cli contract data/contracts.xlsx
    python -m bulk_import.cli partner --template out/

Flow: load config -> open the repository (PostgreSQL, or in-memory with
``DISABLE_DB_CONNECT=1``) -> parse and preview -> confirm -> import the
valid rows -> SUMMARY line.

Exit codes: 0 every row imported (or nothing to do), 2 invalid or failed
rows, 1 fatal (config, unreadable file, database connection).
"""

__all__ = [
    "main",
    "EXIT_SUCCESS_ALL",
    "EXIT_PARTIAL_FAILURE",
    "EXIT_FATAL",
]

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

DEFAULT_CONFIG = Path("config/import.yml")


@contextmanager
def _db_connection(cfg: ImportConfig) -> Iterator[Any]:
    """Provide a psycopg2 cursor inside one transaction.

    Connection settings, first match wins:
        1. DATABASE_URL / PGDSN (``.env`` is loaded into the environment first)
        2. ``database.dsn`` from the config file
        3. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE, falling back
           to the matching ``database`` fields

    Commits when the block finishes, rolls back when it raises.
    """
    import psycopg2

    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if not dsn:
        host = os.getenv("PGHOST", db_cfg.host or "localhost")
        port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
        user = os.getenv("PGUSER", db_cfg.user or "postgres")
        password = os.getenv("PGPASSWORD", db_cfg.password or "")
        database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
        dsn = f"host={host} port={port} user={user} dbname={database}"
        if password:
            dsn += f" password={password}"

    conn = psycopg2.connect(dsn)
    try:
        conn.autocommit = False
        with conn.cursor() as cur:
            yield cur
        conn.commit()
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def _repository(cfg: ImportConfig) -> Iterator[Any]:
    logger = logging.getLogger(__name__)
    if os.getenv("DISABLE_DB_CONNECT") == "1":
        logger.debug("DB connect disabled via DISABLE_DB_CONNECT=1 -> in-memory repository")
        yield InMemoryRepository.from_yaml(cfg.mock_data) if cfg.mock_data else InMemoryRepository()
        return
    with _db_connection(cfg) as cur:
        yield PostgresRepository(cur, cfg)


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env with python-dotenv; its values win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="bulk_import", description="Spreadsheet bulk importer")
    p.add_argument("entity", choices=ENTITY_NAMES, help="Entity to import")
    p.add_argument("file", nargs="?", type=Path, help="Spreadsheet to import (.xlsx)")
    p.add_argument("--template", type=Path, metavar="OUT", help="Write the import template to OUT and exit")
    p.add_argument("--dry-run", action="store_true", help="Parse and preview only, import nothing")
    p.add_argument("--yes", "-y", action="store_true", help="Import without asking for confirmation")
    p.add_argument("--config", type=Path, default=None, help=f"Config file (default: {DEFAULT_CONFIG})")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _load_config(path: Path | None) -> ImportConfig:
    if path is None:
        if not DEFAULT_CONFIG.exists():
            return ImportConfig()
        path = DEFAULT_CONFIG
    return load_config(path)


def _confirm(valid_rows: int) -> bool:
    try:
        answer = input(f"Import {valid_rows} valid rows? [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def _log_preview(parsed: ParsedSet, logger: logging.Logger) -> None:
    for row in parsed.invalid_rows:
        logger.warning(f"Row {row.row_index}: {'; '.join(row.errors)}")


def _emit_summary(line: str) -> None:
    # log_summary adds the SUMMARY label itself
    log_summary(line[len("SUMMARY "):])


def _run(
    args: argparse.Namespace,
    schema: EntitySchema,
    repository: Any,
    resolver: ReferenceResolver,
    error_log: ErrorLogBuffer,
) -> int:
    logger = logging.getLogger(__name__)
    with ImportSession(schema, repository, resolver=resolver, error_log=error_log) as session:
        try:
            parsed = session.load_file(args.file)
        except ParseError as e:
            logger.error(f"parse: {e}")
            return EXIT_FATAL

        _log_preview(parsed, logger)
        logger.info(render_preview_line(session.report()))

        if args.dry_run or parsed.valid_count == 0 or not (args.yes or _confirm(parsed.valid_count)):
            report = session.report()
            session.discard()
            logger.info("nothing imported")
            _emit_summary(render_summary_line(report))
            return EXIT_SUCCESS_ALL if report.invalid_rows == 0 else EXIT_PARTIAL_FAILURE

        token = CancelToken()
        previous = signal.signal(signal.SIGINT, lambda signum, frame: token.cancel())
        try:
            result = session.confirm(token)
        finally:
            signal.signal(signal.SIGINT, previous)

        for line in render_failures(result):
            logger.error(line)
        report = session.report()
        _emit_summary(render_summary_line(report))

    if report.invalid_rows or result.failed_count or result.skipped:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an empty list from tests must not pick up pytest's own argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = _load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    schema = get_schema(args.entity, cfg)

    if args.template is not None:
        path = write_template(schema, args.template)
        logger.info(f"template written: {path}")
        return EXIT_SUCCESS_ALL

    if args.file is None:
        logger.error("no input file given (use --template OUT to get one)")
        return EXIT_FATAL
    if not args.file.exists():
        logger.error(f"file not found: {args.file}")
        return EXIT_FATAL

    try:
        resolver = get_resolver(cfg.resolver)
    except ValueError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    error_log = ErrorLogBuffer(cfg.log_dir)
    try:
        with _repository(cfg) as repository:
            code = _run(args, schema, repository, resolver, error_log)
    except BulkImportError as e:
        logger.error(f"repository: {e}")
        code = EXIT_FATAL
    except Exception as e:
        logger.error(f"database: {e}")
        code = EXIT_FATAL
    finally:
        log_path = error_log.flush()
        if log_path is not None:
            logger.info(f"error log: {log_path}")
    return code
