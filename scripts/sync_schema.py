#!/usr/bin/env python
# ============================================================================
# SCHEMA SYNC SCRIPT
# ============================================================================
# PURPOSE: Synchronize PostgreSQL and Python table models
# USAGE:
#   python scripts/sync_schema.py --mode db --project shop --output ./shop
#   python scripts/sync_schema.py --mode code --project shop --module shop.models --dry-run
#   python scripts/sync_schema.py --mode code --project shop --module shop.models
# ============================================================================

import sys
import os
import argparse
from dataclasses import replace
from typing import List, Optional

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import psycopg

from __version__ import __version__, BUILD_DATE
from core.config import ProjectConfig
from core.contracts import SyncMode
from core.errors import SchemaSyncError
from core.logging import configure_logging
from infrastructure.schema_sync import SchemaSynchronizer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Synchronize PostgreSQL schemas and Python table models",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/sync_schema.py --mode db --project shop --output ./shop
  python scripts/sync_schema.py --mode code --project shop --module shop.models --dry-run
  python scripts/sync_schema.py --mode code --project shop --module shop.models

Environment Variables:
  DATABASE_URL                  Full PostgreSQL connection string
  POSTGRES_HOST                 Database host
  POSTGRES_DB                   Database name
  POSTGRES_USER                 Database user (default: postgres)
  POSTGRES_PASSWORD             Database password
  POSTGRES_PORT                 Database port (default: 5432)
  PGSTAGING_PROJECT             Project name
  PGSTAGING_MODE                db or code
  PGSTAGING_OUTPUT_DIR          Output directory (db mode)
  PGSTAGING_MODEL_MODULES       Model modules (code mode, comma separated)
  PGSTAGING_EXCLUDED_SCHEMAS    Extra schemas to skip (comma separated)
  PGSTAGING_DEFAULT_CHAR_LENGTH Width at which character columns omit "(n)"
  PGSTAGING_WITH_OIDS_CLAUSE    "false" to drop WITH (OIDS=FALSE)
  LOG_FORMAT                    "json" for structured log output
        """
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in SyncMode],
        help="db: write models from the database; code: alter the database from models "
             "(default: PGSTAGING_MODE, else code)"
    )
    parser.add_argument(
        "--project",
        type=str,
        help="Project name"
    )
    parser.add_argument(
        "--output",
        type=str,
        help="Output directory for generated models (db mode)"
    )
    parser.add_argument(
        "--module",
        action="append",
        default=[],
        help="Module holding table models (code mode, repeatable)"
    )
    parser.add_argument(
        "--connection",
        type=str,
        help="PostgreSQL connection string (overrides environment)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print DDL without executing (code mode)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"pgstaging {__version__} ({BUILD_DATE})"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> ProjectConfig:
    """Build a validated ProjectConfig; arguments override the environment."""
    config = ProjectConfig.from_env()
    return replace(
        config,
        project_name=args.project or config.project_name,
        connection_string=args.connection or config.connection_string,
        mode=SyncMode(args.mode) if args.mode else config.mode,
        output_dir=args.output or config.output_dir,
        model_modules=tuple(args.module) or config.model_modules,
    ).validate()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(level="DEBUG" if args.verbose else "INFO")

    try:
        config = config_from_args(args)
    except SchemaSyncError as e:
        print(f"❌ Configuration error: {e}")
        return 2

    print("=" * 70)
    print(f"PGSTAGING - {config.project_name}")
    print(f"Mode: {config.mode.value}{' (DRY RUN)' if args.dry_run else ''}")
    print("=" * 70)

    synchronizer = SchemaSynchronizer(config)

    try:
        if config.mode is SyncMode.DB:
            paths = synchronizer.db_first()
            print(f"\n[MODELS] {len(paths)} file(s) written to {config.model_path}\n")
            for path in paths:
                print(f"  - {path}")
        else:
            result = synchronizer.code_first(dry_run=args.dry_run)
            print("\n[DDL]\n")
            print(result.sql or "-- schema is up to date")
            for view in result.skipped_views:
                print(f"⏭️  {view} is a view; skipped")
            if result.executed:
                print(f"\n✅ Executed {len(result.statements)} statement(s)")
            elif result.statements:
                print(f"\n[DRY RUN] {len(result.statements)} statement(s) not executed")

    except SchemaSyncError as e:
        print(f"\n❌ Sync failed: {e}")
        return 1
    except psycopg.Error as e:
        print(f"\n❌ Database error: {e}")
        return 1

    print("=" * 70)
    return 0


if __name__ == "__main__":
    sys.exit(main())
