#!/usr/bin/env python3
"""Apply database migrations, reporting failures to Logfire."""

import argparse
import sys

import logfire
from alembic import command
from alembic.config import Config

from authhost.config import Settings
from authhost.util.observability import configure_logfire


def main() -> int:
    """Upgrade (or downgrade) the schema to the requested revision."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("revision", nargs="?", default="head")
    parser.add_argument(
        "--downgrade", action="store_true", help="Downgrade instead of upgrade"
    )
    args = parser.parse_args()

    settings = Settings()
    configure_logfire(settings)

    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)

    try:
        with logfire.span("migrations", revision=args.revision, downgrade=args.downgrade):
            if args.downgrade:
                command.downgrade(alembic_cfg, args.revision)
            else:
                command.upgrade(alembic_cfg, args.revision)
        logfire.info("Database migrations completed", revision=args.revision)
        return 0

    except Exception as e:
        logfire.error(
            "Database migration failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        # Re-raise so deployment stops before serving with a broken schema
        raise


if __name__ == "__main__":
    sys.exit(main())
