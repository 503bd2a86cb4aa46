"""Refresh the population statistics materialized views.

The API only reads score_distribution, survey_stats, category_stats,
question_stats and stats_by_agency_size. This script rebuilds them from the
current non-test responses; schedule it (e.g. hourly, matching
STATS_STALE_HOURS) or run it by hand after seeding data.

Usage:
    python scripts/refresh_stats.py [--concurrently] [--dry-run] [--view NAME ...]
    python scripts/refresh_stats.py --create

Requirements:
    - DATABASE_URL environment variable must point at PostgreSQL
    - The connecting role must own the views (REFRESH requires ownership)

Notes:
    - --concurrently keeps the views readable during the refresh but needs a
      unique index on each view
    - Views are refreshed in one transaction: either all succeed or none do
"""

import argparse
import logging
import os
import sys
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import select, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

# Add parent directory to path to import app modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.models import AGGREGATE_VIEWS, Base, SurveyStats, engine  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

VIEWS_SQL_PATH = os.path.join(
    os.path.dirname(__file__), "..", "sql", "aggregate_views.sql"
)


def build_refresh_statements(
    views: Iterable[str], concurrently: bool = False
) -> List[str]:
    """
    Build one REFRESH statement per view.

    Args:
        views: View names; each must be one of AGGREGATE_VIEWS
        concurrently: Use REFRESH ... CONCURRENTLY

    Returns:
        SQL statements in the given order

    Raises:
        ValueError: If a name is not a known aggregate view
    """
    statements = []
    keyword = " CONCURRENTLY" if concurrently else ""
    for view in views:
        if view not in AGGREGATE_VIEWS:
            raise ValueError(f"Unknown aggregate view: {view}")
        statements.append(f"REFRESH MATERIALIZED VIEW{keyword} {view}")
    return statements


def refresh_views(conn: Connection, statements: Sequence[str]) -> None:
    """Execute refresh statements on an open connection."""
    for statement in statements:
        logger.info(statement)
        conn.execute(text(statement))


def split_sql_script(script: str) -> List[str]:
    """Split a SQL script into statements, dropping comment-only lines."""
    lines = [
        line for line in script.splitlines() if not line.strip().startswith("--")
    ]
    return [s.strip() for s in "\n".join(lines).split(";") if s.strip()]


def create_schema(conn: Connection) -> None:
    """Create the survey tables, then the aggregate views over them."""
    tables = [t for t in Base.metadata.sorted_tables if not t.info.get("is_view")]
    Base.metadata.create_all(conn, tables=tables)
    with open(VIEWS_SQL_PATH, encoding="utf-8") as f:
        for statement in split_sql_script(f.read()):
            conn.execute(text(statement))
    logger.info(f"Created {len(tables)} table(s) and the aggregate views")


def log_summary(conn: Connection) -> None:
    """Log the refreshed overall statistics per survey version."""
    rows = conn.execute(
        select(
            SurveyStats.survey_version,
            SurveyStats.total_responses,
            SurveyStats.avg_score,
            SurveyStats.last_updated,
        )
    ).all()
    if not rows:
        logger.info("survey_stats is empty (no completed non-test responses)")
        return
    for version, total, avg_score, last_updated in rows:
        logger.info(
            f"Version {version}: {total} responses, "
            f"average score {avg_score}, last updated {last_updated}"
        )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Refresh the population statistics materialized views"
    )
    parser.add_argument(
        "--view",
        action="append",
        dest="views",
        choices=AGGREGATE_VIEWS,
        help="Refresh only this view (repeatable; default: all)",
    )
    parser.add_argument(
        "--concurrently",
        action="store_true",
        help="Use REFRESH MATERIALIZED VIEW CONCURRENTLY",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the statements without executing them",
    )
    parser.add_argument(
        "--create",
        action="store_true",
        help="Create missing tables and views before refreshing",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    statements = build_refresh_statements(
        args.views or AGGREGATE_VIEWS, concurrently=args.concurrently
    )

    if args.dry_run:
        for statement in statements:
            print(f"{statement};")
        return 0

    try:
        with engine.begin() as conn:
            if args.create:
                create_schema(conn)
            refresh_views(conn, statements)
            log_summary(conn)
    except SQLAlchemyError as e:
        logger.error(f"Failed to refresh aggregate views: {e}")
        return 1

    logger.info(f"Refreshed {len(statements)} view(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
