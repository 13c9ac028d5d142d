#!/usr/bin/env python3
"""Print a learner's comprehensive analytics report as JSON."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mastery_analytics.config import get_settings
from mastery_analytics.database import AsyncSessionLocal, close_db, init_db
from mastery_analytics.logging_config import configure_logging, get_logger
from mastery_analytics.services.analytics_engine import AnalyticsEngine
from mastery_analytics.services.sql_stores import SqlLearnerDirectory, SqlMasteryStore, SqlSessionStore
from mastery_analytics.utils.exceptions import MasteryAnalyticsException

configure_logging()
logger = get_logger(__name__)


async def run(learner_id: int, recommendations: bool) -> int:
    settings = get_settings()
    logger.info("Generating report", learner_id=learner_id, database=settings.database_url.split("://")[0])

    await init_db()
    try:
        async with AsyncSessionLocal() as db:
            engine = AnalyticsEngine(
                SqlSessionStore(db),
                SqlLearnerDirectory(db),
                mastery_store=SqlMasteryStore(db),
                settings=settings,
            )
            if recommendations:
                result = await engine.get_recommendations(learner_id)
            else:
                result = await engine.get_comprehensive_analytics(learner_id)
    except MasteryAnalyticsException as e:
        logger.error("Report failed", **e.to_dict())
        return 1
    finally:
        await close_db()

    print(json.dumps(result.model_dump(by_alias=True, mode="json"), indent=2))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("learner_id", type=int, help="Learner to report on")
    parser.add_argument(
        "--recommendations",
        action="store_true",
        help="Print practice recommendations instead of the full report",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(run(args.learner_id, args.recommendations)))


if __name__ == "__main__":
    main()
