"""
Seed script for local/dev environments.
Run with:
    python -m scripts.seed

Environment variables:
    DATABASE_URL: Target database (required, same as the API)
    DEMO_USERNAME: Demo account username (default: demo)
    DEMO_PASSWORD: Demo account password (default: demo123)
    SEED_DEMO_USER: Set to 'false' to skip the demo account (default: 'true')
"""
import os

import structlog

from compass.db.seed import seed_demo_user, seed_outcome_rules
from compass.db.session import session_scope

logger = structlog.get_logger()


def main() -> None:
    with session_scope() as session:
        created = seed_outcome_rules(session)
        logger.info("outcome_rules_seeded", created=created)

        if os.getenv("SEED_DEMO_USER", "true").lower() == "true":
            username = os.getenv("DEMO_USERNAME", "demo")
            user, was_created = seed_demo_user(session, username, os.getenv("DEMO_PASSWORD", "demo123"))
            logger.info("demo_user_created" if was_created else "demo_user_exists", username=user.username)

    logger.info("seed_completed")


if __name__ == "__main__":
    main()
