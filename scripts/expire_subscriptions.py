"""
Deactivate subscriptions whose grace period has lapsed.
Schedule hourly (cron, systemd timer or the platform scheduler).
Run: python -m scripts.expire_subscriptions
"""
import logging

from app.core.config import LOG_LEVEL
from app.core.logging_config import setup_logging
from app.db.session import SessionLocal
from app.services.subscription_service import expire_lapsed_subscriptions

logger = logging.getLogger(__name__)


def main() -> int:
    db = SessionLocal()
    try:
        logger.info("Running subscription expiry check...")
        count = expire_lapsed_subscriptions(db)
        logger.info(f"Subscription expiry check complete: {count} deactivated")
        return count
    except Exception:
        db.rollback()
        logger.exception("Subscription expiry check failed")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging(LOG_LEVEL)
    main()
