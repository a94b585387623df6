"""Time-driven booking and review housekeeping. Run daily from cron.

- completes confirmed bookings whose check-out date has passed
- reveals one-sided reviews once the reveal window has closed

Run from the backend directory:
    python -m scripts.run_maintenance
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from villamarket.config import settings
from villamarket.database import async_session_factory, engine
from villamarket.services.booking_service import complete_finished_bookings
from villamarket.services.review_service import reveal_expired_reviews

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("villamarket.maintenance")


async def run() -> None:
    async with async_session_factory() as session:
        try:
            completed = await complete_finished_bookings(session)
            revealed = await reveal_expired_reviews(session)
            await session.commit()
        except Exception:
            await session.rollback()
            logger.exception("Maintenance run failed; nothing was committed")
            raise
    await engine.dispose()
    logger.info("Maintenance done: %d bookings completed, %d reviews revealed", len(completed), revealed)


if __name__ == "__main__":
    asyncio.run(run())
