import logging
import time
from .config import config
from .scheduler import start_scheduler, stop_scheduler

logger = logging.getLogger(__name__)

def run_worker():
    """Run the reminder jobs until interrupted."""
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    logger.info(f"Reminder worker started. Task feed: {config.TASK_FEED_URL}")
    start_scheduler()
    try:
        while True:
            time.sleep(1)
    except (KeyboardInterrupt, SystemExit):
        stop_scheduler()


if __name__ == "__main__":
    run_worker()
