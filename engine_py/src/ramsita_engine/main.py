"""FastAPI main application for the Ramsita game backend"""

import logging
import os

from .advisory import HttpAdvisor, NullAdvisor
from .coordinator import GameCoordinator
from .rules import create_rules
from .ws.server import create_app

# Configure logging
logging.basicConfig(level=os.getenv("LOG_LEVEL", "info").upper())
logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


def build_coordinator() -> GameCoordinator:
    rules = create_rules(
        grace_period_seconds=_env_float("GRACE_PERIOD", 60.0),
        bot_move_delay=_env_float("BOT_MOVE_DELAY", 1.5),
        matchmaking_timeout=_env_float("MATCHMAKING_TIMEOUT", 10.0),
    )
    advisory_url = os.getenv("ADVISORY_URL")
    if advisory_url:
        logger.info(f"Using advisory service at {advisory_url}")
        advisor = HttpAdvisor(advisory_url, timeout=rules.advisory_timeout)
    else:
        advisor = NullAdvisor()
    return GameCoordinator(rules, advisor)


app = create_app(build_coordinator())

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
