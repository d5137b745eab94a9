"""
CLI entrypoint for a single scan run. Run from cron, e.g.:

  python -m firmwatch.scan

Or every 6 hours: 0 */6 * * * cd /path/to/firmwatch && .venv/bin/python -m firmwatch.scan
"""

import logging
import sys

from firmwatch.core.config import get_settings
from firmwatch.scheduler import build_orchestrator

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Run one scan; exit code 0 on success, 1 on failure."""
    orchestrator = build_orchestrator(get_settings())
    outcome = orchestrator.run(trigger="manual")
    if not outcome.success:
        logger.error("Scan failed: %s", outcome.error_message)
        return 1
    logger.info(
        "Scan completed: posts_scanned=%s new_posts=%s issues_found=%s duration_ms=%s",
        outcome.posts_scanned,
        outcome.new_posts,
        outcome.issues_found,
        outcome.duration_ms,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
