"""
CLI entrypoint for the security log retention job. Run from cron, e.g.:

  python -m truckore.retention

Or nightly: 0 2 * * * cd /path/to/truckore && .venv/bin/python -m truckore.retention
"""

import asyncio
import logging
import sys

from truckore.container import Container, build_container
from truckore.core.config import get_settings
from truckore.services.retention import run_retention

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


async def _run(container: Container) -> int:
    await container.initialize()
    return await run_retention(container.audit_log, container.settings)


def main() -> int:
    """Run retention: delete security log entries older than SECURITY_LOG_RETENTION_DAYS."""
    container = build_container(get_settings())
    try:
        deleted = asyncio.run(_run(container))
        logger.info("Retention completed: security_logs_deleted=%s", deleted)
        return 0
    except Exception as e:
        logger.exception("Retention job failed: %s", e)
        return 1
    finally:
        container.close()


if __name__ == "__main__":
    sys.exit(main())
