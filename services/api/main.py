import logging
import os

import uvicorn

from textappend.config import load_config
from textappend.main import app
from textappend.monitoring.metrics import MetricsConfig, init_metrics
from textappend.monitoring.sentry_service import SentryConfig, init_sentry

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main(run_server: bool = True) -> int:
    """Run the API server or exit successfully for CLI usage."""
    if not run_server:
        return 0

    try:
        config = load_config()
    except Exception as e:  # pragma: no cover
        logger.error(f"Failed to load configuration: {e}")
        return 1

    if config.monitoring.sentry_dsn:  # pragma: no cover
        init_sentry(
            SentryConfig(
                dsn=config.monitoring.sentry_dsn,
                environment=config.monitoring.sentry_environment,
            )
        )
        logger.info(f"Sentry initialized (env={config.monitoring.sentry_environment})")

    if config.monitoring.metrics_enabled:  # pragma: no cover
        init_metrics(MetricsConfig(port=config.monitoring.metrics_port)).start_server()

    # One process only: the append concurrency bound lives in this process.
    host = os.environ.get("HOST", "127.0.0.1")
    port = int(os.environ.get("PORT", "8000"))
    uvicorn.run(app, host=host, port=port, workers=1)  # pragma: no cover

    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
