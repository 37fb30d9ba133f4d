import logging

import uvicorn

from apiquant.app import create_app
from apiquant.config import load_config
from apiquant.request_context import configure_logging

log = logging.getLogger("apiquant")


def main(argv=None):
    config = load_config(argv)
    configure_logging(config.log_level)

    log.info("Listening at %s on port %d...", config.host, config.port)
    log.info("Scraping Prometheus metrics at %s...", config.metrics_url)
    log.info("Using KUBECONFIG file: %s", config.kubeconfig)

    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level,
    )
