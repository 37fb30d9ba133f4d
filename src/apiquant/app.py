from __future__ import annotations

import functools
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, StreamingResponse

from apiquant.access_log_middleware import AccessLogMiddleware
from apiquant.config import QuantConfig
from apiquant.quantify import quantify, rank
from apiquant.remote import RemoteExecutor, SSHExecutor
from apiquant.render import stream_report
from apiquant.scrape import MetricsFetchError, fetch_metrics
from apiquant.uptime import SideFetch, fetch_uptime

log = logging.getLogger(__name__)


def create_app(config: QuantConfig, executor: Optional[RemoteExecutor] = None) -> FastAPI:
    if executor is None:
        executor = SSHExecutor(config.ssh_path, verify_host_keys=config.ssh_verify_host_keys)

    app = FastAPI(title="apiquant", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.config = config
    app.state.executor = executor
    app.add_middleware(AccessLogMiddleware)

    # ----------------------------
    # Routes
    # ----------------------------
    # no routing: every path gets the same report
    @app.get("/{path:path}")
    def report(request: Request, path: str):
        cfg: QuantConfig = request.app.state.config
        uptime = SideFetch(
            functools.partial(fetch_uptime, cfg.kubeconfig, request.app.state.executor, user=cfg.ssh_user),
            name="uptime",
        ).start()

        try:
            text = fetch_metrics(cfg.metrics_url, timeout=cfg.metrics_timeout)
        except MetricsFetchError as e:
            log.error("metrics fetch from %s failed: %s", cfg.metrics_url, e)
            return PlainTextResponse(f"error: {e}\n", status_code=500)

        ranked = rank(quantify(text, cfg.metric_family))
        log.info("ranked %d clients", len(ranked))
        return StreamingResponse(
            stream_report(ranked, uptime, cfg.uptime_timeout),
            media_type="text/plain; charset=utf-8",
        )

    return app
