from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from typing import Optional, Sequence

from apiquant.quantify import DEFAULT_FAMILY

# uvicorn log levels
LOG_LEVELS = ("critical", "error", "warning", "info", "debug", "trace")


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class QuantConfig:
    kubeconfig: str
    host: str = "0.0.0.0"
    port: int = 8000
    metrics_url: str = "http://localhost:8080/metrics"
    metrics_timeout: float = 10.0   # seconds
    uptime_timeout: float = 0.5     # seconds
    metric_family: str = DEFAULT_FAMILY
    ssh_user: str = "core"
    ssh_path: str = "/usr/bin/ssh"
    ssh_verify_host_keys: bool = False
    log_level: str = "info"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="apiquant",
        description="Rank API server clients by request count and report master node uptime.",
    )
    p.add_argument("--kubeconfig", default=os.getenv("KUBECONFIG", ""),
                   help="Absolute path to the kubeconfig generated by the OpenShift installer "
                        "(default: $KUBECONFIG)")
    p.add_argument("--host", default=os.getenv("QUANT_HOST", "0.0.0.0"))
    p.add_argument("--port", type=int, default=int(os.getenv("QUANT_PORT", "8000")))
    p.add_argument("--metrics-url", default=os.getenv("QUANT_METRICS_URL", "http://localhost:8080/metrics"))
    p.add_argument("--metrics-timeout", type=float, default=float(os.getenv("QUANT_METRICS_TIMEOUT_S", "10")),
                   help="seconds to wait for the metrics endpoint")
    p.add_argument("--uptime-timeout-ms", type=int, default=int(os.getenv("QUANT_UPTIME_TIMEOUT_MS", "500")),
                   help="milliseconds to wait for the uptime lookup before giving up on it")
    p.add_argument("--metric-family", default=os.getenv("QUANT_METRIC_FAMILY", DEFAULT_FAMILY))
    p.add_argument("--ssh-user", default=os.getenv("QUANT_SSH_USER", "core"))
    p.add_argument("--ssh-path", default=os.getenv("QUANT_SSH_PATH", "/usr/bin/ssh"))
    p.add_argument("--ssh-verify-host-keys", action="store_true",
                   default=_env_flag("QUANT_SSH_VERIFY_HOST_KEYS"))
    p.add_argument("--log-level", default=os.getenv("QUANT_LOG_LEVEL", "info").lower(), choices=LOG_LEVELS)
    return p


def load_config(argv: Optional[Sequence[str]] = None) -> QuantConfig:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.kubeconfig:
        parser.error("a --kubeconfig location must be specified (or set KUBECONFIG)")
    # argparse does not check env-derived defaults against choices
    if args.log_level not in LOG_LEVELS:
        parser.error(f"invalid log level {args.log_level!r} (choose from {', '.join(LOG_LEVELS)})")

    return QuantConfig(
        kubeconfig=args.kubeconfig,
        host=args.host,
        port=args.port,
        metrics_url=args.metrics_url,
        metrics_timeout=args.metrics_timeout,
        uptime_timeout=args.uptime_timeout_ms / 1000.0,
        metric_family=args.metric_family,
        ssh_user=args.ssh_user,
        ssh_path=args.ssh_path,
        ssh_verify_host_keys=args.ssh_verify_host_keys,
        log_level=args.log_level,
    )
