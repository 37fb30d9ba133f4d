from __future__ import annotations

import contextvars
import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from apiquant.kubeconfig import KubeconfigError, load_kubeconfig, server_hostname
from apiquant.remote import RemoteCommandError, RemoteExecutor

log = logging.getLogger(__name__)

UPTIME_COMMAND = ("uptime", "--pretty")


@dataclass(frozen=True)
class UptimeResult:
    output: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, output: str) -> "UptimeResult":
        return cls(output=output)

    @classmethod
    def failure(cls, error: str) -> "UptimeResult":
        return cls(error=error)


class SideFetch:
    """
    Runs `fn` once on a daemon thread and hands its result back through a
    single-slot queue. The worker never blocks on delivery, so a caller that
    stopped waiting simply leaves the thread to finish on its own.
    """
    IDLE = "idle"
    LAUNCHED = "launched"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"

    def __init__(self, fn: Callable[[], UptimeResult], *, name: str = "side-fetch"):
        self.fn = fn
        self.name = name
        self.state = self.IDLE
        self._q: "queue.Queue[UptimeResult]" = queue.Queue(maxsize=1)
        self._result: Optional[UptimeResult] = None

    def start(self) -> "SideFetch":
        if self.state != self.IDLE:
            raise RuntimeError(f"{self.name} already started")
        ctx = contextvars.copy_context()
        threading.Thread(target=ctx.run, args=(self._worker,), name=self.name, daemon=True).start()
        self.state = self.LAUNCHED
        return self

    def _worker(self):
        try:
            res = self.fn()
        except Exception as e:
            log.exception("%s failed", self.name)
            res = UptimeResult.failure(f"unexpected error: {e}")
        self._q.put_nowait(res)

    def wait(self, timeout: float) -> Optional[UptimeResult]:
        """Returns the result, or None if it did not arrive within `timeout` seconds."""
        if self.state == self.COMPLETED:
            return self._result
        if self.state != self.LAUNCHED:
            return None
        try:
            self._result = self._q.get(timeout=timeout)
        except queue.Empty:
            self.state = self.TIMED_OUT
            log.info("%s timed out after %.0fms; abandoning it", self.name, timeout * 1000.0)
            return None
        self.state = self.COMPLETED
        return self._result


def fetch_uptime(
    kubeconfig_path: str,
    executor: RemoteExecutor,
    *,
    user: str = "core",
    command: Sequence[str] = UPTIME_COMMAND,
) -> UptimeResult:
    """
    Resolves the master node from the kubeconfig and runs `uptime` on it over
    the executor. Every failure comes back as UptimeResult.failure().
    """
    try:
        server = load_kubeconfig(kubeconfig_path).current_server()
        host = server_hostname(server)
    except KubeconfigError as e:
        return UptimeResult.failure(str(e))

    try:
        out = executor.run(user, host, command)
    except RemoteCommandError as e:
        return UptimeResult.failure(f"ssh error: {e}")

    if out.returncode != 0:
        return UptimeResult.failure(f"ssh error: exit status {out.returncode}: {out.stderr.strip()}")
    if out.stdout.strip():
        return UptimeResult.success(out.stdout.strip())
    if out.stderr.strip():
        return UptimeResult.failure(f"error: stderr: {out.stderr.strip()}")
    return UptimeResult.failure(f"error: no output from command: {list(out.args or command)}")
