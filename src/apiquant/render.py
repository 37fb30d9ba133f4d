from __future__ import annotations

from typing import Iterator, List, Optional

from apiquant.quantify import AggregatedClient
from apiquant.uptime import SideFetch, UptimeResult

UPTIME_TITLE = "INFO(not metrics): Master node uptime"
UPTIME_TIMEOUT_TEXT = "timed out fetching uptime information"


def _list(vals: List[str]) -> str:
    return "[" + " ".join(vals) + "]"


def uptime_header() -> str:
    return f'[ "{UPTIME_TITLE}" ]\n'


def render_uptime(result: Optional[UptimeResult]) -> str:
    if result is None:
        return f"  - {UPTIME_TIMEOUT_TEXT}\n"
    if not result.ok:
        return f"  - error fetching uptime info: {result.error}\n"
    return f"  - {result.output}\n"


def render_client(c: AggregatedClient) -> str:
    return (
        f"[ {c.client_name} ]\n"
        f"  - Total Requests: {c.total_request_count}\n"
        f"  - Resources: {_list(c.resources)}\n"
        f"  - Verbs: {_list(c.verbs)}\n"
        "\n"
    )


def stream_report(ranked: List[AggregatedClient], side_fetch: SideFetch, timeout: float) -> Iterator[str]:
    # uptime section goes out as its own chunks so slow readers see it early
    yield uptime_header()
    yield render_uptime(side_fetch.wait(timeout)) + "\n"
    for c in ranked:
        yield render_client(c)
