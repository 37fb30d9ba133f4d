from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List

log = logging.getLogger(__name__)

DEFAULT_FAMILY = "apiserver_request_count"

_COUNT_RE = re.compile(r"^[+-]?\d+$")


class MalformedLineError(ValueError):
    pass


# ----------------------------
# Records
# ----------------------------
@dataclass
class MetricRecord:
    client_name: str = ""
    request_count: int = 0
    resources: List[str] = field(default_factory=list)
    verbs: List[str] = field(default_factory=list)


@dataclass
class AggregatedClient:
    client_name: str
    total_request_count: int = 0
    resources: List[str] = field(default_factory=list)
    verbs: List[str] = field(default_factory=list)

    @classmethod
    def from_record(cls, rec: MetricRecord) -> "AggregatedClient":
        return cls(
            client_name=rec.client_name,
            total_request_count=rec.request_count,
            resources=list(rec.resources),
            verbs=list(rec.verbs),
        )

    def add(self, rec: MetricRecord) -> None:
        self.total_request_count += rec.request_count
        self.resources.extend(rec.resources)
        self.verbs.extend(rec.verbs)


# ----------------------------
# Line parser
# ----------------------------
def parse_line(line: str) -> MetricRecord:
    """
    Parses one sample line of the form
        name{client="x",resource="pods",verb="get"} 3
    Label values are kept verbatim (quotes included).
    """
    head, sep, tail = line.rpartition("}")
    if not sep:
        raise MalformedLineError("missing metrics object delimiter '}'")

    count = tail.strip()
    if not _COUNT_RE.match(count):
        raise MalformedLineError(f"invalid counter value {count!r}")

    if "{" not in head:
        raise MalformedLineError("missing metrics object delimiter '{'")
    body = head.split("{", 1)[1]

    rec = MetricRecord(request_count=int(count))
    for token in body.split(","):
        key, eq, val = token.partition("=")
        if not eq:
            continue
        if key == "client":
            rec.client_name = val
        elif key == "resource":
            rec.resources = [val]
        elif key == "verb":
            rec.verbs = [val]
    return rec


def _help_target(line: str) -> str:
    parts = line[len("# HELP"):].split(None, 1)
    return parts[0] if parts else ""


def iter_section(lines: Iterable[str], family: str = DEFAULT_FAMILY) -> Iterator[str]:
    """
    Yields the sample lines of the `family` section. Scanning stops for good at
    the first `# HELP` line that follows the start of the section.
    """
    recording = False
    for line in lines:
        if line.startswith("# TYPE"):
            continue
        if line.startswith("# HELP"):
            if recording:
                return
            recording = _help_target(line) == family
            continue
        if not recording or not line.strip():
            continue
        yield line


# ----------------------------
# Aggregation + ranking
# ----------------------------
def quantify(text: str, family: str = DEFAULT_FAMILY) -> Dict[str, AggregatedClient]:
    reqs: Dict[str, AggregatedClient] = {}
    for line in iter_section(text.split("\n"), family):
        try:
            rec = parse_line(line)
        except MalformedLineError as e:
            log.warning("malformed metrics line: %r: %s", line, e)
            continue
        if not rec.client_name:
            log.warning("malformed metrics line: %r: missing client label", line)
            continue

        seen = reqs.get(rec.client_name)
        if seen is None:
            reqs[rec.client_name] = AggregatedClient.from_record(rec)
        else:
            seen.add(rec)
    return reqs


def rank(clients: Dict[str, AggregatedClient]) -> List[AggregatedClient]:
    # sorted() is stable: equal totals keep first-appearance order
    return sorted(clients.values(), key=lambda c: c.total_request_count, reverse=True)
