from __future__ import annotations

import requests


class MetricsFetchError(Exception):
    pass


def fetch_metrics(url: str, timeout: float) -> str:
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise MetricsFetchError(str(e)) from e
    return resp.text
