from __future__ import annotations

from typing import List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError


class KubeconfigError(Exception):
    pass


# ----------------------------
# Schema (only the fields we read)
# ----------------------------
class ClusterInfo(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)
    server: str = ""


class NamedCluster(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)
    name: str = ""
    cluster: Optional[ClusterInfo] = None


class ContextInfo(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)
    cluster: str = ""


class NamedContext(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)
    name: str = ""
    context: Optional[ContextInfo] = None


class Kubeconfig(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    current_context: Optional[str] = Field(default=None, alias="current-context")
    contexts: Optional[List[NamedContext]] = None
    clusters: Optional[List[NamedCluster]] = None

    def current_server(self) -> str:
        if not self.current_context:
            raise KubeconfigError("invalid kubeconfig: empty current-context field")
        if not self.contexts:
            raise KubeconfigError("invalid kubeconfig: no contexts found")
        if not self.clusters:
            raise KubeconfigError("invalid kubeconfig: no clusters found")

        ctx = next((c for c in self.contexts if c.name == self.current_context), None)
        if ctx is None:
            raise KubeconfigError(
                f"invalid kubeconfig: unable to find current context ({self.current_context}) "
                "in provided list of contexts"
            )

        cluster_name = ctx.context.cluster if ctx.context else ""
        for cl in self.clusters:
            if cl.name == cluster_name and cl.cluster and cl.cluster.server:
                return cl.cluster.server
        raise KubeconfigError(
            f"invalid kubeconfig: unable to find current cluster ({cluster_name}) "
            "in provided list of clusters"
        )


def load_kubeconfig(path: str) -> Kubeconfig:
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise KubeconfigError(f"unable to read KUBECONFIG {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise KubeconfigError(f"expected a mapping, got {type(data).__name__}")
        return Kubeconfig.model_validate(data)
    except (yaml.YAMLError, ValidationError, KubeconfigError) as e:
        raise KubeconfigError(f"error: unable to parse provided KUBECONFIG: {e}") from e


def server_hostname(server: str) -> str:
    """
    "https://api.example.com:6443" -> "api.example.com"
    """
    _, sep, rest = server.partition("://")
    host = rest.split("/", 1)[0].split(":", 1)[0] if sep else ""
    if not host:
        raise KubeconfigError(
            f"malformed cluster hostname: expecting http(s)://host.name:port format, but got {server}"
        )
    return host
