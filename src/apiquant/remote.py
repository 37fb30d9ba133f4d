from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

log = logging.getLogger(__name__)

# Options that skip known_hosts entirely. Only used when host key
# verification is explicitly turned off on the executor.
INSECURE_HOST_KEY_OPTS = ("-o", "UserKnownHostsFile=/dev/null", "-o", "StrictHostKeyChecking=no")


class RemoteCommandError(Exception):
    pass


@dataclass(frozen=True)
class CommandOutput:
    stdout: str
    stderr: str
    returncode: int
    args: Sequence[str] = ()


class RemoteExecutor(Protocol):
    def run(self, user: str, host: str, command: Sequence[str]) -> CommandOutput:
        ...


class SSHExecutor:
    """
    Runs a command on a remote host through the ssh binary.

    verify_host_keys=False disables host key checking. Cluster nodes created by
    the installer get fresh host keys on every install, so the default accepts
    whatever key the node presents. This is a trust relaxation; turn it on
    wherever known_hosts can be managed.
    """
    def __init__(self, ssh_path: str = "/usr/bin/ssh", *, verify_host_keys: bool = False,
                 timeout: Optional[float] = None):
        self.ssh_path = ssh_path
        self.verify_host_keys = verify_host_keys
        self.timeout = timeout
        if not verify_host_keys:
            log.warning("ssh host key verification is disabled")

    def build_args(self, user: str, host: str, command: Sequence[str]) -> List[str]:
        args = [self.ssh_path]
        if not self.verify_host_keys:
            args.extend(INSECURE_HOST_KEY_OPTS)
        args.append(f"{user}@{host}")
        args.extend(command)
        return args

    def run(self, user: str, host: str, command: Sequence[str]) -> CommandOutput:
        args = self.build_args(user, host, command)
        try:
            proc = subprocess.run(args, capture_output=True, text=True, timeout=self.timeout)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise RemoteCommandError(str(e)) from e
        return CommandOutput(stdout=proc.stdout or "", stderr=proc.stderr or "",
                             returncode=proc.returncode, args=tuple(args))
