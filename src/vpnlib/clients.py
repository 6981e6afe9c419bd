from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple

from .config import Config
from .locations import Catalog, RelayListParseError, parse_relay_list

logger = logging.getLogger(__name__)


class CommandError(RuntimeError):
    """The VPN tool could not be run or exited with a failure."""

    def __init__(self, message: str, command: Sequence[str] = (), returncode: Optional[int] = None, output: str = ""):
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode
        self.output = output


class CatalogError(CommandError):
    """The location catalog could not be loaded."""


@dataclass
class Status:
    connected: bool
    text: str


class VpnClient(Protocol):
    """Capabilities the front-end needs from a VPN tool."""

    def list_locations(self) -> Catalog: ...

    def connect(self, location_id: Tuple[str, ...]) -> List[str]: ...

    def disconnect(self) -> List[str]: ...

    def status(self) -> Status: ...


class MullvadClient:
    """Drives the ``mullvad`` command-line tool."""

    def __init__(self, binary: str = "mullvad", timeout: float = 30.0):
        self.binary = binary
        self.timeout = timeout

    def _run(self, *args: str) -> str:
        cmd = [self.binary, *args]
        logger.info("Running %s", " ".join(cmd))
        try:
            proc = subprocess.run(cmd, capture_output=True, timeout=self.timeout, check=False)
        except FileNotFoundError as e:
            raise CommandError(f"{self.binary} not found; is the VPN CLI installed?", cmd) from e
        except subprocess.TimeoutExpired as e:
            raise CommandError(f"'{' '.join(cmd)}' timed out after {self.timeout:g}s", cmd) from e

        try:
            stdout = proc.stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CommandError(f"'{' '.join(cmd)}' produced output that is not UTF-8", cmd, proc.returncode) from e
        stderr = proc.stderr.decode("utf-8", errors="replace")

        if proc.returncode != 0:
            detail = (stderr or stdout).strip()
            raise CommandError(
                f"'{' '.join(cmd)}' exited with status {proc.returncode}" + (f": {detail}" if detail else ""),
                cmd,
                proc.returncode,
                stdout + stderr,
            )
        return stdout

    def list_locations(self) -> Catalog:
        try:
            output = self._run("relay", "list")
        except CommandError as e:
            raise CatalogError(str(e), e.command, e.returncode, e.output) from e
        try:
            catalog = parse_relay_list(output)
        except RelayListParseError as e:
            raise CatalogError(f"Cannot parse relay list: {e}", [self.binary, "relay", "list"]) from e
        logger.info("Loaded %d countries", len(catalog))
        return catalog

    def connect(self, location_id: Tuple[str, ...]) -> List[str]:
        # mullvad relay set location se got
        lines = self._run("relay", "set", "location", *location_id).splitlines()
        lines.extend(self._run("connect").splitlines())
        return [line for line in lines if line.strip()]

    def disconnect(self) -> List[str]:
        return [line for line in self._run("disconnect").splitlines() if line.strip()]

    def status(self) -> Status:
        text = self._run("status").strip()
        # "Disconnected" contains "connected", so compare the leading word
        first = text.split(None, 1)[0] if text else ""
        return Status(connected=first.lower().startswith("connected"), text=text)


def get_client(cfg: Config) -> VpnClient:
    return MullvadClient(binary=cfg.binary, timeout=cfg.timeout)
