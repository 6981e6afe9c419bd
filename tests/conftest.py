from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

import pytest

from vpnlib.clients import CatalogError, CommandError, Status
from vpnlib.locations import Catalog
from vpnlib.navigation import NavigationEngine


class FakeClient:
    """In-memory stand-in for the VPN tool; never spawns a process."""

    def __init__(self, catalog: Catalog, connected: bool = False, fail: Optional[str] = None):
        self.catalog = catalog
        self.connected = connected
        self.fail = fail
        self.connects: List[Tuple[str, ...]] = []
        self.disconnects = 0

    def list_locations(self) -> Catalog:
        if self.fail == "list":
            raise CatalogError("mullvad not found; is the VPN CLI installed?", ["mullvad", "relay", "list"])
        return self.catalog

    def connect(self, location_id: Tuple[str, ...]) -> List[str]:
        if self.fail == "connect":
            raise CommandError(
                "'mullvad connect' exited with status 1: daemon is not running",
                ["mullvad", "connect"],
                1,
                "Error: daemon is not running\n",
            )
        self.connects.append(tuple(location_id))
        self.connected = True
        return [f"Relay constraints updated: {' '.join(location_id)}"]

    def disconnect(self) -> List[str]:
        if self.fail == "disconnect":
            raise CommandError("'mullvad disconnect' timed out after 30s", ["mullvad", "disconnect"])
        self.disconnects += 1
        self.connected = False
        return []

    def status(self) -> Status:
        if self.fail == "status":
            raise CommandError("'mullvad status' exited with status 1: oops", ["mullvad", "status"], 1)
        if self.connected:
            return Status(True, "Connected to se-got-wg-001 in Gothenburg, Sweden")
        return Status(False, "Disconnected")


@pytest.fixture
def catalog() -> Catalog:
    return Catalog.from_entries(
        [
            ("Sweden", "se", [("Stockholm", "sto"), ("Gothenburg", "got")]),
            ("Japan", "jp", []),
        ]
    )


@pytest.fixture
def engine(catalog: Catalog) -> NavigationEngine:
    return NavigationEngine(catalog)


@pytest.fixture
def make_client(catalog: Catalog):
    def _make(**kwargs) -> FakeClient:
        return FakeClient(kwargs.pop("catalog", catalog), **kwargs)

    return _make


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch) -> Path:
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        """
version: 1
binary: mullvad
timeout: 5
colors:
  connected: green
  items_selected: "#ff00ff"
        """.strip()
    )
    monkeypatch.setenv("VPNCTL_CONFIG", str(cfg))
    return cfg
