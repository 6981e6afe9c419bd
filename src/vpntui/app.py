"""Main TUI application."""

import logging
import os
import tempfile
from typing import Optional

from textual.app import App

from vpnlib.clients import VpnClient
from vpnlib.config import Config
from vpnlib.dispatch import ActionDispatcher
from vpnlib.locations import Catalog
from vpnlib.navigation import NavigationEngine

from .screens.location_screen import LocationScreen
from .theme import Theme


logger = logging.getLogger(__name__)


class VpnApp(App):
    """Main TUI application for browsing and connecting to VPN locations."""

    TITLE = "vpnctl"
    SUB_TITLE = "VPN Location Browser"

    CSS = """
    Screen {
        layout: vertical;
    }

    Header {
        dock: top;
    }

    #connection-status, #screen-title {
        height: 1;
    }

    #location-list {
        height: 1fr;
        border: thick $accent;
    }

    #connection-output {
        height: auto;
        max-height: 8;
    }

    #mode-line {
        dock: bottom;
        height: 1;
    }
    """

    def __init__(self, config: Config, client: VpnClient, catalog: Catalog, connected: bool = False):
        super().__init__()
        self.config = config
        self.vpn_theme = Theme(config.colors)
        self.engine = NavigationEngine(catalog)
        self.dispatcher = ActionDispatcher(client)
        self.nav_state = self.engine.initial_state(connected=connected)

    def on_mount(self) -> None:
        """Initialize the app on mount."""
        logger.info("TUI app initialized with %d countries", len(self.engine.catalog))
        self.push_screen(LocationScreen())


def run_tui(config: Config, client: VpnClient, catalog: Catalog, connected: bool = False, log_file: Optional[str] = None) -> None:
    """Entry point for running the TUI."""
    # The terminal belongs to Textual, so log to a file
    log_file = log_file or os.path.join(tempfile.gettempdir(), "vpntui_debug.log")
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[
            logging.FileHandler(log_file, mode='w')
        ],
        force=True,
    )

    logger.info(f"Starting TUI, debug log at: {log_file}")
    if not catalog:
        logger.warning("Location catalog is empty")

    app = VpnApp(config, client, catalog, connected=connected)
    app.run()
