"""Execute navigation actions against a VPN client."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .clients import CommandError, VpnClient
from .errors import format_error_message
from .navigation import Action, ActionType

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    ok: bool
    message: str
    output: List[str] = field(default_factory=list)
    connected: Optional[bool] = None


class ActionDispatcher:
    """Runs Connect/Disconnect actions; failures are reported, never retried."""

    def __init__(self, client: VpnClient):
        self.client = client

    def dispatch(self, action: Action) -> DispatchResult:
        if action.type is ActionType.CONNECT:
            return self._connect(action)
        if action.type is ActionType.DISCONNECT:
            return self._disconnect()
        # Quit and no-ops are handled by the caller
        return DispatchResult(ok=True, message="")

    def _connect(self, action: Action) -> DispatchResult:
        name = action.location.name if action.location else "/".join(action.location_id)
        try:
            output = self.client.connect(action.location_id)
        except CommandError as e:
            logger.error("Connect to %s failed: %s", name, e)
            return DispatchResult(
                ok=False,
                message=format_error_message("connect", e, {"location": name}),
                output=e.output.splitlines(),
                connected=False,
            )
        logger.info("Connected to %s", name)
        return DispatchResult(ok=True, message=f"Connected to {name}", output=output, connected=True)

    def _disconnect(self) -> DispatchResult:
        try:
            output = self.client.disconnect()
        except CommandError as e:
            logger.error("Disconnect failed: %s", e)
            return DispatchResult(
                ok=False,
                message=format_error_message("disconnect", e),
                output=e.output.splitlines(),
            )
        logger.info("Disconnected")
        return DispatchResult(ok=True, message="Disconnected", output=output, connected=False)
