"""Error handling utilities for vpnctl."""

from __future__ import annotations

from typing import Any


def format_error_message(operation: str, error: Exception, context: dict[str, Any] | None = None) -> str:
    """Format a user-friendly error message based on the exception type and context."""
    error_str = str(error)
    lowered = error_str.lower()
    context = context or {}

    # Tool missing
    if "not found" in lowered and ("installed" in lowered or "no such file" in lowered):
        return (
            "The VPN command-line tool could not be found. "
            "Install it or set 'binary' in your vpnctl config. "
            f"Original error: {error_str}"
        )

    if "timed out" in lowered:
        return (
            f"Timed out while trying to {operation}. "
            "The VPN daemon may be busy or not running. "
            f"Original error: {error_str}"
        )

    # Daemon not reachable
    if any(word in lowered for word in ["daemon", "socket", "management interface", "connection refused"]):
        return (
            "Could not reach the VPN daemon. "
            "Please check that the VPN service is running. "
            f"Original error: {error_str}"
        )

    if any(word in lowered for word in ["account", "login", "expired", "unauthorized"]):
        return (
            "The VPN account is not logged in or has expired. "
            f"Original error: {error_str}"
        )

    # Unknown location
    if "location" in lowered and any(word in lowered for word in ["invalid", "unknown", "no matching"]):
        location = context.get("location", "location")
        return (
            f"Location '{location}' was rejected by the VPN tool. "
            f"Use 'vpnctl locations list' to see available locations. "
            f"Original error: {error_str}"
        )

    if "parse" in lowered or "utf-8" in lowered:
        return (
            "The VPN tool produced output that could not be understood. "
            f"Original error: {error_str}"
        )

    # Generic error with helpful context
    return f"Failed to {operation}: {error_str}"


def suggest_troubleshooting_steps(operation: str, error: Exception) -> list[str]:
    """Suggest troubleshooting steps based on the operation and error."""
    error_str = str(error).lower()
    suggestions = []

    if "not found" in error_str:
        suggestions.extend([
            "Check that the VPN CLI is on your PATH: which mullvad",
            "Set 'binary: /path/to/mullvad' in ~/.config/vpnctl/config.yaml",
        ])

    elif "timed out" in error_str or "daemon" in error_str:
        suggestions.extend([
            "Check the daemon is running: systemctl status mullvad-daemon",
            "Raise 'timeout' in your vpnctl config",
        ])

    elif "location" in error_str:
        suggestions.extend([
            "List available locations: vpnctl locations list",
            "Check the country and city codes spelling",
        ])

    elif "account" in error_str or "login" in error_str:
        suggestions.extend([
            "Check the account state: mullvad account get",
        ])

    if not suggestions:
        suggestions.extend([
            "Check the logs with -v/--verbose flag for more details",
            "Verify your configuration file is correct",
            f"Try running the tool directly to {operation}",
        ])

    return suggestions


def format_config_error(error: Exception) -> str:
    """Format configuration-related error messages."""
    error_str = str(error)

    if "vpnctl_config path not found" in error_str.lower():
        return (
            f"{error_str}\n"
            "Either point VPNCTL_CONFIG at an existing file or unset it to use "
            "~/.config/vpnctl/config.yaml (or built-in defaults)."
        )

    if "color" in error_str.lower():
        return (
            f"Color configuration error: {error_str}\n"
            "Colors accept names (red), hex values (#ff0000) or rgb(255,0,0)."
        )

    return f"Configuration error: {error_str}"
