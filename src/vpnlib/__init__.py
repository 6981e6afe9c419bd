"""Core library for vpnctl.

Contains the location catalog, the navigation state machine and the wrapper
around the external VPN command-line tool, shared by the CLI and the TUI.
"""

__all__ = [
    "clients",
    "config",
    "dispatch",
    "errors",
    "keys",
    "locations",
    "navigation",
]
