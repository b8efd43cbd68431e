"""
News alerts client.

Session handling, authorized access to the alerts REST API and a local,
server-confirmed view of the user's alert subscriptions.
"""

from .core.lifecycle import AlertsClientApp

__version__ = "1.0.0"

__all__ = ["AlertsClientApp", "__version__"]
