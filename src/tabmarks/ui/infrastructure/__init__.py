"""
Infrastructure Layer - Adapters for external systems.

- Browser and clipboard access through Qt (QtBrowserAdapter)
"""

from __future__ import annotations

from tabmarks.ui.infrastructure.browser_adapter import QtBrowserAdapter

__all__: list[str] = ["QtBrowserAdapter"]
