"""Browser and clipboard adapter backed by Qt.

Implements the ``TabOpener`` and ``Clipboard`` ports. Qt hands URLs to the
desktop's default browser, which decides about windows itself, so every
open mode ends up as a plain ``openUrl`` call here.
"""

from __future__ import annotations

import logging

from PySide6.QtCore import QUrl
from PySide6.QtGui import QDesktopServices, QGuiApplication

_LOGGER = logging.getLogger(__name__)


class QtBrowserAdapter:
    """Opens URLs with :class:`QDesktopServices` and writes the Qt clipboard."""

    __slots__ = ("_opened",)

    def __init__(self) -> None:
        self._opened = 0

    @property
    def opened_count(self) -> int:
        return self._opened

    def open(self, url: str) -> bool:
        """Returns False when the URL is invalid or the desktop refused it."""
        qurl = QUrl(url.strip(), QUrl.ParsingMode.TolerantMode)
        if not qurl.isValid() or not qurl.scheme():
            _LOGGER.debug("QtBrowserAdapter: refusing invalid url %r", url)
            return False
        accepted = bool(QDesktopServices.openUrl(qurl))
        if accepted:
            self._opened += 1
        else:
            _LOGGER.debug("QtBrowserAdapter: desktop refused %s", qurl.toString())
        return accepted

    def copy_to_clipboard(self, text: str) -> bool:
        clipboard = QGuiApplication.clipboard()
        if clipboard is None:
            _LOGGER.warning("QtBrowserAdapter: no clipboard available")
            return False
        clipboard.setText(text)
        return True


__all__ = ["QtBrowserAdapter"]
