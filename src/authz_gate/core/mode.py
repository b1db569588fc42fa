"""
Authorization Mode

Process-wide switch between legacy enforcement (authentication alone) and
RBAC enforcement. The mode has one writer, the license subscription, and is
read once per decision by the interceptor and the storage wrapper.
"""

import logging
import threading
from enum import Enum
from typing import Optional

from .license import LicenseCheckResults, LicenseFeed

logger = logging.getLogger(__name__)


class Mode(str, Enum):
    """Enforcement mode"""
    LEGACY = "legacy"
    RBAC = "rbac"


class AuthorizationMode:
    """
    Single-writer, multi-reader mode flag.

    Reads are a single attribute load and never block. Writes happen only in
    response to license events and are serialized by a lock.
    """

    def __init__(self, initial: Mode = Mode.LEGACY):
        self._mode = initial
        self._write_lock = threading.Lock()
        self._unsubscribe = None

    @property
    def current(self) -> Mode:
        return self._mode

    def use_rbac(self) -> bool:
        """Whether requests are checked against privileges"""
        return self._mode is Mode.RBAC

    def on_license_change(self, results: LicenseCheckResults) -> None:
        """Recompute the mode from fresh license check results"""
        new_mode = Mode.RBAC if results.allow_rbac else Mode.LEGACY
        with self._write_lock:
            previous = self._mode
            self._mode = new_mode

        if previous is not new_mode:
            logger.info(f"Authorization mode changed: {previous.value} -> {new_mode.value}")

    def watch(self, feed: LicenseFeed) -> None:
        """Follow license changes published on the feed"""
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = feed.subscribe(self.on_license_change)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None


def create_authorization_mode(feed: Optional[LicenseFeed] = None) -> AuthorizationMode:
    """Create a mode resolver, subscribed to the feed when one is given"""
    mode = AuthorizationMode()
    if feed is not None:
        mode.watch(feed)
    return mode
