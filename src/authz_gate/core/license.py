"""
License Check

Turns license information into the flags the security layer acts on, and
distributes them to subscribers whenever the license changes.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class LoginLayout(str, Enum):
    """How the login screen should render"""
    FORM = "form"
    ERROR_ES_UNAVAILABLE = "error-es-unavailable"
    ERROR_XPACK_UNAVAILABLE = "error-xpack-unavailable"


@dataclass(frozen=True)
class LicenseInfo:
    """License state as reported by the cluster"""
    is_available: bool = True
    security_enabled: bool = True
    is_active: bool = True
    license_type: str = "basic"


@dataclass(frozen=True)
class LicenseCheckResults:
    """Flags derived from the license"""
    show_login: bool
    allow_login: bool
    allow_rbac: bool
    show_links: bool = False
    layout: LoginLayout = LoginLayout.FORM
    login_message: Optional[str] = None


def check_license(license_info: Optional[LicenseInfo]) -> LicenseCheckResults:
    """
    Compute the security license flags.

    - License info unavailable: login shown but not allowed, no RBAC
    - Security disabled in the cluster: no login, no RBAC
    - Otherwise: login and RBAC allowed
    """
    if license_info is None or not license_info.is_available:
        return LicenseCheckResults(
            show_login=True,
            allow_login=False,
            allow_rbac=False,
            layout=LoginLayout.ERROR_ES_UNAVAILABLE,
            login_message="Login is currently disabled. Administrators should consult the logs for more details.",
        )

    if not license_info.security_enabled:
        return LicenseCheckResults(
            show_login=False,
            allow_login=False,
            allow_rbac=False,
            layout=LoginLayout.ERROR_XPACK_UNAVAILABLE,
        )

    if not license_info.is_active:
        return LicenseCheckResults(
            show_login=True,
            allow_login=False,
            allow_rbac=False,
            login_message="Your license has expired. Contact your administrator.",
        )

    return LicenseCheckResults(
        show_login=True,
        allow_login=True,
        allow_rbac=True,
        show_links=license_info.license_type != "basic",
    )


LicenseListener = Callable[[LicenseCheckResults], None]


class LicenseFeed:
    """
    Publish/subscribe point for license changes.

    Subscribers run in registration order; one failing subscriber does not
    prevent the others from seeing the change.
    """

    def __init__(self):
        self._listeners: List[LicenseListener] = []
        self.current: Optional[LicenseCheckResults] = None

    def subscribe(self, listener: LicenseListener) -> Callable[[], None]:
        """Register a listener; replays the current state if there is one"""
        self._listeners.append(listener)
        if self.current is not None:
            self._notify(listener, self.current)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, results: LicenseCheckResults) -> None:
        self.current = results
        logger.info(f"License changed: allow_rbac={results.allow_rbac}")
        for listener in list(self._listeners):
            self._notify(listener, results)

    def publish_license(self, license_info: Optional[LicenseInfo]) -> LicenseCheckResults:
        """Run check_license and publish the outcome"""
        results = check_license(license_info)
        self.publish(results)
        return results

    @staticmethod
    def _notify(listener: LicenseListener, results: LicenseCheckResults) -> None:
        try:
            listener(results)
        except Exception as e:
            logger.error(f"License listener {listener!r} failed: {e}")
