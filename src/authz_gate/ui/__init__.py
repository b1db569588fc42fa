"""
UI

UI capability filtering.
"""

from .capabilities import UICapabilitiesDisabler, replace_injected_vars

__all__ = ["UICapabilitiesDisabler", "replace_injected_vars"]
