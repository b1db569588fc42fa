"""
UI Capability Disabler

Turns off UI capabilities the caller cannot exercise. The input map is never
modified; a new map with the same shape is returned.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from ..core.actions import Actions
from ..core.checker import CheckPrivileges
from ..core.mode import AuthorizationMode

logger = logging.getLogger(__name__)

UICapabilityMap = Mapping[str, Mapping[str, bool]]


class UICapabilitiesDisabler:
    def __init__(self, actions: Actions, check_privileges: Optional[CheckPrivileges] = None):
        self.actions = actions
        self.check_privileges = check_privileges

    def all(self, ui_capabilities: UICapabilityMap) -> Dict[str, Dict[str, bool]]:
        """Disable every capability (anonymous routes)"""
        return {
            feature_id: {capability_id: False for capability_id in capabilities}
            for feature_id, capabilities in ui_capabilities.items()
        }

    async def using_privileges(self, ui_capabilities: UICapabilityMap) -> Dict[str, Dict[str, bool]]:
        """
        Keep a capability only if the caller holds its ``ui:`` action.

        One batched check covers the whole map. A capability that is already
        disabled stays disabled.
        """
        if self.check_privileges is None:
            return self.all(ui_capabilities)

        ui_actions = {
            (feature_id, capability_id): self.actions.ui.get(feature_id, capability_id)
            for feature_id, capabilities in ui_capabilities.items()
            for capability_id in capabilities
        }
        result = await self.check_privileges(list(ui_actions.values()))

        return {
            feature_id: {
                capability_id: bool(enabled) and ui_actions[(feature_id, capability_id)] not in result.missing
                for capability_id, enabled in capabilities.items()
            }
            for feature_id, capabilities in ui_capabilities.items()
        }


async def replace_injected_vars(
    injected_vars: Mapping[str, Any],
    mode: AuthorizationMode,
    disabler: UICapabilitiesDisabler,
    anonymous_route: bool,
) -> Dict[str, Any]:
    """
    Apply the disabler to the ``ui_capabilities`` entry of injected UI vars.

    Legacy mode leaves the vars untouched.
    """
    if not mode.use_rbac():
        return dict(injected_vars)

    ui_capabilities = injected_vars.get("ui_capabilities", {})
    if anonymous_route:
        return {**injected_vars, "ui_capabilities": disabler.all(ui_capabilities)}

    return {**injected_vars, "ui_capabilities": await disabler.using_privileges(ui_capabilities)}
