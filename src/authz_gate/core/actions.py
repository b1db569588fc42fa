"""
Action Registry

Canonical identifiers for protected operations:

    app:<appId>
    api:<feature>/<operation>
    saved_object:<type>/<operation>
    ui:<featureId>/<capabilityId>

Actions are built on demand and never persisted. Every value produced by the
builders below parses back to the same namespace and segments.
"""

from enum import Enum
from typing import Tuple

from .errors import InvalidActionSegment

NAMESPACE_DELIMITER = ":"
SEGMENT_DELIMITER = "/"
WILDCARD = "*"

_RESERVED = (NAMESPACE_DELIMITER, SEGMENT_DELIMITER, WILDCARD)


class ActionNamespace(str, Enum):
    """Closed set of action namespaces"""
    APP = "app"
    API = "api"
    SAVED_OBJECT = "saved_object"
    UI = "ui"

    @property
    def arity(self) -> int:
        """Number of segments an action in this namespace carries"""
        return 1 if self is ActionNamespace.APP else 2


class Action(str):
    """
    Immutable action identifier.

    Behaves as a plain string (hashable, comparable, JSON friendly) while
    remembering the namespace and segments it was built from.
    """

    namespace: ActionNamespace
    segments: Tuple[str, ...]

    def __new__(cls, namespace: ActionNamespace, *segments: str) -> "Action":
        namespace = ActionNamespace(namespace)
        if len(segments) != namespace.arity:
            raise InvalidActionSegment(
                namespace.value, segments,
                f"expected {namespace.arity} segment(s), got {len(segments)}"
            )
        for segment in segments:
            _validate_segment(namespace, segment)

        value = f"{namespace.value}{NAMESPACE_DELIMITER}{SEGMENT_DELIMITER.join(segments)}"
        action = super().__new__(cls, value)
        action.namespace = namespace
        action.segments = tuple(segments)
        return action

    def __repr__(self) -> str:
        return f"Action({str.__repr__(self)})"

    def __reduce__(self):
        return (Action, (self.namespace, *self.segments))


def _validate_segment(namespace: ActionNamespace, segment) -> None:
    if not isinstance(segment, str):
        raise InvalidActionSegment(namespace.value, segment, "segments must be strings")
    if not segment:
        raise InvalidActionSegment(namespace.value, segment, "segments must not be empty")
    for reserved in _RESERVED:
        if reserved in segment:
            raise InvalidActionSegment(
                namespace.value, segment, f"segments must not contain '{reserved}'"
            )


def parse_action(value: str) -> Tuple[ActionNamespace, Tuple[str, ...]]:
    """
    Split a canonical action into its namespace and segments.

    Raises:
        InvalidActionSegment: if the value is not a well-formed action
    """
    if isinstance(value, Action):
        return value.namespace, value.segments

    prefix, delimiter, rest = value.partition(NAMESPACE_DELIMITER)
    if not delimiter:
        raise InvalidActionSegment(prefix, value, "missing namespace delimiter")
    try:
        namespace = ActionNamespace(prefix)
    except ValueError:
        raise InvalidActionSegment(prefix, value, "unknown namespace") from None

    segments = tuple(rest.split(SEGMENT_DELIMITER))
    # Re-building validates arity and each segment
    action = Action(namespace, *segments)
    return action.namespace, action.segments


def to_action(value: str) -> Action:
    """Coerce a canonical string into an Action"""
    if isinstance(value, Action):
        return value
    namespace, segments = parse_action(value)
    return Action(namespace, *segments)


class _NamespaceActions:
    namespace: ActionNamespace

    @property
    def all(self) -> str:
        """Wildcard pattern granting every action in this namespace"""
        return f"{self.namespace.value}{NAMESPACE_DELIMITER}{WILDCARD}"


class AppActions(_NamespaceActions):
    namespace = ActionNamespace.APP

    def get(self, app_id: str) -> Action:
        return Action(self.namespace, app_id)


class ApiActions(_NamespaceActions):
    namespace = ActionNamespace.API

    def get(self, feature: str, operation: str) -> Action:
        return Action(self.namespace, feature, operation)


class SavedObjectActions(_NamespaceActions):
    namespace = ActionNamespace.SAVED_OBJECT

    def get(self, type: str, operation: str) -> Action:
        return Action(self.namespace, type, operation)


class UIActions(_NamespaceActions):
    namespace = ActionNamespace.UI

    def get(self, feature_id: str, capability_id: str) -> Action:
        return Action(self.namespace, feature_id, capability_id)


class Actions:
    """Entry point for building actions: ``actions.app.get("discover")``"""

    def __init__(self):
        self.app = AppActions()
        self.api = ApiActions()
        self.saved_object = SavedObjectActions()
        self.ui = UIActions()

    def all_of(self, namespace: ActionNamespace) -> str:
        """Wildcard pattern for a namespace, e.g. ``app:*``"""
        return f"{ActionNamespace(namespace).value}{NAMESPACE_DELIMITER}{WILDCARD}"


def pattern_matches(pattern: str, action: str) -> bool:
    """
    Check whether a granted pattern covers an action.

    Exact match, or a trailing ``*`` matching any suffix within the pattern's
    namespace. A pattern without a namespace never acts as a wildcard.
    """
    if pattern == action:
        return True
    if not pattern.endswith(WILDCARD):
        return False

    prefix = pattern[:-1]
    namespace, delimiter, _ = prefix.partition(NAMESPACE_DELIMITER)
    if not delimiter or not namespace:
        return False
    return action.startswith(prefix)
