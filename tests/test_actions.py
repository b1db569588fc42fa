"""
Test Action Registry

Verifies canonical action names, segment validation, parsing, and pattern matching.
"""

import pickle

import pytest

from authz_gate.core.actions import (
    Action,
    ActionNamespace,
    Actions,
    parse_action,
    pattern_matches,
    to_action,
)
from authz_gate.core.errors import InvalidActionSegment


class TestActionBuilders:
    """Tests for the namespace builders"""

    def setup_method(self):
        self.actions = Actions()

    def test_app_action(self):
        """App actions are app:<appId>"""
        assert self.actions.app.get("discover") == "app:discover"

    def test_api_action(self):
        """API actions are api:<feature>/<operation>"""
        assert self.actions.api.get("foo", "read") == "api:foo/read"

    def test_saved_object_action(self):
        """Saved object actions are saved_object:<type>/<operation>"""
        assert self.actions.saved_object.get("dashboard", "bulk_get") == "saved_object:dashboard/bulk_get"

    def test_ui_action(self):
        """UI actions are ui:<featureId>/<capabilityId>"""
        assert self.actions.ui.get("discover", "save") == "ui:discover/save"

    def test_action_is_a_string(self):
        """Actions behave as plain strings"""
        action = self.actions.app.get("discover")
        assert isinstance(action, str)
        assert action in {"app:discover"}
        assert action.namespace is ActionNamespace.APP
        assert action.segments == ("discover",)

    def test_case_sensitive(self):
        """Identifiers keep their case"""
        assert self.actions.app.get("Discover") != self.actions.app.get("discover")

    def test_namespace_wildcards(self):
        """Each namespace offers a wildcard pattern"""
        assert self.actions.app.all == "app:*"
        assert self.actions.saved_object.all == "saved_object:*"
        assert self.actions.all_of(ActionNamespace.UI) == "ui:*"

    @pytest.mark.parametrize("segment", ["", "a:b", "a/b", "*"])
    def test_rejects_invalid_segments(self, segment):
        """Empty segments and delimiters are rejected"""
        with pytest.raises(InvalidActionSegment):
            self.actions.app.get(segment)

    def test_rejects_delimiter_in_second_segment(self):
        """Validation covers every segment"""
        with pytest.raises(InvalidActionSegment):
            self.actions.saved_object.get("dashboard", "get/all")

    def test_invalid_segment_is_value_error(self):
        """InvalidActionSegment is a ValueError for callers that expect one"""
        with pytest.raises(ValueError):
            self.actions.api.get("foo", "")

    def test_wrong_arity(self):
        """Actions need exactly the namespace's number of segments"""
        with pytest.raises(InvalidActionSegment):
            Action(ActionNamespace.API, "only-one")


class TestParseAction:
    """Tests for parsing canonical actions"""

    def test_round_trip(self):
        """Every built action parses back to its namespace and segments"""
        actions = Actions()
        built = [
            actions.app.get("kibana"),
            actions.api.get("console", "execute"),
            actions.saved_object.get("index-pattern", "find"),
            actions.ui.get("dev_tools", "show"),
        ]
        for action in built:
            namespace, segments = parse_action(str(action))
            assert namespace is action.namespace
            assert segments == action.segments
            assert Action(namespace, *segments) == action

    def test_parse_unknown_namespace(self):
        """Only the closed set of namespaces parses"""
        with pytest.raises(InvalidActionSegment):
            parse_action("space:manage")

    def test_parse_missing_delimiter(self):
        with pytest.raises(InvalidActionSegment):
            parse_action("discover")

    def test_parse_extra_segments(self):
        """A saved object action with three segments is malformed"""
        with pytest.raises(InvalidActionSegment):
            parse_action("saved_object:a/b/c")

    def test_to_action(self):
        action = to_action("api:foo/read")
        assert isinstance(action, Action)
        assert action.segments == ("foo", "read")

    def test_pickle(self):
        """Actions survive pickling with their metadata"""
        action = Actions().ui.get("discover", "show")
        restored = pickle.loads(pickle.dumps(action))
        assert restored == action
        assert restored.namespace is ActionNamespace.UI


class TestPatternMatching:
    """Tests for granted-pattern matching"""

    def test_exact(self):
        assert pattern_matches("app:discover", "app:discover")

    def test_namespace_wildcard(self):
        assert pattern_matches("app:*", "app:discover")
        assert not pattern_matches("app:*", "api:discover/read")

    def test_feature_wildcard(self):
        assert pattern_matches("api:foo/*", "api:foo/read")
        assert not pattern_matches("api:foo/*", "api:bar/read")

    def test_bare_wildcard_is_not_global(self):
        """A pattern without a namespace never matches everything"""
        assert not pattern_matches("*", "app:discover")

    def test_no_partial_match_without_wildcard(self):
        assert not pattern_matches("app:disc", "app:discover")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
