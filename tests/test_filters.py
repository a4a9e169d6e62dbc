"""Tests for filter cleaning and query-string building."""

from mcp_datacloud.filters import build_query_params, clean_filters


class TestCleanFilters:
    """Removal of absent filter values."""

    def test_mixed_values(self):
        """Test only None and empty strings are removed."""
        filters = {
            "a": "x",
            "b": "",
            "c": None,
            "e": 0,
            "f": False,
            "g": [],
            "h": ["y"],
        }
        assert clean_filters(filters) == {
            "a": "x",
            "e": 0,
            "f": False,
            "g": [],
            "h": ["y"],
        }

    def test_empty_input(self):
        """Test empty and None inputs give an empty dict."""
        assert clean_filters({}) == {}
        assert clean_filters(None) == {}

    def test_all_absent(self):
        """Test a mapping of only absent values cleans to nothing."""
        assert clean_filters({"a": "", "b": None}) == {}

    def test_whitespace_is_kept(self):
        """Test only the exact empty string counts as empty."""
        assert clean_filters({"a": " "}) == {"a": " "}

    def test_input_not_mutated(self):
        """Test the input mapping is left untouched."""
        filters = {"a": "x", "b": ""}
        cleaned = clean_filters(filters)
        assert filters == {"a": "x", "b": ""}
        assert cleaned is not filters

    def test_order_preserved(self):
        """Test insertion order survives cleaning."""
        cleaned = clean_filters({"z": 1, "skip": None, "a": 2, "m": 3})
        assert list(cleaned) == ["z", "a", "m"]


class TestBuildQueryParams:
    """URL query strings from parameter mappings."""

    def test_base_params_first(self):
        """Test base params come first and absent values are skipped."""
        assert build_query_params({"a": "1", "b": ""}, ["base=1"]) == "base=1&a=1"

    def test_metadata_params(self):
        """Test the Data Model Object lookup string."""
        params = {
            "entityCategory": "Profile",
            "entityName": "TestEntity",
            "emptyParam": "",
            "nullParam": None,
        }
        assert build_query_params(params, ["entityType=DataModelObject"]) == (
            "entityType=DataModelObject&entityCategory=Profile&entityName=TestEntity"
        )

    def test_only_base_params(self):
        """Test base params alone when nothing else is present."""
        assert build_query_params({}, ["entityType=DataModelObject"]) == "entityType=DataModelObject"
        assert build_query_params({"a": None}, ["base=param"]) == "base=param"

    def test_no_base_params(self):
        """Test params without base params."""
        assert build_query_params({"param1": "value1", "param2": "value2"}) == "param1=value1&param2=value2"

    def test_empty_everything(self):
        """Test empty input gives an empty string."""
        assert build_query_params({}) == ""

    def test_values_encoded_as_uri_components(self):
        """Test reserved and non-ASCII characters are percent-encoded."""
        params = {
            "specialChars": "test value with spaces & symbols!",
            "unicode": "café",
        }
        assert build_query_params(params) == (
            "specialChars=test%20value%20with%20spaces%20%26%20symbols!&unicode=caf%C3%A9"
        )

    def test_unreserved_marks_left_alone(self):
        """Test characters encodeURIComponent leaves alone stay as they are."""
        assert build_query_params({"v": "a-b_c.d!e~f*g'h(i)"}) == "v=a-b_c.d!e~f*g'h(i)"
        assert build_query_params({"v": "a/b?c=d#e"}) == "v=a%2Fb%3Fc%3Dd%23e"

    def test_non_string_values(self):
        """Test numbers and booleans are stringified."""
        assert build_query_params({"n": 0, "t": True, "f": False}) == "n=0&t=true&f=false"

    def test_base_params_not_encoded(self):
        """Test base params are passed through unmodified."""
        assert build_query_params({}, ["a=b c"]) == "a=b c"
