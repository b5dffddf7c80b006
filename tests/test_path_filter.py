"""Tests for path filter module."""

import pytest
from pathlib import Path

from src.gowatch.exceptions import PatternError
from src.gowatch.path_filter import PathFilter, validate_pattern


class TestValidatePattern:
    """Tests for glob pattern validation."""

    @pytest.mark.parametrize("pattern", [
        "*.go",
        "*_test.go",
        "?ain.go",
        "[abc].go",
        "[!a].go",
        "[]].go",
        "vendor/*",
        "",
    ])
    def test_valid_patterns(self, pattern):
        validate_pattern(pattern)

    @pytest.mark.parametrize("pattern", ["[", "*.[go", "[!", "main[].go"])
    def test_unterminated_class(self, pattern):
        with pytest.raises(PatternError) as exc_info:
            validate_pattern(pattern)
        
        assert exc_info.value.pattern == pattern
        assert pattern in str(exc_info.value)


class TestPathFilter:
    """Tests for PathFilter class."""

    def test_no_patterns_ignores_nothing(self):
        path_filter = PathFilter()
        assert path_filter.should_ignore("/proj/main.go") is False

    def test_matches_final_component(self):
        path_filter = PathFilter(["*_test.go"])
        
        assert path_filter.should_ignore(Path("/proj/main_test.go")) is True
        assert path_filter.should_ignore(Path("/proj/main.go")) is False

    def test_matches_full_path(self):
        path_filter = PathFilter(["/proj/vendor/*"])
        
        assert path_filter.should_ignore("/proj/vendor/lib.go") is True
        assert path_filter.should_ignore("/proj/internal/lib.go") is False

    def test_matches_path_relative_to_root(self):
        path_filter = PathFilter(["vendor/*"], root="/proj")

        assert path_filter.should_ignore("/proj/vendor/lib.go") is True
        assert path_filter.should_ignore("/proj/vendor/pkg/x/lib.go") is True
        assert path_filter.should_ignore("/proj/internal/vendor.go") is False

    def test_relative_pattern_needs_root(self):
        assert PathFilter(["vendor/*"]).should_ignore("/proj/vendor/lib.go") is False

    def test_path_outside_root_uses_name_and_full_path(self):
        path_filter = PathFilter(["vendor/*", "*_test.go"], root="/proj")

        assert path_filter.should_ignore("/other/vendor/lib.go") is False
        assert path_filter.should_ignore("/other/main_test.go") is True

    def test_question_mark_and_class(self):
        path_filter = PathFilter(["gen_?.go", "[xy]*.go"])
        
        assert path_filter.should_ignore("/proj/gen_a.go") is True
        assert path_filter.should_ignore("/proj/xfile.go") is True
        assert path_filter.should_ignore("/proj/gen_ab.go") is False
        assert path_filter.should_ignore("/proj/zfile.go") is False

    def test_negated_class(self):
        path_filter = PathFilter(["[!m]ain.go"])
        
        assert path_filter.should_ignore("/proj/main.go") is False
        assert path_filter.should_ignore("/proj/rain.go") is True

    def test_match_is_order_independent(self):
        path = "/proj/api/handler_test.go"
        patterns = ["*.pb.go", "*_test.go", "mock_*.go"]
        
        assert PathFilter(patterns).should_ignore(path) is True
        assert PathFilter(list(reversed(patterns))).should_ignore(path) is True

    def test_no_match_returns_false(self):
        path_filter = PathFilter(["*.pb.go", "mock_*.go"])
        assert path_filter.should_ignore("/proj/server.go") is False

    def test_malformed_pattern_raises(self):
        path_filter = PathFilter(["[oops"])
        
        with pytest.raises(PatternError) as exc_info:
            path_filter.should_ignore("/proj/main.go")
        
        assert exc_info.value.pattern == "[oops"

    def test_first_match_wins_before_malformed_pattern(self):
        path_filter = PathFilter(["*.go", "[oops"])
        assert path_filter.should_ignore("/proj/main.go") is True

    def test_validate_reports_first_malformed(self):
        path_filter = PathFilter(["*.go", "[a", "[b"])
        
        with pytest.raises(PatternError) as exc_info:
            path_filter.validate()
        
        assert exc_info.value.pattern == "[a"

    def test_len(self):
        assert len(PathFilter(["a", "b"])) == 2
