"""Tests for glob matching and the test locator."""

import pytest

from teo.mapping.globs import TestLocator, expand_braces, matches_any, matches_glob


class TestExpandBraces:
    def test_no_braces(self) -> None:
        assert expand_braces("tests/**/*.js") == ["tests/**/*.js"]

    def test_two_groups_expand_left_to_right(self) -> None:
        assert expand_braces("t/*.{test,spec}.{js,ts}") == [
            "t/*.test.js",
            "t/*.test.ts",
            "t/*.spec.js",
            "t/*.spec.ts",
        ]

    def test_nested_group(self) -> None:
        assert expand_braces("{a,b{1,2}}.js") == ["a.js", "b1.js", "b2.js"]

    def test_unbalanced_brace_is_literal(self) -> None:
        assert expand_braces("weird{name.js") == ["weird{name.js"]


class TestMatchesGlob:
    @pytest.mark.parametrize(
        ("path", "pattern", "expected"),
        [
            ("src/auth/login.js", "src/auth/**", True),
            ("src/auth/deep/nested/x.js", "src/auth/**", True),
            ("src/authz/x.js", "src/auth/**", False),
            ("tests/login.spec.js", "tests/**/*.spec.js", True),
            ("tests/a/b/login.spec.js", "tests/**/*.spec.js", True),
            ("tests/a/login.spec.js", "tests/*.spec.js", False),
            ("tests/login.spec.ts", "tests/**/*.{test,spec}.{js,ts}", True),
            ("tests/login.e2e.ts", "tests/**/*.{test,spec}.{js,ts}", False),
            ("src/a.js", "src/?.js", True),
            ("src/ab.js", "src/?.js", False),
            ("./src/a.js", "src/*.js", True),
            ("src/a.js", "./src/*.js", True),
            ("src/v1.js", "src/v[0-9].js", True),
            ("src/vx.js", "src/v[!0-9].js", True),
        ],
    )
    def test_patterns(self, path: str, pattern: str, expected: bool) -> None:
        assert matches_glob(path, pattern) is expected

    def test_literal_dots_are_not_wildcards(self) -> None:
        assert not matches_glob("tests/loginXspecXjs", "tests/login.spec.js")

    def test_matches_any(self) -> None:
        assert matches_any("docs/a.md", ["src/**", "docs/*.md"])
        assert not matches_any("docs/a.md", [])


class TestTestLocator:
    def test_glob_returns_sorted_matches(self) -> None:
        # Given
        locator = TestLocator(
            ["tests/payments/pay.spec.js", "src/auth/login.js", "tests/auth/login.spec.js"]
        )

        # Then
        assert locator.glob("tests/**/*.spec.js") == [
            "tests/auth/login.spec.js",
            "tests/payments/pay.spec.js",
        ]
        assert len(locator) == 3
        assert "src/auth/login.js" in locator
        assert "src/auth" not in locator

    def test_glob_many_deduplicates(self) -> None:
        locator = TestLocator(["tests/auth/login.spec.js", "tests/auth/logout.spec.js"])
        assert locator.glob_many(["tests/auth/**", "tests/**/login*.spec.js"]) == [
            "tests/auth/login.spec.js",
            "tests/auth/logout.spec.js",
        ]

    def test_empty_locator(self) -> None:
        assert TestLocator([]).glob("**") == []
