"""Tests for ##TOKEN## substitution."""

from courier_mcp.utils.tokens import (
    extract_tokens,
    has_tokens,
    substitute_tokens,
    substitute_with_empty,
)


class TestHasTokens:
    """Tests for token detection."""

    def test_detects_token(self) -> None:
        assert has_tokens('$h = "##SYSTEM.HOSTNAME##"')

    def test_plain_script(self) -> None:
        assert not has_tokens("Write-Host 'hello'")

    def test_single_hashes_are_not_tokens(self) -> None:
        assert not has_tokens("# comment ## not closed")


class TestExtractTokens:
    """Tests for token extraction."""

    def test_unique_lowercased_in_order(self) -> None:
        script = "##B.two## ##a.one## ##B.TWO## ##c-3##"

        assert extract_tokens(script) == ["b.two", "a.one", "c-3"]

    def test_no_tokens(self) -> None:
        assert extract_tokens("nothing here") == []


class TestSubstituteTokens:
    """Tests for token substitution."""

    def test_text_without_markers_unchanged(self) -> None:
        for text in ("Write-Host 'a # b'", "$x = 1 #### divider", "#single"):
            result = substitute_tokens(text, {"x": "1"})

            assert result.script == text
            assert result.substitutions == []
            assert result.missing == []

    def test_case_insensitive_lookup(self) -> None:
        """Tokens match property names regardless of case."""
        result = substitute_tokens(
            "$u='##WMI.USER##'; $p='##wmi.pass##'",
            {"wmi.user": "admin", "WMI.PASS": "s3cret"},
        )

        assert result.script == "$u='admin'; $p='s3cret'"
        assert result.substitutions == [("WMI.USER", "admin"), ("wmi.pass", "s3cret")]
        assert result.missing == []

    def test_missing_token_becomes_empty(self) -> None:
        """Unknown tokens are removed and reported."""
        result = substitute_tokens("a=##KNOWN## b=##UNKNOWN##", {"known": "1"})

        assert result.script == "a=1 b="
        assert result.missing == ["UNKNOWN"]

    def test_no_markers_left(self) -> None:
        result = substitute_tokens("##a## ##b## ##c##", {"b": "x"})

        assert not has_tokens(result.script)

    def test_value_containing_token_syntax_is_not_reexpanded(self) -> None:
        result = substitute_tokens("##a##", {"a": "##b##", "b": "nope"})

        assert result.script == "##b##"

    def test_repeated_token_reported_each_time(self) -> None:
        result = substitute_tokens("##x## ##x##", {})

        assert result.script == " "
        assert result.missing == ["x", "x"]


class TestSubstituteWithEmpty:
    """Tests for empty substitution."""

    def test_all_tokens_emptied(self) -> None:
        result = substitute_with_empty("Connect ##HOST## -Port ##PORT##")

        assert result.script == "Connect  -Port "
        assert result.missing == ["HOST", "PORT"]
        assert result.substitutions == []
