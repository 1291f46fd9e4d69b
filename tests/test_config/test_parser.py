"""Tests for the portals file parser."""

from pathlib import Path

from courier_mcp.config.parser import PortalsFileParser


def _portals(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "portals"
    path.write_text(content)
    return path


class TestPortalsFileParser:
    """Tests for PortalsFileParser.parse."""

    def test_parses_portals(self, tmp_path: Path) -> None:
        path = _portals(
            tmp_path,
            """# session tokens
Portal Acme.LogicMonitor.com
    Token abc123

Portal beta.logicmonitor.com
    token xyz
""",
        )

        portals = PortalsFileParser(path).parse()

        assert set(portals) == {"acme.logicmonitor.com", "beta.logicmonitor.com"}
        assert portals["acme.logicmonitor.com"].token == "abc123"
        assert portals["beta.logicmonitor.com"].token == "xyz"
        assert portals["acme.logicmonitor.com"].acquired_at == path.stat().st_mtime

    def test_portal_without_token_skipped(self, tmp_path: Path) -> None:
        path = _portals(tmp_path, "Portal a.example.com\nPortal b.example.com\n  Token t\n")

        assert list(PortalsFileParser(path).parse()) == ["b.example.com"]

    def test_missing_file(self, tmp_path: Path) -> None:
        assert PortalsFileParser(tmp_path / "nope").parse() == {}

    def test_allowlist(self, tmp_path: Path) -> None:
        path = _portals(
            tmp_path, "Portal a.example.com\n Token 1\nPortal b.example.com\n Token 2\n"
        )

        portals = PortalsFileParser(path, allowlist=["b.example.com"]).parse()

        assert list(portals) == ["b.example.com"]

    def test_blocklist(self, tmp_path: Path) -> None:
        path = _portals(
            tmp_path, "Portal a.example.com\n Token 1\nPortal b.example.com\n Token 2\n"
        )

        portals = PortalsFileParser(path, blocklist=["b.example.com"]).parse()

        assert list(portals) == ["a.example.com"]

    def test_allowlist_takes_precedence(self, tmp_path: Path) -> None:
        path = _portals(tmp_path, "Portal a.example.com\n Token 1\n")

        portals = PortalsFileParser(
            path, allowlist=["a.example.com"], blocklist=["a.example.com"]
        ).parse()

        assert list(portals) == ["a.example.com"]
