"""Tests for the output renderer and the links file writer."""

import json

import pytest

from cdnopt.links import parse_node_link
from cdnopt.models import OptimizeRun, ProbeOutcome
from cdnopt.output import format_line, render, render_to_string, write_links

# -- Fixtures ----------------------------------------------------------------

_LINK = parse_node_link("trojan://pw@cdn.example.com:443?sni=cdn.example.com#SG")


def _run(*outcomes: ProbeOutcome, candidates: int = 5) -> OptimizeRun:
    return OptimizeRun(
        link=_LINK,
        candidate_count=candidates,
        outcomes=list(outcomes),
        timeout=3.0,
        duration_seconds=1.25,
    )


_FAST = ProbeOutcome(ip="104.16.1.1", latency=0.005)
_SLOW = ProbeOutcome(ip="172.67.2.2", latency=0.0203)


class TestFormatLine:
    """format_line() joins the rewritten link and its latency."""

    def test_line_shape(self) -> None:
        assert format_line(_LINK, _FAST) == (
            "trojan://pw@104.16.1.1:443?sni=cdn.example.com#SG (Latency: 5.00ms)"
        )


class TestWriteLinks:
    """write_links() writes one line per outcome in order."""

    def test_writes_lines_in_order(self, tmp_path) -> None:
        path = tmp_path / "out.txt"

        count = write_links(_run(_FAST, _SLOW), path)

        assert count == 2
        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[0].startswith("trojan://pw@104.16.1.1:443")
        assert lines[1].startswith("trojan://pw@172.67.2.2:443")
        assert lines[1].endswith("(Latency: 20.30ms)")

    def test_empty_run_writes_empty_file(self, tmp_path) -> None:
        path = tmp_path / "out.txt"
        path.write_text("stale\n", encoding="utf-8")

        assert write_links(_run(), path) == 0
        assert path.read_text(encoding="utf-8") == ""

    def test_unwritable_path_raises(self, tmp_path) -> None:
        with pytest.raises(OSError):
            write_links(_run(_FAST), tmp_path / "missing-dir" / "out.txt")


class TestRenderPlain:
    def test_same_lines_as_file(self) -> None:
        out = render_to_string(_run(_FAST, _SLOW), "plain")

        assert out.splitlines() == [
            format_line(_LINK, _FAST),
            format_line(_LINK, _SLOW),
        ]

    def test_empty(self) -> None:
        assert render_to_string(_run(), "plain") == ""


class TestRenderTable:
    """Rich table output."""

    def test_contains_rows(self) -> None:
        out = render_to_string(_run(_FAST, _SLOW), "table")

        assert "104.16.1.1" in out
        assert "172.67.2.2" in out
        assert "5.00" in out
        assert "20.30" in out

    def test_title_uses_label(self) -> None:
        out = render_to_string(_run(_FAST), "table")

        assert "SG" in out

    def test_summary_line(self) -> None:
        out = render_to_string(_run(_FAST, candidates=7), "table")

        assert "1 of 7 candidates kept" in out


class TestRenderJson:
    """JSON output."""

    def test_valid_json(self) -> None:
        payload = json.loads(render_to_string(_run(_FAST, _SLOW), "json"))

        assert payload["scheme"] == "trojan"
        assert payload["port"] == 443
        assert payload["label"] == "SG"
        assert payload["params"] == {"sni": "cdn.example.com"}
        assert payload["timeout_ms"] == 3000
        assert payload["candidate_count"] == 5
        assert [r["ip"] for r in payload["results"]] == ["104.16.1.1", "172.67.2.2"]
        assert payload["results"][0]["latency_ms"] == 5.0
        assert payload["results"][0]["link"].startswith("trojan://pw@104.16.1.1:443")

    def test_empty_results(self) -> None:
        payload = json.loads(render_to_string(_run(), "json"))

        assert payload["results"] == []


class TestRenderDispatch:
    def test_unknown_format_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown output format"):
            render(_run(), "xml")
