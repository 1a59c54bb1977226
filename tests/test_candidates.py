"""Tests for the candidate address list reader."""

import pytest

from cdnopt.candidates import CandidateError, load_candidates, parse_candidates


class TestParseCandidates:
    """parse_candidates() keeps only valid IP literals."""

    def test_ipv4_and_ipv6(self) -> None:
        lines = ["104.16.1.1", "2606:4700::6810:101", "172.67.0.1"]

        assert parse_candidates(lines) == lines

    def test_whitespace_is_stripped(self) -> None:
        assert parse_candidates(["  1.1.1.1 \n", "\t8.8.8.8"]) == ["1.1.1.1", "8.8.8.8"]

    def test_invalid_lines_dropped_silently(self) -> None:
        lines = [
            "1.1.1.1",
            "not-an-ip",
            "example.com",
            "300.1.1.1",
            "1.1.1.0/24",
            "1.1.1.1:443",
            "8.8.8.8",
        ]

        assert parse_candidates(lines) == ["1.1.1.1", "8.8.8.8"]

    def test_blank_lines_ignored(self) -> None:
        assert parse_candidates(["", "  ", "1.1.1.1", ""]) == ["1.1.1.1"]

    def test_duplicates_keep_first_position(self) -> None:
        lines = ["8.8.8.8", "1.1.1.1", "8.8.8.8"]

        assert parse_candidates(lines) == ["8.8.8.8", "1.1.1.1"]

    def test_empty_input(self) -> None:
        assert parse_candidates([]) == []


class TestStrictMode:
    """strict=True turns invalid lines into an error."""

    def test_invalid_line_raises(self) -> None:
        with pytest.raises(CandidateError, match="1 invalid address line"):
            parse_candidates(["1.1.1.1", "bogus"], strict=True)

    def test_error_names_line_numbers(self) -> None:
        with pytest.raises(CandidateError, match=r": 2, 4$"):
            parse_candidates(["1.1.1.1", "x", "", "y"], strict=True)

    def test_long_rejection_list_truncated(self) -> None:
        with pytest.raises(CandidateError, match=r"\(\+2 more\)"):
            parse_candidates([f"bad{i}" for i in range(12)], strict=True)

    def test_blank_lines_are_not_violations(self) -> None:
        assert parse_candidates(["", "1.1.1.1", "   "], strict=True) == ["1.1.1.1"]


class TestLoadCandidates:
    """load_candidates() reads a file and delegates to parse_candidates()."""

    def test_reads_file(self, tmp_path) -> None:
        path = tmp_path / "ips.txt"
        path.write_text("1.1.1.1\ngarbage\n2606:4700::1111\n", encoding="utf-8")

        assert load_candidates(path) == ["1.1.1.1", "2606:4700::1111"]

    def test_accepts_string_path(self, tmp_path) -> None:
        path = tmp_path / "ips.txt"
        path.write_text("1.1.1.1\n", encoding="utf-8")

        assert load_candidates(str(path)) == ["1.1.1.1"]

    def test_missing_file_raises(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_candidates(tmp_path / "missing.txt")

    def test_strict_flag_forwarded(self, tmp_path) -> None:
        path = tmp_path / "ips.txt"
        path.write_text("1.1.1.1\nbad\n", encoding="utf-8")

        with pytest.raises(CandidateError):
            load_candidates(path, strict=True)
