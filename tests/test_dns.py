"""Tests for the dig-based resolver."""

import subprocess
from unittest.mock import patch

import pytest

from h2s.dns import resolve
from h2s.errors import EmptyResultError, ResolutionError, UnexpectedAddressError
from h2s.models import AddressFamily


def _dig_output(stdout: str, returncode: int = 0, stderr: str = "") -> subprocess.CompletedProcess:
    """A ``subprocess.run`` result shaped like ``dig +short`` output."""
    return subprocess.CompletedProcess(
        args=["dig"], returncode=returncode, stdout=stdout, stderr=stderr
    )


class TestResolveQuery:
    """resolve() runs dig with the right arguments."""

    @patch("h2s.dns.subprocess.run")
    def test_aaaa_query(self, mock_run: patch) -> None:
        mock_run.return_value = _dig_output("2001:db8::1\n")

        resolve("a.example", AddressFamily.IPV6)

        mock_run.assert_called_once_with(
            ["dig", "+short", "-t", "AAAA", "a.example"],
            capture_output=True,
            text=True,
            check=False,
        )

    @patch("h2s.dns.subprocess.run")
    def test_a_query_with_custom_binary(self, mock_run: patch) -> None:
        mock_run.return_value = _dig_output("192.0.2.1\n")

        resolve("a.example", AddressFamily.IPV4, dig_binary="/usr/bin/dig")

        cmd = mock_run.call_args.args[0]
        assert cmd == ["/usr/bin/dig", "+short", "-t", "A", "a.example"]

    def test_empty_hostname_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-empty"):
            resolve("  ", AddressFamily.IPV4)

    @pytest.mark.parametrize("hostname", ["-fsomefile", "+tcp"])
    @patch("h2s.dns.subprocess.run")
    def test_option_like_hostname_rejected(self, mock_run: patch, hostname: str) -> None:
        with pytest.raises(ValueError, match="dig option"):
            resolve(hostname, AddressFamily.IPV4)

        mock_run.assert_not_called()


class TestResolveResults:
    """resolve() filters and validates dig output."""

    @patch("h2s.dns.subprocess.run")
    def test_multiple_ipv6(self, mock_run: patch) -> None:
        mock_run.return_value = _dig_output("2001:db8::1\n2001:db8::2\n")

        result = resolve("a.example", AddressFamily.IPV6)

        assert result == ["2001:db8::1", "2001:db8::2"]

    @patch("h2s.dns.subprocess.run")
    def test_aliases_are_skipped(self, mock_run: patch) -> None:
        """CNAME targets end with a dot and never reach the result."""
        mock_run.return_value = _dig_output(
            "edge.cdn.example.\nedge-v4.cdn.example.\n192.0.2.10\n192.0.2.11\n"
        )

        result = resolve("www.example", AddressFamily.IPV4)

        assert result == ["192.0.2.10", "192.0.2.11"]
        assert not any(r.endswith(".") for r in result)

    @patch("h2s.dns.subprocess.run")
    def test_duplicates_are_kept_in_order(self, mock_run: patch) -> None:
        mock_run.return_value = _dig_output("192.0.2.2\n192.0.2.1\n192.0.2.2\n")

        result = resolve("a.example", AddressFamily.IPV4)

        assert result == ["192.0.2.2", "192.0.2.1", "192.0.2.2"]

    @patch("h2s.dns.subprocess.run")
    def test_blank_lines_and_whitespace_ignored(self, mock_run: patch) -> None:
        mock_run.return_value = _dig_output("\n  192.0.2.1  \n\n")

        assert resolve("a.example", AddressFamily.IPV4) == ["192.0.2.1"]

    @patch("h2s.dns.subprocess.run")
    def test_empty_output_raises(self, mock_run: patch) -> None:
        mock_run.return_value = _dig_output("")

        with pytest.raises(EmptyResultError, match=r"DNS lookup for \[b.example\] failed"):
            resolve("b.example", AddressFamily.IPV4)

    @patch("h2s.dns.subprocess.run")
    def test_only_aliases_raises_empty(self, mock_run: patch) -> None:
        mock_run.return_value = _dig_output("alias.example.\n")

        with pytest.raises(EmptyResultError) as exc_info:
            resolve("b.example", AddressFamily.IPV6)
        assert exc_info.value.hostname == "b.example"

    @patch("h2s.dns.subprocess.run")
    def test_ipv4_in_ipv6_run_raises(self, mock_run: patch) -> None:
        mock_run.return_value = _dig_output("2001:db8::1\n192.0.2.1\n")

        with pytest.raises(UnexpectedAddressError, match=r"\[192.0.2.1\]") as exc_info:
            resolve("a.example", AddressFamily.IPV6)
        assert exc_info.value.output == "192.0.2.1"

    @patch("h2s.dns.subprocess.run")
    def test_ipv6_in_ipv4_run_raises(self, mock_run: patch) -> None:
        mock_run.return_value = _dig_output("2001:db8::1\n")

        with pytest.raises(UnexpectedAddressError):
            resolve("a.example", AddressFamily.IPV4)

    @patch("h2s.dns.subprocess.run")
    def test_dig_diagnostics_raise(self, mock_run: patch) -> None:
        """Diagnostic lines printed on stdout are not addresses."""
        mock_run.return_value = _dig_output(
            ";; connection timed out; no servers could be reached\n"
        )

        with pytest.raises(UnexpectedAddressError):
            resolve("a.example", AddressFamily.IPV4)

    def test_unexpected_address_is_a_resolution_error(self) -> None:
        assert issubclass(UnexpectedAddressError, ResolutionError)
        assert issubclass(EmptyResultError, ResolutionError)


class TestResolveFailures:
    """dig failures surface as ResolutionError."""

    @patch("h2s.dns.subprocess.run")
    def test_nonzero_exit_raises(self, mock_run: patch) -> None:
        mock_run.return_value = _dig_output(
            "", returncode=10, stderr="dig: couldn't get address for 'ns': not found"
        )

        with pytest.raises(ResolutionError, match="couldn't get address"):
            resolve("a.example", AddressFamily.IPV4)

    @patch("h2s.dns.subprocess.run")
    def test_missing_binary_raises(self, mock_run: patch) -> None:
        mock_run.side_effect = FileNotFoundError(2, "No such file or directory")

        with pytest.raises(ResolutionError, match="could not run dig"):
            resolve("a.example", AddressFamily.IPV4)
