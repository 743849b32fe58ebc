"""DNS resolution through ``dig``."""

import logging
import subprocess

from h2s.errors import EmptyResultError, ResolutionError, UnexpectedAddressError
from h2s.models import AddressFamily

logger = logging.getLogger(__name__)


def resolve(
    hostname: str, family: AddressFamily, dig_binary: str = "dig"
) -> list[str]:
    """Resolve a hostname to its addresses of one family.

    Runs ``dig +short -t A|AAAA <hostname>`` once.  Alias records (the
    CNAME chain, printed as names with a trailing dot) are skipped; every
    other line must be a literal address of *family*.

    Args:
        hostname: The hostname to resolve (e.g. ``"myhost.example.com"``).
        family: Address family selecting the record type and the accepted
            address syntax.
        dig_binary: Path (or bare name for $PATH lookup) of ``dig``.

    Returns:
        The addresses in the order ``dig`` printed them.  Duplicates are
        kept.

    Raises:
        ValueError: If *hostname* is empty or starts like a dig option.
        ResolutionError: If ``dig`` cannot be run or exits non-zero.
        EmptyResultError: If no address of *family* was returned.
        UnexpectedAddressError: If a returned line is not an address of
            *family*.
    """
    if not hostname or not hostname.strip():
        raise ValueError("hostname must be a non-empty string")
    if hostname.startswith(("-", "+")):
        raise ValueError(f"hostname {hostname!r} would be read as a dig option")

    lines = _query(hostname, family.record_type, dig_binary)

    addresses: list[str] = []
    for line in lines:
        if _is_alias(line):
            logger.debug("Skipping alias %s for %s", line, hostname)
            continue
        if not family.matches(line):
            raise UnexpectedAddressError(hostname, line)
        addresses.append(line)

    if not addresses:
        raise EmptyResultError(hostname)

    logger.debug(
        "Resolved %s (%s) → %d address(es)",
        hostname,
        family.record_type,
        len(addresses),
    )
    return addresses


def _query(hostname: str, record_type: str, dig_binary: str) -> list[str]:
    """Run ``dig +short`` and return its non-blank output lines."""
    cmd = [dig_binary, "+short", "-t", record_type, hostname]
    logger.debug("Running %s", " ".join(cmd))

    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except OSError as exc:
        raise ResolutionError(
            hostname, f"DNS lookup for [{hostname}] could not run {dig_binary}: {exc}"
        ) from exc

    if proc.returncode != 0:
        detail = (
            proc.stderr.strip() or proc.stdout.strip() or f"exit {proc.returncode}"
        )
        raise ResolutionError(
            hostname, f"DNS lookup for [{hostname}] failed: {detail}"
        )

    return [line.strip() for line in proc.stdout.splitlines() if line.strip()]


def _is_alias(line: str) -> bool:
    """Return True for a name reference rather than an address."""
    return line.endswith(".")
