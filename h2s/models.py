"""Data models: AddressFamily, SetTarget, RunConfig and the sync report."""

import ipaddress
import re
from dataclasses import dataclass, field
from enum import Enum

DEFAULT_TABLE = "inet filter"

# Table kinds, table names and set names are pasted into nft scripts.
_IDENTIFIER = re.compile(r"[A-Za-z0-9_][A-Za-z0-9_./-]*")


def check_identifier(value: str, what: str) -> str:
    """Return *value* if it is safe to use as an nft identifier.

    Raises:
        ValueError: If *value* is empty or holds whitespace, braces,
            semicolons or other characters nft would parse as syntax.
    """
    if not isinstance(value, str) or not _IDENTIFIER.fullmatch(value):
        raise ValueError(f"Invalid {what} {value!r}")
    return value


class AddressFamily(Enum):
    """Address family of a run.

    The enum value is the DNS record type queried for the family.
    """

    IPV4 = "A"
    IPV6 = "AAAA"

    @property
    def record_type(self) -> str:
        return self.value

    @property
    def ip_version(self) -> int:
        return 4 if self is AddressFamily.IPV4 else 6

    @classmethod
    def from_record_type(cls, record_type: str) -> "AddressFamily":
        """Look up a family by DNS record type (``"A"`` or ``"AAAA"``).

        Matching is case-insensitive.

        Raises:
            ValueError: If *record_type* is neither ``A`` nor ``AAAA``.
        """
        try:
            return cls(record_type.strip().upper())
        except ValueError:
            raise ValueError(
                f"Type may only be 'A' (IPv4) or 'AAAA' (IPv6), got {record_type!r}"
            ) from None

    def matches(self, address: str) -> bool:
        """Return True if *address* is a literal of this family."""
        try:
            parsed = ipaddress.ip_address(address)
        except ValueError:
            return False
        return parsed.version == self.ip_version


@dataclass(frozen=True)
class TableLocator:
    """An nftables table, identified by its kind and name.

    Attributes:
        kind: Table family as nft spells it (``inet``, ``ip``, ``ip6``, ...).
        name: Table name (e.g. ``filter``).
    """

    kind: str
    name: str

    def __post_init__(self) -> None:
        check_identifier(self.kind, "table type")
        check_identifier(self.name, "table name")

    @classmethod
    def parse(cls, text: str) -> "TableLocator":
        """Parse ``"kind name"`` into a locator.

        Raises:
            ValueError: If *text* does not hold exactly two words, or a
                word is not a valid nft identifier.
        """
        parts = text.split()
        if len(parts) != 2:
            raise ValueError(
                f"Table must be given as 'tabletype tablename', got {text!r}"
            )
        return cls(kind=parts[0], name=parts[1])

    def __str__(self) -> str:
        return f"{self.kind} {self.name}"


@dataclass(frozen=True)
class SetTarget:
    """The set that resolved addresses are written to."""

    table: TableLocator
    set_name: str

    def __post_init__(self) -> None:
        check_identifier(self.set_name, "set name")

    def __str__(self) -> str:
        return f"{self.table} {self.set_name}"


@dataclass(frozen=True)
class RunConfig:
    """Everything a single run needs, fixed before the first lookup.

    Built once by the CLI from the parsed arguments and the config file,
    then handed to the sync pipeline.

    Attributes:
        family: Address family of every resolved address.
        target: Destination set.
        hostnames: Hostnames to process, in order.
        dig_binary: Path (or bare name for $PATH lookup) of ``dig``.
        nft_binary: Path (or bare name for $PATH lookup) of ``nft``.
    """

    family: AddressFamily
    target: SetTarget
    hostnames: tuple[str, ...]
    dig_binary: str = "dig"
    nft_binary: str = "nft"


@dataclass
class RefreshRecord:
    """One address refreshed in the target set."""

    hostname: str
    address: str
    target: SetTarget


@dataclass
class SyncReport:
    """Outcome of a completed run.

    Attributes:
        family: Address family of the run.
        target: Destination set.
        refreshed: Refreshed addresses in the order they were applied.
            Duplicates returned by DNS appear once per refresh.
    """

    family: AddressFamily
    target: SetTarget
    refreshed: list[RefreshRecord] = field(default_factory=list)
