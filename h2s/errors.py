"""Exception types raised while resolving and refreshing set elements."""

import click


class H2sError(Exception):
    """Base class for every fatal condition of a run."""


class UsageError(click.UsageError):
    """Malformed or missing command line arguments.

    click prints the usage line before the message; the process exits
    with status 1 like every other failure.
    """

    exit_code = 1


class PreconditionError(H2sError):
    """Missing privilege or external tool; raised before any side effect."""


class ResolutionError(H2sError):
    """DNS lookup for a hostname produced no usable result."""

    def __init__(self, hostname: str, message: str) -> None:
        super().__init__(message)
        self.hostname = hostname


class EmptyResultError(ResolutionError):
    """The lookup returned no address of the requested family."""

    def __init__(self, hostname: str) -> None:
        super().__init__(hostname, f"DNS lookup for [{hostname}] failed")


class UnexpectedAddressError(ResolutionError):
    """The lookup returned text that is not an address of the run's family."""

    def __init__(self, hostname: str, output: str) -> None:
        super().__init__(
            hostname, f"Unexpected output [{output}] in DNS lookup for [{hostname}]"
        )
        self.output = output


class ApplyError(H2sError):
    """The firewall backend rejected a refresh transaction."""

    def __init__(self, target: object, address: str, detail: str) -> None:
        super().__init__(
            f"Failed to refresh '{address}' in set '{target}': {detail}"
        )
        self.target = target
        self.address = address
        self.detail = detail


class UnhandledError(H2sError):
    """Any other failure, tagged with the step that was running."""

    def __init__(self, step: str, cause: BaseException) -> None:
        super().__init__(f"Unexpected error while {step}: {cause}")
        self.step = step
