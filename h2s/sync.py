"""Sync pipeline: resolve each hostname and refresh its addresses in the set."""

import logging
from collections.abc import Callable

from h2s.dns import resolve
from h2s.errors import H2sError, UnhandledError
from h2s.models import AddressFamily, RefreshRecord, RunConfig, SyncReport
from h2s.nft import SetSynchronizer

logger = logging.getLogger(__name__)

Resolver = Callable[[str, AddressFamily, str], list[str]]


def sync_hostnames(
    run_config: RunConfig,
    *,
    resolver: Resolver = resolve,
    synchronizer: SetSynchronizer | None = None,
    on_refresh: Callable[[RefreshRecord], None] | None = None,
) -> SyncReport:
    """Resolve every hostname of *run_config* and refresh each address.

    Hostnames are handled in the given order, addresses in the order the
    resolver returned them.  The first error aborts the run; refreshes
    already applied stay in place.

    Args:
        run_config: The run's family, target and hostnames.
        resolver: Lookup function, ``resolve`` by default.
        synchronizer: Backend for the target set.  Defaults to a
            ``SetSynchronizer`` using ``run_config.nft_binary``.
        on_refresh: Called with each record just before it is applied.

    Returns:
        A ``SyncReport`` listing every refreshed address.

    Raises:
        ResolutionError: If a hostname yields no usable addresses.
        ApplyError: If the backend rejects a refresh.
        UnhandledError: If anything else goes wrong; names the step.
    """
    if synchronizer is None:
        synchronizer = SetSynchronizer(run_config.target, run_config.nft_binary)

    report = SyncReport(family=run_config.family, target=run_config.target)

    for hostname in run_config.hostnames:
        addresses = _step(
            f"resolving {hostname}",
            resolver,
            hostname,
            run_config.family,
            run_config.dig_binary,
        )
        logger.debug("%s → %s", hostname, ", ".join(addresses))

        for address in addresses:
            record = RefreshRecord(
                hostname=hostname, address=address, target=run_config.target
            )
            if on_refresh is not None:
                on_refresh(record)
            _step(
                f"refreshing {address} in {run_config.target}",
                synchronizer.refresh,
                address,
            )
            report.refreshed.append(record)

    logger.debug(
        "Refreshed %d address(es) for %d hostname(s)",
        len(report.refreshed),
        len(run_config.hostnames),
    )
    return report


def _step(description: str, func: Callable, *args: object):
    """Call *func*, wrapping unexpected exceptions in ``UnhandledError``."""
    try:
        return func(*args)
    except H2sError:
        raise
    except Exception as exc:
        raise UnhandledError(description, exc) from exc
