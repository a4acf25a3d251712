"""TCP reachability probe that ends a watch session on disconnect."""

import asyncio
from typing import TYPE_CHECKING

from confmerge.config import get_settings
from confmerge.errors import WatchNotActiveError
from confmerge.observability.logging import get_logger

if TYPE_CHECKING:
    from confmerge.merger import Merger

logger = get_logger(__name__)


def split_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` (``[v6]:port`` accepted) into its parts."""
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"invalid address, expected host:port: {address!r}")
    return host.strip("[]"), int(port)


async def is_reachable(host: str, port: int, timeout: float) -> bool:
    """Whether a TCP connection to ``host:port`` succeeds within ``timeout``."""
    try:
        _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout=timeout)
    except (OSError, asyncio.TimeoutError):
        return False
    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return True


async def stop_on_disconnect(
    merger: "Merger",
    address: str,
    timeout: float,
    *,
    tick: float | None = None,
    sessions_ended: int | None = None,
) -> None:
    """Probe ``address`` and stop the merger's watch session when it is unreachable.

    Probing starts once a watch session is active and repeats every
    ``timeout * tick`` seconds. The probe returns as soon as a watch
    session ends, including one that failed while loading.

    Args:
        merger: Merger whose watch session is stopped
        address: ``host:port`` to connect to
        timeout: Interval between probes, in ticks
        tick: Seconds per tick (defaults to settings.probe.tick_seconds)
        sessions_ended: Ended-session count to compare against; defaults to
            the count when the probe starts running
    """
    host, port = split_address(address)
    if tick is None:
        tick = get_settings().probe.tick_seconds
    interval = timeout * tick

    ended = merger.sessions_ended if sessions_ended is None else sessions_ended
    while True:
        if merger.sessions_ended != ended:
            logger.debug("probe_finished", address=address)
            return
        if merger.watching:
            if not await is_reachable(host, port, interval):
                logger.warning("probe_unreachable", address=address)
                try:
                    merger.request_stop()
                except WatchNotActiveError:
                    logger.debug("probe_stop_skipped", address=address)
                return
        await asyncio.sleep(interval)
