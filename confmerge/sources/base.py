"""Source abstract interface and shared source behaviour."""

import asyncio
import os
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from pathlib import Path

from pydantic import BaseModel

from confmerge.binder import Lookup, bind_fields
from confmerge.config import get_settings
from confmerge.errors import ConfmergeError, SourceNotBoundError
from confmerge.observability.logging import get_logger
from confmerge.sync import CancelToken, WaitGroup

logger = get_logger(__name__)

ChangeHandler = Callable[[], None]


class Source(ABC):
    """Abstract interface for a configuration source.

    A source populates part of a shared configuration model. The merger
    hands every source the same target instance through ``set_target``
    before ``load`` or ``watch`` is called; sources mutate it in place and
    never replace it.
    """

    @abstractmethod
    async def load(self) -> None:
        """Populate the fields this source is responsible for.

        Must be idempotent: loading twice with unchanged inputs yields the
        same target state.
        """
        pass

    @abstractmethod
    def set_target(self, target: BaseModel) -> None:
        """Receive the shared configuration model."""
        pass

    @abstractmethod
    def get_tag_ids(self) -> frozenset[str]:
        """Variable names this source claims."""
        pass

    @abstractmethod
    async def watch(self, cancel: CancelToken, group: WaitGroup) -> None:
        """Observe inputs until ``cancel`` fires, then return.

        The caller has already counted this task in ``group``; any extra
        tasks a source spawns must be added to and released from it.
        """
        pass

    @property
    def name(self) -> str:
        return type(self).__name__


class TaggedSource(Source):
    """Source that binds fields through one tag key.

    Subclasses provide ``load`` and call ``_bind`` with a lookup function.
    The default ``watch`` has nothing to observe and simply waits for
    cancellation.
    """

    def __init__(self, variables: Iterable[str], *, tag_key: str) -> None:
        self.tag_key = tag_key
        self._tag_ids = frozenset(variables)
        self._target: BaseModel | None = None

    def set_target(self, target: BaseModel) -> None:
        self._target = target

    @property
    def target(self) -> BaseModel:
        if self._target is None:
            raise SourceNotBoundError(f"{self.name} has no target; add it to a Merger first")
        return self._target

    def get_tag_ids(self) -> frozenset[str]:
        return self._tag_ids

    def _bind(self, lookup: Lookup) -> int:
        assigned = bind_fields(self.target, self.tag_key, self._tag_ids, lookup)
        logger.debug("source_bound", source=self.name, tag_key=self.tag_key, fields=assigned)
        return assigned

    async def watch(self, cancel: CancelToken, group: WaitGroup) -> None:
        await cancel.wait()


class FileSource(TaggedSource):
    """Tagged source backed by a file, reloaded when the file changes.

    Subclasses implement ``_read``, which runs in a worker thread and
    returns the lookup used for binding. The file stamp is recorded before
    each successful read, so an edit made between ``load`` and the start of
    ``watch`` is picked up on the first poll.
    """

    def __init__(
        self,
        path: str | Path,
        variables: Iterable[str],
        *,
        tag_key: str,
        poll_interval: float | None = None,
        on_change: ChangeHandler | None = None,
    ) -> None:
        super().__init__(variables, tag_key=tag_key)
        self.path = Path(path)
        if poll_interval is None:
            poll_interval = get_settings().watch.poll_interval
        self.poll_interval = poll_interval
        self.on_change = on_change
        self._loaded = False
        self._loaded_stamp: tuple[int, int] | None = None

    @abstractmethod
    def _read(self) -> Lookup:
        """Read the file and return a lookup over its values."""
        pass

    def _stamp(self) -> tuple[int, int] | None:
        try:
            stat = os.stat(self.path)
        except FileNotFoundError:
            return None
        return stat.st_size, stat.st_mtime_ns

    async def load(self) -> None:
        stamp = self._stamp()
        lookup = await asyncio.to_thread(self._read)
        self._loaded = True
        self._loaded_stamp = stamp
        self._bind(lookup)

    async def watch(self, cancel: CancelToken, group: WaitGroup) -> None:
        stamp = self._loaded_stamp if self._loaded else self._stamp()
        logger.debug("file_watch_started", source=self.name, path=str(self.path))
        while not await cancel.sleep(self.poll_interval):
            current = self._stamp()
            if current == stamp:
                continue
            stamp = current
            try:
                await self.load()
            except (ConfmergeError, OSError, ValueError) as e:
                logger.warning(
                    "source_reload_failed",
                    source=self.name,
                    path=str(self.path),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue
            stamp = self._loaded_stamp
            logger.info("source_reloaded", source=self.name, path=str(self.path))
            if self.on_change is not None:
                self.on_change()
        logger.debug("file_watch_stopped", source=self.name, path=str(self.path))
