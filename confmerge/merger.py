"""Merger: loads ordered sources into one configuration model.

Sources are loaded one after another in registration order, so a later
source overwrites fields an earlier one bound for the same variable
(last registered wins). Every load error is collected and reported in a
single LoadError; defaults and required checks only run after a clean
load pass.

A watch session (``run_watch``) runs each source's ``watch`` as its own
task until ``stop_watch`` is called. Binding performs no awaits, so each
reload is applied atomically on the event loop; when several sources
claim the same field during a watch session the last writer wins.
"""

import asyncio
from enum import Enum
from typing import Any

from pydantic import BaseModel

from confmerge.binder import apply_defaults, check_required
from confmerge.errors import (
    LifecycleError,
    LoadError,
    RequiredFieldError,
    TargetTypeError,
    WatchAlreadyActiveError,
    WatchNotActiveError,
)
from confmerge.observability.logging import get_logger
from confmerge.presenter import render_config
from confmerge.probe import stop_on_disconnect
from confmerge.schema import ConfigSchema, build_schema, resolve_parent
from confmerge.sources.base import Source
from confmerge.sync import CancelToken, WaitGroup

logger = get_logger(__name__)


class MergerState(str, Enum):
    """Lifecycle state of a Merger."""

    CREATED = "created"
    LOADING = "loading"
    VALIDATING = "validating"
    READY = "ready"
    FAILED = "failed"
    WATCHING = "watching"


class _WatchSession:
    def __init__(self) -> None:
        self.stop_requested = asyncio.Event()
        self.finished = asyncio.Event()
        self.tokens: list[CancelToken] = []
        self.group = WaitGroup()


class Merger:
    """Owns the target configuration model and its ordered sources."""

    def __init__(self, target: BaseModel) -> None:
        """Create a merger for ``target``.

        Raises:
            TargetTypeError: If target is not a mutable pydantic model instance
            SchemaError: If the model declares invalid tags or a nested
                record is unset
        """
        if not isinstance(target, BaseModel) or target.model_config.get("frozen", False):
            raise TargetTypeError(target)

        self._schema = build_schema(type(target))
        for spec in self._schema:
            resolve_parent(target, spec)

        self._target = target
        self._sources: list[Source] = []
        self._state = MergerState.CREATED
        self._session: _WatchSession | None = None
        self._sessions_ended = 0
        self._background: set[asyncio.Task[None]] = set()

    @property
    def target(self) -> BaseModel:
        return self._target

    @property
    def schema(self) -> ConfigSchema:
        return self._schema

    @property
    def sources(self) -> tuple[Source, ...]:
        return tuple(self._sources)

    @property
    def state(self) -> MergerState:
        return self._state

    @property
    def watching(self) -> bool:
        return self._session is not None

    @property
    def sessions_ended(self) -> int:
        """Number of watch sessions that have ended, failed ones included."""
        return self._sessions_ended

    def add_source(self, source: Source) -> None:
        """Register a source and hand it the shared target."""
        if self.watching:
            raise LifecycleError("cannot add a source while a watch session is active")
        overlap = sorted(
            name
            for name in source.get_tag_ids()
            if any(name in other.get_tag_ids() for other in self._sources)
        )
        source.set_target(self._target)
        self._sources.append(source)
        logger.debug("source_added", source=source.name, position=len(self._sources))
        if overlap:
            logger.info("source_overrides_claims", source=source.name, variables=overlap)

    def conflicts(self) -> dict[str, list[str]]:
        """Variable names claimed by more than one source.

        Returns:
            Mapping of variable name to the claiming sources, in registration
            order; the last one listed wins
        """
        claims: dict[str, list[str]] = {}
        for source in self._sources:
            for name in source.get_tag_ids():
                claims.setdefault(name, []).append(source.name)
        return {name: owners for name, owners in sorted(claims.items()) if len(owners) > 1}

    async def _load_all(self) -> None:
        self._state = MergerState.LOADING
        errors: list[Exception] = []
        for source in self._sources:
            logger.info("source_loading", source=source.name)
            try:
                await source.load()
            except Exception as e:
                logger.warning(
                    "source_load_failed",
                    source=source.name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                errors.append(e)

        if errors:
            self._state = MergerState.FAILED
            raise LoadError(errors)

    def _validate(self) -> None:
        self._state = MergerState.VALIDATING
        apply_defaults(self._target)
        try:
            check_required(self._target)
        except RequiredFieldError as e:
            self._state = MergerState.FAILED
            logger.warning("required_fields_missing", fields=e.fields)
            raise
        self._state = MergerState.READY

    async def run(self) -> None:
        """Load every source in order, then apply defaults and check required fields.

        Raises:
            LoadError: If any source failed; defaults and required checks are skipped
            RequiredFieldError: If required fields are unset after defaults
            LifecycleError: If a watch session is active
        """
        if self.watching:
            raise LifecycleError("cannot run while a watch session is active")
        await self._load_all()
        self._validate()
        logger.info("config_loaded", sources=len(self._sources))

    def get_final_config(self) -> dict[str, Any]:
        """Snapshot of the target as a nested dict keyed by field name."""
        return self._target.model_dump()

    async def run_watch(self) -> None:
        """Load all sources, then watch them until ``stop_watch`` is called.

        Returns only after every watch task has exited.

        Raises:
            WatchAlreadyActiveError: If a watch session is already running
            LoadError: If any source failed to load; no watch task is started
            RequiredFieldError: If required fields are unset after defaults
        """
        if self._session is not None:
            raise WatchAlreadyActiveError("a watch session is already active")

        session = _WatchSession()
        self._session = session
        try:
            await self._load_all()
            self._validate()
            await self._watch(session)
        finally:
            self._session = None
            self._sessions_ended += 1
            session.finished.set()

    async def _watch(self, session: _WatchSession) -> None:
        tasks: list[asyncio.Task[None]] = []
        for source in self._sources:
            token = CancelToken()
            session.tokens.append(token)
            session.group.add()
            tasks.append(
                asyncio.create_task(
                    self._watch_source(source, token, session.group),
                    name=f"watch:{source.name}",
                )
            )

        self._state = MergerState.WATCHING
        logger.info("watch_started", sources=len(tasks))
        try:
            await session.stop_requested.wait()
        finally:
            for token in session.tokens:
                token.cancel()
            await session.group.wait()
            await asyncio.gather(*tasks, return_exceptions=True)
            self._state = MergerState.READY
            logger.info("watch_stopped", sources=len(tasks))

    async def _watch_source(
        self,
        source: Source,
        token: CancelToken,
        group: WaitGroup,
    ) -> None:
        try:
            await source.watch(token, group)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                "source_watch_failed",
                source=source.name,
                error=str(e),
                error_type=type(e).__name__,
            )
        finally:
            group.done()

    def request_stop(self) -> None:
        """Ask the active watch session to stop without waiting for it.

        Raises:
            WatchNotActiveError: If no watch session is active or a stop was
                already requested
        """
        session = self._session
        if session is None:
            raise WatchNotActiveError("no watch session is active")
        if session.stop_requested.is_set():
            raise WatchNotActiveError("watch session is already stopping")
        logger.info("watch_stop_requested")
        session.stop_requested.set()

    async def stop_watch(self) -> None:
        """Stop the active watch session and wait until all watch tasks exit.

        Must not be awaited from inside a source's ``watch``; use
        ``request_stop`` there.

        Raises:
            WatchNotActiveError: If no watch session is active or a stop was
                already requested
        """
        session = self._session
        self.request_stop()
        if session is not None:
            await session.finished.wait()

    async def wait_stopped(self) -> None:
        """Wait for the current watch session, if any, to finish."""
        session = self._session
        if session is not None:
            await session.finished.wait()

    def print_config(self) -> None:
        """Print the target configuration, masking tagged fields."""
        print(render_config(self._target))

    def stop_on_disconnect(
        self,
        address: str,
        timeout: float,
        *,
        tick: float | None = None,
    ) -> asyncio.Task[None]:
        """Stop watching once ``address`` stops accepting TCP connections.

        Args:
            address: ``host:port`` to probe
            timeout: Probe interval, in probe ticks
            tick: Seconds per tick (defaults to settings.probe.tick_seconds)

        Returns:
            The background probe task
        """
        task = asyncio.create_task(
            stop_on_disconnect(
                self, address, timeout, tick=tick, sessions_ended=self._sessions_ended
            ),
            name=f"probe:{address}",
        )
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task
