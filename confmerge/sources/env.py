"""Environment variable source."""

import os
from collections.abc import Iterable

from confmerge.observability.logging import get_logger
from confmerge.sources.base import TaggedSource

logger = get_logger(__name__)


class EnvSource(TaggedSource):
    """Binds fields tagged ``env:"NAME"`` from the process environment.

    Only names that are both listed in ``variables`` and present in the
    environment are consulted; fields for absent variables keep their value.
    There is nothing to watch, so ``watch`` just waits for cancellation.
    """

    def __init__(
        self,
        variables: Iterable[str],
        *,
        tag_key: str = "env",
    ) -> None:
        super().__init__(variables, tag_key=tag_key)

    async def load(self) -> None:
        present = sorted(name for name in self.get_tag_ids() if name in os.environ)
        logger.debug("env_source_loading", variables=present)
        self._bind(os.environ.get)
