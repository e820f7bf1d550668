"""Map device payload use case."""

import asyncio
import logging
from typing import Any

from vorto.application.mapping import MappingEngine
from vorto.domain.exceptions import DoesNotExist, MappingException
from vorto.domain.mapping import MappingResult

logger = logging.getLogger(__name__)


class MapPayloadUseCase:
    """Map a decoded JSON payload with one of the registered engines."""

    def __init__(self, engines: dict[str, MappingEngine]) -> None:
        self._engines = dict(engines)

    def list_specifications(self) -> list[str]:
        return sorted(self._engines)

    async def execute(self, specification: str, payload: Any) -> MappingResult:
        """Run the mapping off the event loop; scripts block until done or killed."""
        engine = self._engines.get(specification)
        if engine is None:
            raise DoesNotExist("Mapping specification", specification)
        try:
            return await asyncio.to_thread(engine.map_source, payload)
        except MappingException as e:
            logger.warning("Mapping with [%s] failed: %s", specification, e)
            raise
