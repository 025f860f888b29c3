"""Bulk removal of generated test data."""

from dataclasses import dataclass

from .. import naming
from ..logging_config import get_logger
from ..store import IStore

logger = get_logger(__name__)

DEFAULT_BATCH_SIZE = 10


@dataclass
class CleanupResult:
    """What a cleanup pass found and removed."""

    found: int = 0
    removed: int = 0
    batches: int = 0
    error: str | None = None


class CleanupManager:
    """Deletes every prefixed record under the root collection in batches.

    Failures are logged and never raised; cleanup is best effort.
    """

    def __init__(
        self,
        store: IStore,
        root: str = naming.ROOT_COLLECTION,
        prefix: str = naming.TEST_PREFIX,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self._store = store
        self._root = root
        self._prefix = prefix
        self._batch_size = batch_size

    async def cleanup(self) -> CleanupResult:
        result = CleanupResult()
        logger.debug("Cleaning up test data under /%s", self._root)

        try:
            snapshot = await self._store.read(self._root)
            records = snapshot.value if isinstance(snapshot.value, dict) else {}
            keys = [key for key in records if key.startswith(self._prefix)]
            result.found = len(keys)

            if not keys:
                logger.info("Nothing to clean up.")
                return result

            logger.info("Found %d test games to remove.", len(keys))
            total_batches = -(-len(keys) // self._batch_size)
            for start in range(0, len(keys), self._batch_size):
                batch = keys[start : start + self._batch_size]
                await self._store.update(
                    "", {f"{self._root}/{key}": None for key in batch}
                )
                result.batches += 1
                result.removed += len(batch)
                logger.info(
                    "Removed batch %d/%d (%d games)",
                    result.batches,
                    total_batches,
                    len(batch),
                )

            logger.info("Cleanup complete. Removed %d test games.", result.removed)
        except Exception as e:
            result.error = str(e) or type(e).__name__
            logger.error("Cleanup error: %s", result.error)

        return result
