"""
Pass store — keeps issued pass archives for retrieval by serial number.

Two backends share the PassStore interface:

  InMemoryPassStore
    Process-local LRU cache bounded by PASS_STORE_CAPACITY. When full, the
    least recently issued or retrieved pass is evicted. Lost on restart.

  DatabasePassStore
    Rows in the issued_passes table through an async SQLAlchemy session.
    Durable; no eviction.

Both store the signed archive bytes, so retrieval is byte-identical to the
issuance response. Entries are written once and never updated.

Concurrency:
  The service runs on a single event loop and neither backend awaits in the
  middle of an in-memory mutation, so the in-memory store needs no lock.
  A threaded server would need one around put()/get().
"""

import logging
from abc import ABC, abstractmethod
from collections import OrderedDict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gera.exceptions import PassNotFoundError
from gera.models.issued_pass import IssuedPass

logger = logging.getLogger(__name__)


class PassStore(ABC):
    """Registry from serial number to signed pass archive."""

    @abstractmethod
    async def put(self, serial_number: str, archive: bytes) -> None:
        """
        Register a newly issued pass.

        Raises:
            ValueError: If the serial number is already registered.
        """

    @abstractmethod
    async def get(self, serial_number: str) -> bytes:
        """
        Return the archive issued under serial_number.

        Raises:
            PassNotFoundError: If no such pass exists.
        """


class InMemoryPassStore(PassStore):

    def __init__(self, capacity: int = 1000):
        if capacity < 1:
            raise ValueError("Pass store capacity must be at least 1")
        self.capacity = capacity
        self._archives: OrderedDict[str, bytes] = OrderedDict()

    async def put(self, serial_number: str, archive: bytes) -> None:
        if serial_number in self._archives:
            raise ValueError(f"Pass {serial_number} is already registered")
        self._archives[serial_number] = archive
        while len(self._archives) > self.capacity:
            evicted, _ = self._archives.popitem(last=False)
            logger.info("Pass store full (%d), evicted pass %s", self.capacity, evicted)

    async def get(self, serial_number: str) -> bytes:
        try:
            archive = self._archives[serial_number]
        except KeyError:
            raise PassNotFoundError(serial_number)
        self._archives.move_to_end(serial_number)
        return archive

    def __len__(self) -> int:
        return len(self._archives)


class DatabasePassStore(PassStore):

    def __init__(self, db: AsyncSession):
        self.db = db

    async def put(self, serial_number: str, archive: bytes) -> None:
        if await self.db.get(IssuedPass, serial_number) is not None:
            raise ValueError(f"Pass {serial_number} is already registered")
        self.db.add(IssuedPass(serial_number=serial_number, archive=archive))
        await self.db.commit()

    async def get(self, serial_number: str) -> bytes:
        result = await self.db.execute(
            select(IssuedPass.archive).where(IssuedPass.serial_number == serial_number)
        )
        archive = result.scalar_one_or_none()
        if archive is None:
            raise PassNotFoundError(serial_number)
        return archive
