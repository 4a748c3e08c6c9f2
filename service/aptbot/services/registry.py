"""
Apartment Registry Store.

Persistent mapping (chat_id, user_id) -> apartment number.

The unique constraint on (chat_id, user_id) makes upsert atomic, so two
deliveries of the same /setapt never produce two rows. No application-level
locking is done here.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..config import get_settings
from ..errors import StoreError
from ..supabase_client import get_supabase_admin
from ..telegram_bot.logging_config import bot_logger as logger


@dataclass
class ApartmentRecord:
    """One registered resident of a chat."""
    chat_id: int
    user_id: int
    username: Optional[str]
    apartment_number: int
    id: Optional[int] = None

    @classmethod
    def from_row(cls, row: dict) -> "ApartmentRecord":
        return cls(
            chat_id=int(row["chat_id"]),
            user_id=int(row["user_id"]),
            username=row.get("username"),
            apartment_number=int(row["apartment_number"]),
            id=row.get("id"),
        )


class RegistryStore(ABC):
    """Access contract used by the command handlers."""

    @abstractmethod
    async def ping(self) -> None:
        """Raise StoreError if the store is unreachable."""

    @abstractmethod
    async def find_by_user(self, chat_id: int, user_id: int) -> Optional[ApartmentRecord]:
        ...

    @abstractmethod
    async def upsert(
        self,
        chat_id: int,
        user_id: int,
        username: Optional[str],
        apartment_number: int
    ) -> None:
        ...

    @abstractmethod
    async def find_by_apartment(self, chat_id: int, apartment_number: int) -> list[ApartmentRecord]:
        ...

    @abstractmethod
    async def list_all(self, chat_id: int) -> list[ApartmentRecord]:
        """All records of the chat, ascending by apartment number."""

    @abstractmethod
    async def delete(self, chat_id: int, user_id: int) -> None:
        """Remove the user's record; no-op if there is none."""


COLUMNS = "id, chat_id, user_id, username, apartment_number"


class SupabaseRegistryStore(RegistryStore):
    """Registry backed by the apartment_info table in Supabase."""

    def __init__(self, table: str = "apartment_info"):
        self.supabase = get_supabase_admin()
        self.table = table

    async def _execute(self, stage: str, build_query: Callable[[], Any]) -> list[dict]:
        # supabase-py is synchronous; keep the event loop free
        try:
            result = await asyncio.to_thread(lambda: build_query().execute())
        except Exception as e:
            raise StoreError(stage, e) from e
        return result.data or []

    async def ping(self) -> None:
        await self._execute(
            "ping",
            lambda: self.supabase.table(self.table).select("id").limit(1)
        )
        logger.info(f"Registry store reachable (table={self.table})")

    async def find_by_user(self, chat_id: int, user_id: int) -> Optional[ApartmentRecord]:
        rows = await self._execute(
            "find_by_user",
            lambda: self.supabase.table(self.table).select(COLUMNS)
            .eq("chat_id", chat_id)
            .eq("user_id", user_id)
            .limit(1)
        )
        return ApartmentRecord.from_row(rows[0]) if rows else None

    async def upsert(
        self,
        chat_id: int,
        user_id: int,
        username: Optional[str],
        apartment_number: int
    ) -> None:
        await self._execute(
            "upsert",
            lambda: self.supabase.table(self.table).upsert(
                {
                    "chat_id": chat_id,
                    "user_id": user_id,
                    "username": username,
                    "apartment_number": apartment_number,
                },
                on_conflict="chat_id,user_id"
            )
        )

    async def find_by_apartment(self, chat_id: int, apartment_number: int) -> list[ApartmentRecord]:
        rows = await self._execute(
            "find_by_apartment",
            lambda: self.supabase.table(self.table).select(COLUMNS)
            .eq("chat_id", chat_id)
            .eq("apartment_number", apartment_number)
            .order("id")
        )
        return [ApartmentRecord.from_row(row) for row in rows]

    async def list_all(self, chat_id: int) -> list[ApartmentRecord]:
        rows = await self._execute(
            "list_all",
            lambda: self.supabase.table(self.table).select(COLUMNS)
            .eq("chat_id", chat_id)
            .order("apartment_number")
            .order("id")
        )
        return [ApartmentRecord.from_row(row) for row in rows]

    async def delete(self, chat_id: int, user_id: int) -> None:
        await self._execute(
            "delete",
            lambda: self.supabase.table(self.table).delete()
            .eq("chat_id", chat_id)
            .eq("user_id", user_id)
        )


# Singleton
_registry_store: Optional[RegistryStore] = None


def get_registry_store() -> RegistryStore:
    global _registry_store
    if _registry_store is None:
        _registry_store = SupabaseRegistryStore(get_settings().apartment_table)
    return _registry_store
