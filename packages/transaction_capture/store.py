"""Ledger storage collaborators.

The pipeline only needs three reads and one write, expressed by the
``LedgerStore`` protocol. ``InMemoryLedgerStore`` ships the household's
default roster and is what the API uses unless Supabase is configured.
``SupabaseLedgerStore`` wraps the sync supabase-py client and runs every
call in the default executor so the event loop is never blocked.
"""

import asyncio
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

import structlog

from .constants import DEFAULT_CATEGORIES
from .models import BankAccount, Category, Person

logger = structlog.get_logger()


class LedgerStore(Protocol):
    async def get_bank_accounts(self) -> List[BankAccount]: ...

    async def get_persons(self) -> List[Person]: ...

    async def get_categories(self) -> List[Category]: ...

    async def create_transaction(self, record: Dict[str, Any]) -> Dict[str, Any]: ...


DEFAULT_PERSONS: List[Person] = [
    Person("11111111-1111-1111-1111-111111111111", "Sadik Shaikh", "family_member"),
    Person("22222222-2222-2222-2222-222222222222", "Dad", "business_owner"),
    Person("33333333-3333-3333-3333-333333333333", "Mom", "family_member"),
]

DEFAULT_BANK_ACCOUNTS: List[BankAccount] = [
    BankAccount("73f5a80e-060f-4b85-93c4-90b99b99433e", "SBI - Abbu", "SBI0003", "Saving"),
    BankAccount("e552f887-12c7-40b9-84b8-8f5de56b49f6", "Baroda - Sadik", "BARB0001", "Saving"),
    BankAccount("8a1f6820-c1d0-4dd3-99de-53f3997f2488", "SBI - Sadik", "SBI0001", "Saving"),
    BankAccount("f78219c7-a1e4-4a84-a375-9ceb8f33ba71", "SBI - Ammi", "SBI0002", "Saving"),
]


class InMemoryLedgerStore:
    """Process-local ledger. Active rows only, ordered like the SQL store."""

    def __init__(
        self,
        bank_accounts: Optional[List[BankAccount]] = None,
        persons: Optional[List[Person]] = None,
        categories: Optional[List[Category]] = None,
    ):
        self.bank_accounts = list(DEFAULT_BANK_ACCOUNTS if bank_accounts is None else bank_accounts)
        self.persons = list(DEFAULT_PERSONS if persons is None else persons)
        self.categories = list(DEFAULT_CATEGORIES if categories is None else categories)
        self.transactions: List[Dict[str, Any]] = []

    @classmethod
    def empty(cls) -> "InMemoryLedgerStore":
        return cls(bank_accounts=[], persons=[], categories=[])

    async def get_bank_accounts(self) -> List[BankAccount]:
        active = [replace(a) for a in self.bank_accounts if a.is_active]
        return sorted(active, key=lambda a: a.bank_name)

    async def get_persons(self) -> List[Person]:
        active = [replace(p) for p in self.persons if p.is_active]
        return sorted(active, key=lambda p: p.name)

    async def get_categories(self) -> List[Category]:
        return sorted(self.categories, key=lambda c: (c.type, c.name))

    async def create_transaction(self, record: Dict[str, Any]) -> Dict[str, Any]:
        if not any(a.id == record.get("bank_account_id") for a in self.bank_accounts):
            raise LookupError("Bank account not found")
        now = datetime.now(timezone.utc).isoformat()
        stored = {**record, "id": str(uuid.uuid4()), "created_at": now, "updated_at": now}
        self.transactions.append(stored)
        return stored


class SupabaseLedgerStore:
    """Ledger backed by the Supabase tables of the same names."""

    def __init__(self, client):
        self.client = client

    @classmethod
    def from_settings(cls, settings) -> "SupabaseLedgerStore":
        from supabase import create_client

        if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_KEY:
            raise RuntimeError("Supabase environment variables are not configured")
        return cls(create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY))

    async def _run(self, fn):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, fn)

    async def get_bank_accounts(self) -> List[BankAccount]:
        response = await self._run(
            lambda: self.client.table("bank_accounts").select("*").eq("is_active", True).order("bank_name").execute()
        )
        return [BankAccount.from_record(row) for row in response.data or []]

    async def get_persons(self) -> List[Person]:
        response = await self._run(
            lambda: self.client.table("persons").select("*").eq("is_active", True).order("name").execute()
        )
        return [Person.from_record(row) for row in response.data or []]

    async def get_categories(self) -> List[Category]:
        response = await self._run(
            lambda: self.client.table("categories").select("*").order("type").order("name").execute()
        )
        return [Category.from_record(row) for row in response.data or []]

    async def create_transaction(self, record: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._run(lambda: self.client.table("transactions").insert(record).execute())
        rows = response.data or []
        if not rows:
            raise RuntimeError("Insert returned no rows")
        logger.debug("supabase_transaction_inserted", id=rows[0].get("id"))
        return rows[0]
