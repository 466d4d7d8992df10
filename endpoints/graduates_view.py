from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Literal

from errors import CacheWriteError, InvalidArgument, StoreDeleteError, StoreReadError, StoreWriteError
from services.graduate_service import GraduateService
from services.models import GraduateRecord, GraduatesSummary, MigrationResult, summarize

logger = logging.getLogger(__name__)

NoticeKind = Literal["success", "info", "warning", "error"]


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Failed:
    message: str


@dataclass(frozen=True)
class Ready:
    records: tuple[GraduateRecord, ...] = ()
    migrating: bool = False


# Exactly one of these at a time; "failed while migrating" cannot be expressed.
ViewState = Loading | Failed | Ready


@dataclass(frozen=True)
class Notice:
    kind: NoticeKind
    message: str


class GraduatesView:
    """
    State behind the graduates page.

    Holds the in-memory record list and a queue of one-shot notices. Every
    action awaits the service and then replaces the state; nothing runs in the background.
    """

    def __init__(self, service: GraduateService) -> None:
        self._service = service
        self._state: ViewState = Loading()
        self._mounted = False
        self._notices: list[Notice] = []
        # Owned by migrate(); every Ready built elsewhere copies it.
        self._migrating = False

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def records(self) -> tuple[GraduateRecord, ...]:
        return self._state.records if isinstance(self._state, Ready) else ()

    def summary(self) -> GraduatesSummary:
        return summarize(self.records)

    def _notify(self, kind: NoticeKind, message: str) -> None:
        self._notices.append(Notice(kind=kind, message=message))

    def drain_notices(self) -> list[Notice]:
        notices, self._notices = self._notices, []
        return notices

    async def mount(self) -> None:
        if self._mounted:
            return
        self._mounted = True
        await self.load()

    async def load(self, show_loading: bool = True) -> None:
        if show_loading:
            self._state = Loading()
        try:
            records = await self._service.list()
        except StoreReadError as e:
            self._state = Failed(f"Failed to load data: {e}")
            return
        self._state = Ready(records=tuple(records), migrating=self._migrating)

    async def retry(self) -> None:
        await self.load()

    async def refresh(self) -> None:
        await self.load()

    async def delete(self, store_id: str, name: str, *, confirmed: bool) -> bool:
        if not confirmed:
            return False
        try:
            await self._service.delete(store_id)
        except (InvalidArgument, StoreDeleteError) as e:
            self._notify("error", f"Failed to delete {name}: {e}")
            return False

        # Drop it locally instead of re-fetching.
        if isinstance(self._state, Ready):
            remaining = tuple(r for r in self._state.records if r.storeId != store_id)
            self._state = Ready(records=remaining, migrating=self._migrating)
        self._notify("success", f"{name} deleted successfully")
        return True

    async def migrate(self) -> MigrationResult | None:
        state = self._state
        if not isinstance(state, Ready) or self._migrating:
            return None

        self._migrating = True
        self._state = replace(state, migrating=True)
        try:
            result = await self._service.migrate()
            if result.migratedCount == 0 and result.totalCount == 0:
                self._notify("info", "No data found in the local cache to migrate. Use 'Initial Data' first.")
            elif result.migratedCount == 0:
                self._notify(
                    "warning",
                    f"The local cache holds {result.totalCount} records but none were migrated.",
                )
            else:
                self._notify("success", f"Successfully migrated {result.migratedCount} records")
                await self.load(show_loading=False)
            return result
        except StoreWriteError as e:
            self._notify("error", f"Migration failed: {e}")
            return None
        finally:
            self._migrating = False
            if isinstance(self._state, Ready):
                self._state = replace(self._state, migrating=False)

    async def create_initial_data(self, *, confirmed: bool) -> bool:
        if not confirmed:
            return False

        previous = self._state
        self._state = Loading()
        try:
            await self._service.create_initial_data()
        except (CacheWriteError, StoreWriteError) as e:
            self._notify("error", f"Failed to create data: {e}")
            if isinstance(previous, Ready):
                previous = replace(previous, migrating=self._migrating)
            self._state = previous
            return False

        self._notify("success", "Initial data created successfully")
        await self.load()
        return True
