"""
Orchestrator — owns the sessions around the search workflow.

Both front ends (Telegram bot, web dashboard) go through here.
Each conversation (a Telegram chat, the web page) gets its own
Session holding the display unit and a generation counter, so one
chat's search or unit toggle never touches another's.

Architecture:
  - SearchWorkflow does the blocking HTTP work in a worker thread
  - Each search is stamped with its session's generation at dispatch;
    a result whose generation is no longer that session's latest is discarded
  - The last query lives in SQLite (survives restarts); units do not
"""

from __future__ import annotations
import asyncio
import logging
from typing import Optional

from models import DisplayUnit, SearchLogEntry, Session, WorkflowResult
from render import render_result
from workflow import SearchWorkflow
import store

log = logging.getLogger(__name__)

DEFAULT_SESSION = "default"


class Orchestrator:
    def __init__(self, workflow: Optional[SearchWorkflow] = None, persistence=store):
        self.persistence = persistence
        self.workflow = workflow or SearchWorkflow(persistence=persistence)
        self.sessions: dict[str, Session] = {}

    def session(self, key=DEFAULT_SESSION) -> Session:
        """Get (or start) the session for a chat id / front end."""
        key = str(key)
        if key not in self.sessions:
            self.sessions[key] = Session(key=key)
        return self.sessions[key]

    # ── Searching ───────────────────────────────────────────────

    async def search(self, query: str, session=DEFAULT_SESSION) -> Optional[WorkflowResult]:
        """
        Run the workflow for `query` in one session.
        Returns None for blank input or when a newer search in the same
        session started while this one was in flight.
        """
        query = (query or "").strip()
        if not query:
            return None

        s = self.session(session)
        s.generation += 1
        generation = s.generation

        result = await asyncio.to_thread(self.workflow.execute, query)
        if result is None:
            return None

        if generation != s.generation:
            log.info(f"[{s.key}] Discarding stale result for {query!r} (gen {generation} < {s.generation})")
            return None

        result.generation = generation
        s.last_result = result
        self.persistence.log_search(SearchLogEntry.from_result(result))
        log.info(f"[{s.key}] Search {query!r}: {result.kind.value}")
        return result

    async def set_unit(self, unit: DisplayUnit, session=DEFAULT_SESSION) -> Optional[WorkflowResult]:
        """Switch units and re-run the remembered city so output re-renders."""
        s = self.session(session)
        s.unit = unit
        log.info(f"[{s.key}] Display unit set to {unit.symbol}")
        last = self.persistence.get_last_query()
        if not last:
            return None
        return await self.search(last, session)

    async def toggle_unit(self, session=DEFAULT_SESSION) -> Optional[WorkflowResult]:
        if self.session(session).unit is DisplayUnit.CELSIUS:
            return await self.set_unit(DisplayUnit.FAHRENHEIT, session)
        return await self.set_unit(DisplayUnit.CELSIUS, session)

    async def restore(self, session=DEFAULT_SESSION) -> Optional[WorkflowResult]:
        """On startup: re-run the last persisted query, if there is one."""
        last = self.persistence.get_last_query()
        if not last:
            return None
        log.info(f"Restoring last search: {last!r}")
        return await self.search(last, session)

    # ── Output ──────────────────────────────────────────────────

    def render(self, result: WorkflowResult, session=DEFAULT_SESSION) -> str:
        return render_result(result, self.session(session).unit)

    def get_status_text(self, session=DEFAULT_SESSION) -> str:
        """Formatted status for the /status command."""
        s = self.session(session)
        last = self.persistence.get_last_query()
        lines = [
            f"Units: {s.unit.symbol}",
            f"Last city: {last or '(none)'}",
        ]
        if s.last_result is not None:
            lines.append(f"Last result: {s.last_result.kind.value}")
        return "\n".join(lines)
