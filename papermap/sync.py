"""Reconcile the local "shown on map" selection with tags stored remotely.

The selection is edited locally and applied optimistically. A debounced
background write pushes the difference against the last known server state,
retrying on failure. Every edit bumps a token; a write that finishes after a
newer edit only records the ids it actually wrote, and the remaining
difference is scheduled again.
"""

import asyncio
import logging

from .config import (
    MAP_HIDDEN_TAG,
    MAP_SYNC_DEBOUNCE_SECONDS,
    MAP_SYNC_MAX_ATTEMPTS,
    MAP_SYNC_RETRY_SECONDS,
)

logger = logging.getLogger(__name__)


def has_map_hidden_tag(tags):
    return MAP_HIDDEN_TAG in (tags or [])


def with_map_hidden_tag(tags, hidden):
    """Return a copy of tags with the hidden marker added or removed."""
    tags = [t for t in tags or [] if t != MAP_HIDDEN_TAG]
    if hidden:
        tags.append(MAP_HIDDEN_TAG)
    return tags


class MapSelectionSync:
    """Keeps a set of included paper ids in step with a remote tag store.

    Args:
        write_tags: async callable taking a list of
            {"paper_id": ..., "personal_tags": [...]} updates; raises on failure
        debounce: seconds to wait after an edit before writing
        retry_delay: seconds between failed attempts
        max_attempts: attempts per write before giving up
    """

    def __init__(self, write_tags, debounce=MAP_SYNC_DEBOUNCE_SECONDS,
                 retry_delay=MAP_SYNC_RETRY_SECONDS, max_attempts=MAP_SYNC_MAX_ATTEMPTS):
        self.write_tags = write_tags
        self.debounce = debounce
        self.retry_delay = retry_delay
        self.max_attempts = max_attempts

        self.included = set()
        self.server_included = set()
        self._papers = {}
        self._seen = set()
        self._token = 0
        self._debounce_task = None
        self._tasks = set()

    @property
    def token(self):
        return self._token

    def hydrate(self, papers):
        """Take the initial selection from the papers' stored tags."""
        self._papers = {p["id"]: p for p in papers}
        shown = {p["id"] for p in papers if not has_map_hidden_tag(p.get("personal_tags"))}
        self.included = set(shown)
        self.server_included = set(shown)
        self._seen = set(self._papers)

    def refresh(self, papers):
        """Adopt a refetched paper list.

        Ids that disappeared are dropped from both sets; newly seen papers
        are included unless they already carry the hidden tag.
        """
        self._papers = {p["id"]: p for p in papers}
        available = set(self._papers)
        self.included &= available
        self.server_included &= available

        for paper_id in available - self._seen:
            if not has_map_hidden_tag(self._papers[paper_id].get("personal_tags")):
                self.included.add(paper_id)
                self.server_included.add(paper_id)
        self._seen = available

    def pending_changes(self):
        """Paper ids whose local state differs from the server, in paper order."""
        return [
            pid for pid in self._papers
            if (pid in self.included) != (pid in self.server_included)
        ]

    def set_included(self, paper_ids):
        """Replace the local selection and schedule a sync. Unknown ids are ignored."""
        self.included = {pid for pid in paper_ids if pid in self._papers}
        return self.schedule()

    def schedule(self):
        """Schedule a debounced write of the pending changes.

        Returns the task, or None when there is nothing to write. Must be
        called from a running event loop.
        """
        self._token += 1
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = None

        changed = self.pending_changes()
        if not changed:
            return None

        task = asyncio.get_running_loop().create_task(
            self._run(self._token, changed, set(self.included))
        )
        self._debounce_task = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def flush(self):
        """Wait for every scheduled write to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _run(self, token, changed, snapshot):
        await asyncio.sleep(self.debounce)
        # From here on a newer edit no longer cancels this write
        if self._debounce_task is asyncio.current_task():
            self._debounce_task = None

        updates = [
            {
                "paper_id": pid,
                "personal_tags": with_map_hidden_tag(
                    self._papers.get(pid, {}).get("personal_tags"), pid not in snapshot
                ),
            }
            for pid in changed
        ]

        for attempt in range(1, self.max_attempts + 1):
            try:
                await self.write_tags(updates)
                break
            except Exception as e:
                logger.warning("Map selection sync failed (attempt %d/%d): %s",
                               attempt, self.max_attempts, e)
                if token != self._token:
                    return False
                if attempt == self.max_attempts:
                    logger.error("Giving up on map selection sync after %d attempts", attempt)
                    return False
                await asyncio.sleep(self.retry_delay)

        for update in updates:
            pid = update["paper_id"]
            paper = self._papers.get(pid)
            if paper is None:
                continue
            self._papers[pid] = {**paper, "personal_tags": update["personal_tags"]}
            if pid in snapshot:
                self.server_included.add(pid)
            else:
                self.server_included.discard(pid)

        if token != self._token:
            logger.debug("Map selection write %d superseded by %d", token, self._token)
            if self._debounce_task is None and self.pending_changes():
                self.schedule()
            return False
        return True
