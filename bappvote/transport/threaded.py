"""Mailbox transport with one worker thread per participant.

Each registered participant owns a :class:`queue.Queue` mailbox drained by a
dedicated daemon thread, so votes are delivered asynchronously and a slow
participant never blocks the sender. Votes travel through the mailboxes as
JSON-friendly payloads and every receiver decodes its own copy. Votes from
different senders carry no ordering guarantee relative to each other.
"""

from __future__ import annotations

import logging
import threading
import time
from queue import Empty, Queue
from typing import Dict, Optional

from bappvote.transport.transport import VoteHandler
from bappvote.types import MessagePayload, SignedVote, StrategyID

LOGGER = logging.getLogger(__name__)


class _Mailbox:
    """Queue plus the worker thread that feeds it to a handler."""

    def __init__(self, participant_id: StrategyID, handler: VoteHandler, poll_interval: float) -> None:
        self.participant_id = participant_id
        self.handler = handler
        self.queue: Queue[MessagePayload] = Queue()
        self._poll_interval = poll_interval
        self._running = False
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(
            target=self._loop,
            name=f"mailbox-{self.participant_id}",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: float) -> None:
        self._running = False
        if self._thread:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _loop(self) -> None:
        while self._running:
            try:
                payload = self.queue.get(timeout=self._poll_interval)
            except Empty:
                continue
            try:
                self.handler(SignedVote.from_payload(payload))
            except Exception:  # keep the mailbox alive for later votes
                LOGGER.exception("Participant %s failed to process a vote", self.participant_id)
            finally:
                self.queue.task_done()


class ThreadedNetwork:
    """Asynchronous broadcast over per-participant mailboxes."""

    def __init__(self, poll_interval: float = 0.05) -> None:
        self._poll_interval = poll_interval
        self._mailboxes: Dict[StrategyID, _Mailbox] = {}
        self._lock = threading.Lock()
        self._running = False

    def register(self, participant_id: StrategyID, handler: VoteHandler) -> None:
        mailbox = _Mailbox(participant_id, handler, self._poll_interval)
        with self._lock:
            previous = self._mailboxes.pop(participant_id, None)
            self._mailboxes[participant_id] = mailbox
            running = self._running
        if previous is not None:
            previous.stop(timeout=1.0)
        if running:
            mailbox.start()

    def unregister(self, participant_id: StrategyID) -> None:
        with self._lock:
            mailbox = self._mailboxes.pop(participant_id, None)
        if mailbox is not None:
            mailbox.stop(timeout=1.0)

    def start(self) -> None:
        """Start the worker thread of every registered mailbox."""
        with self._lock:
            self._running = True
            mailboxes = list(self._mailboxes.values())
        for mailbox in mailboxes:
            mailbox.start()

    def stop(self, timeout: float = 5.0) -> None:
        """Stop every worker thread; undelivered votes stay queued."""
        with self._lock:
            self._running = False
            mailboxes = list(self._mailboxes.values())
        for mailbox in mailboxes:
            mailbox.stop(timeout=timeout)

    def broadcast(self, signed_vote: SignedVote) -> None:
        with self._lock:
            mailboxes = list(self._mailboxes.values())
        payload = signed_vote.to_payload()
        for mailbox in mailboxes:
            mailbox.queue.put(dict(payload))

    def wait_idle(self, timeout: float = 5.0) -> bool:
        """Block until every mailbox is drained or *timeout* seconds elapse.

        Returns *True* when all queued votes have been processed.
        """
        deadline = time.monotonic() + timeout
        with self._lock:
            mailboxes = list(self._mailboxes.values())
        for mailbox in mailboxes:
            while mailbox.queue.unfinished_tasks:
                if time.monotonic() >= deadline:
                    return False
                time.sleep(0.005)
        return True
