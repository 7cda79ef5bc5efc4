"""
Per-identity lock arena.

Hands out one lock per identity so that work on the same identity is
serialized while different identities run in parallel. The locks are
awaited from coroutines but are not tied to one event loop: sync views
bridge into the async services with ``async_to_sync``, and under a
threaded WSGI server every request runs its own loop.
"""
import asyncio
import contextlib
import logging
import threading
from collections import deque
from typing import AsyncIterator, Deque, Dict, Hashable

logger = logging.getLogger(__name__)


class _Waiter:
    __slots__ = ("loop", "future", "granted")

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self.loop = loop
        self.future = loop.create_future()
        self.granted = False


def _wake(future: asyncio.Future) -> None:
    if not future.done():
        future.set_result(None)


class ThreadSafeAsyncLock:
    """
    Mutual exclusion for coroutines running on any event loop.

    Waiters are served in arrival order. Ownership is handed directly to
    the next waiter on release, which is then woken on its own loop.
    """

    def __init__(self):
        """Initialize the lock."""
        self._mutex = threading.Lock()
        self._held = False
        self._waiters: Deque[_Waiter] = deque()

    def locked(self) -> bool:
        return self._held

    async def acquire(self) -> bool:
        loop = asyncio.get_running_loop()
        with self._mutex:
            if not self._held:
                self._held = True
                return True
            waiter = _Waiter(loop)
            self._waiters.append(waiter)

        try:
            await waiter.future
        except asyncio.CancelledError:
            with self._mutex:
                granted = waiter.granted
                if not granted:
                    self._waiters.remove(waiter)
            if granted:
                self.release()
            raise
        return True

    def release(self) -> None:
        with self._mutex:
            if not self._held:
                raise RuntimeError("Lock is not acquired")
            while self._waiters:
                waiter = self._waiters.popleft()
                waiter.granted = True
                try:
                    waiter.loop.call_soon_threadsafe(_wake, waiter.future)
                except RuntimeError:
                    # Waiter's loop is closed; hand over to the next one.
                    logger.warning("Dropping lock waiter from a closed event loop")
                    continue
                return
            self._held = False

    async def __aenter__(self) -> None:
        await self.acquire()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.release()


class KeyLockArena:
    """
    Arena of locks keyed by identity.

    Locks are created lazily and dropped once no coroutine holds or
    waits on them, so the arena does not grow with every key ever seen.
    """

    def __init__(self):
        """Initialize the arena."""
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, ThreadSafeAsyncLock] = {}
        self._users: Dict[Hashable, int] = {}

    @contextlib.asynccontextmanager
    async def hold(self, identity: Hashable) -> AsyncIterator[None]:
        """
        Hold the lock for ``identity`` for the duration of the block.

        Args:
            identity: Key identity (e.g. key code)
        """
        with self._guard:
            lock = self._locks.get(identity)
            if lock is None:
                lock = ThreadSafeAsyncLock()
                self._locks[identity] = lock
            self._users[identity] = self._users.get(identity, 0) + 1
        try:
            async with lock:
                yield
        finally:
            with self._guard:
                self._users[identity] -= 1
                if self._users[identity] == 0:
                    del self._users[identity]
                    del self._locks[identity]

    def __len__(self) -> int:
        return len(self._locks)

    def is_locked(self, identity: Hashable) -> bool:
        lock = self._locks.get(identity)
        return lock is not None and lock.locked()
