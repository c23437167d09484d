"""
Optimistic mutations: change local state now, confirm with the server later.
"""
import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from InventoryConsole.core.client.utils.exceptions import ServerRejectionError
from InventoryConsole.core.logging import get_logger
from .notices import NoticeSink, failure_notice, success_notice

logger = get_logger(__name__)

R = TypeVar("R")

Undo = Callable[[], None]


@dataclass
class MutationOutcome(Generic[R]):
    """Result of one optimistic mutation once the server has answered."""
    ok: bool
    result: Optional[R] = None
    error: Optional[BaseException] = None
    discarded: bool = False

    @property
    def rolled_back(self) -> bool:
        return not self.ok and not self.discarded


def describe_failure(error: BaseException, fallback: str) -> str:
    """Server-provided message when there is one, else ``fallback``."""
    if isinstance(error, ServerRejectionError) and error.server_message:
        return error.server_message
    return fallback


class OptimisticMutator:
    """
    Applies a local change synchronously, then runs the remote call.

    ``apply`` must be called from inside the running event loop. The local
    change callable returns an undo that restores whatever it touched; the
    undo runs if the remote call fails. When ``is_alive`` reports that the
    owning store was torn down, late results are dropped without touching
    the store.
    """

    def __init__(
        self,
        name: str,
        notify: Optional[NoticeSink] = None,
        is_alive: Callable[[], bool] = lambda: True,
    ):
        self._name = name
        self._notify = notify
        self._is_alive = is_alive

    def apply(
        self,
        local_change: Callable[[], Undo],
        remote_call: Callable[[], Awaitable[R]],
        reconcile: Optional[Callable[[R], None]] = None,
        failure_message: str = "Request failed. Please try again.",
        success_message: Optional[str] = None,
    ) -> "asyncio.Task[MutationOutcome[R]]":
        """
        Apply ``local_change`` now and schedule ``remote_call``.

        Returns the task that resolves to the ``MutationOutcome``. The task
        never raises for a failed remote call.
        """
        loop = asyncio.get_running_loop()
        undo = local_change()
        return loop.create_task(
            self._dispatch(undo, remote_call, reconcile, failure_message, success_message)
        )

    async def _dispatch(
        self,
        undo: Undo,
        remote_call: Callable[[], Awaitable[R]],
        reconcile: Optional[Callable[[R], None]],
        failure_message: str,
        success_message: Optional[str],
    ) -> MutationOutcome[R]:
        try:
            result = await remote_call()
        except asyncio.CancelledError:
            if self._is_alive():
                undo()
            raise
        except Exception as exc:
            if not self._is_alive():
                logger.debug("%s failed after teardown; ignoring: %s", self._name, exc)
                return MutationOutcome(ok=False, error=exc, discarded=True)
            logger.warning("%s failed, rolling back: %s", self._name, exc)
            undo()
            self._publish(failure_notice(describe_failure(exc, failure_message), self._name))
            return MutationOutcome(ok=False, error=exc)

        if not self._is_alive():
            logger.debug("%s resolved after teardown; ignoring", self._name)
            return MutationOutcome(ok=True, result=result, discarded=True)

        if reconcile is not None:
            reconcile(result)
        if success_message:
            self._publish(success_notice(success_message, self._name))
        return MutationOutcome(ok=True, result=result)

    def _publish(self, notice) -> None:
        if self._notify is not None:
            self._notify(notice)
