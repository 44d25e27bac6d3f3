from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from wirebind.exceptions import WireBindOperationCancelledError

if TYPE_CHECKING:
    from typing_extensions import Self


class CancellationToken:
    """Carry an advisory, cooperative cancellation request.

    The token is handed verbatim to callables whose invocation shape declares a
    ``CancellationToken`` parameter. Nothing is interrupted when the token is
    cancelled: the callable decides when to check ``is_cancelled`` or call
    ``raise_if_cancelled``.

    Cancellation is one-way and thread-safe, so a token may be cancelled from
    another thread while an async callable polls it on the event loop.

    Examples:
        .. code-block:: python

            token = CancellationToken()


            async def work(token: CancellationToken) -> None:
                token.raise_if_cancelled()


            token.cancel()
            await invoker.invoke(work, cancellation=token)

    """

    __slots__ = ("_event",)

    def __init__(self) -> None:
        self._event = threading.Event()

    @classmethod
    def cancelled(cls) -> Self:
        """Return a token that is already cancelled."""
        token = cls()
        token.cancel()
        return token

    @property
    def is_cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation. Calling it again has no effect."""
        self._event.set()

    def raise_if_cancelled(self) -> None:
        """Raise when cancellation has been requested.

        Raises:
            WireBindOperationCancelledError: If ``cancel`` was called.

        """
        if self._event.is_set():
            msg = "The operation was cancelled."
            raise WireBindOperationCancelledError(msg)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(is_cancelled={self.is_cancelled})"
