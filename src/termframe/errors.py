"""Error taxonomy for the runtime.

Only two classes are *recoverable* from the frame loop's point of view:
``ComponentRenderError`` and ``InitializationError``.  Anything else that
reaches the outermost loop boundary is wrapped in ``FatalError`` and stops
the loop.
"""

from __future__ import annotations


class TermframeError(Exception):
    """Base class for every error raised by the runtime."""


class ComponentRenderError(TermframeError):
    """A single node's paint step failed; the node is skipped for the frame."""

    def __init__(self, node: object, cause: BaseException) -> None:
        self.node = node
        self.cause = cause
        super().__init__(f"Failed to render {node!r}: {cause}")


class InitializationError(TermframeError):
    """A screen's ``init`` hook raised while it was being pushed."""

    def __init__(self, screen: object, cause: BaseException) -> None:
        self.screen = screen
        self.cause = cause
        super().__init__(f"Failed to initialise {screen!r}: {cause}")


class DispatchError(TermframeError):
    """An action handler failed.

    Never raised out of ``Store.dispatch``; only used to format the error
    carried by a failed ``DispatchResult``.
    """

    def __init__(self, action: str, cause: BaseException) -> None:
        self.action = action
        self.cause = cause
        super().__init__(f"Action {action!r} failed: {cause}")


class FatalError(TermframeError):
    """An unclassified exception caught at the frame-loop boundary."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Fatal error: {cause!r}")


RECOVERABLE_ERRORS = (ComponentRenderError, InitializationError)
