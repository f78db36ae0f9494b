"""Rich spinner driven by the loader's ``api.before`` / ``api.after`` actions.

This module bridges the hook system with a Rich status spinner.  It is
used by the CLI layer only — the core never renders anything.

Design
------
* :meth:`RichStatusHooks.attach` registers instance-scope actions.
* ``api.before`` starts the spinner; ``api.success``, ``api.failure``
  and ``api.after`` stop it, so nothing spins over an interactive prompt.
* Shutdown-safe: stopping an idle spinner is a no-op.
"""

from __future__ import annotations

from typing import Any

from yt_html5.cli.console import get_rich_console
from yt_html5.core.hooks import Hooks


class RichStatusHooks:
    """Show a spinner while a target's request is in flight.

    Usage::

        status = RichStatusHooks()
        status.attach(loader.hooks)
        loader.load_single(target)
    """

    def __init__(self, message: str = "Fetching stream data…") -> None:
        self._message = message
        self._status: Any = None
        self._console: Any = None

    def attach(self, hooks: Hooks, priority: int = 0) -> None:
        """Register the start/stop actions on *hooks*.

        Raises
        ------
        EnvironmentError
            If Rich is not installed.
        """
        self._console = get_rich_console()
        hooks.add_action("api.before", self.start, priority)
        for name in ("api.success", "api.failure", "api.after"):
            hooks.add_action(name, self.stop, priority)

    @property
    def active(self) -> bool:
        return self._status is not None

    # ------------------------------------------------------------------
    # Action callbacks
    # ------------------------------------------------------------------

    def start(self, *_args: object) -> None:
        if self._status is None:
            if self._console is None:
                self._console = get_rich_console()
            self._status = self._console.status(f"[bold blue]{self._message}")
            self._status.start()

    def stop(self, *_args: object) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None
