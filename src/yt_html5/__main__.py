"""Allow ``python -m yt_html5`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m yt_html5`` behaves identically to the ``yt-html5``
console script.
"""

from __future__ import annotations

from yt_html5.cli.app import cli

if __name__ == "__main__":
    cli()
