from __future__ import annotations

from feedsync.ui.cli import run

run()
