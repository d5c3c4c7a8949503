"""lockwatch: harvest GitHub issues locked as too heated.

The package discovers repositories with issues locked for heated discussion,
enriches them with comments and reports commit activity around toxic
comments. See :mod:`lockwatch.harvest` for the engine and
:mod:`lockwatch.cli` for the command line.
"""

from __future__ import annotations

__version__ = "0.1.0"
