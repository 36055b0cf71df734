"""flashsum: timed mental-arithmetic (flash addition) drills.

The session engine lives in ``flashsum.session``; ``flashsum.app`` wires it to
an event bus, a command facade and the terminal front end.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
