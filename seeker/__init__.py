"""Public package surface for seeker.

Exports ``main`` for programmatic CLI invocation.
The navigation core lives in ``seeker.access``, ``seeker.groups``,
``seeker.listing``, ``seeker.search`` and ``seeker.session``.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
