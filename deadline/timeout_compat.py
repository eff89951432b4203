"""
Watchdog timeout compatibility layer.

Provides a hard (cancelling) timeout context manager with the same API across Python versions.
Used to put an upper bound on whole operations, as opposed to the cooperative polling in ``poller``.
"""

import sys

if sys.version_info >= (3, 11):
    from asyncio import timeout as _timeout

    class watchdog:
        """Timeout context manager compatible with async_timeout API."""

        def __init__(self, delay):
            self._timeout = _timeout(delay)
            self._cm = None

        async def __aenter__(self):
            self._cm = await self._timeout.__aenter__()
            return self

        async def __aexit__(self, exc_type, exc, tb):
            return await self._timeout.__aexit__(exc_type, exc, tb)

        @property
        def expired(self):
            """Check if the watchdog fired - consistent with async_timeout API."""
            return self._cm is not None and self._cm.expired()

else:
    from async_timeout import timeout as watchdog

__all__ = ["watchdog"]
