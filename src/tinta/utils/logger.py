"""Logger namespacing for Tinta.

Every module logs under ``tinta.<module>`` and only at debug level: the
converter recovers from stray close tags, unclosed spans and undecodable
entities without raising, and engines fall back to auto-detection quietly.
Applications that want to see those recoveries enable the ``tinta`` logger.

    >>> import logging
    >>> logging.getLogger("tinta").setLevel(logging.DEBUG)
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` under the ``tinta`` namespace.

    Names already inside the namespace (``__name__`` of a tinta module) are
    used unchanged. The library never attaches handlers.
    """
    if not (name == "tinta" or name.startswith("tinta.")):
        name = f"tinta.{name}"
    return logging.getLogger(name)
