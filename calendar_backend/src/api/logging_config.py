from __future__ import annotations

import logging

_INITIALIZED = False


# PUBLIC_INTERFACE
def configure_logging(level: str = "INFO") -> None:
    """Configure application-wide console logging once per process."""

    global _INITIALIZED
    if _INITIALIZED:
        return

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.addHandler(console_handler)

    _INITIALIZED = True
    logging.getLogger(__name__).debug("Logging configured at level %s", level)


__all__ = ["configure_logging"]
