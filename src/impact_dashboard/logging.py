from __future__ import annotations

import logging


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
# Third-party loggers that flood DEBUG output while plotting or fetching.
QUIET_LOGGERS = ("matplotlib", "PIL", "urllib3")


def configure_logging(level: str = "INFO") -> None:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger("impact_dashboard").setLevel(resolved)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
