from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_LEVEL_ENV = "LOANSCOPE_LOG_LEVEL"

# Third-party loggers that flood DEBUG output while figures are rendered.
QUIET_LOGGERS = ("matplotlib", "PIL")


def configure_logging(level: str | None = None) -> None:
    resolved = (level or os.getenv(LOG_LEVEL_ENV) or "INFO").upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
