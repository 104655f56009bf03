import json
import logging
import time
from typing import Any, Dict, Optional

LOGGER_NAME = "port_sniffer"


def setup_logging(verbosity: int = 0, log_file: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)

    if verbosity >= 2:
        stream_level = logging.DEBUG
    elif verbosity == 1:
        stream_level = logging.INFO
    else:
        stream_level = logging.WARNING

    # Prevent duplicate handlers on repeated setup
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")

    sh = logging.StreamHandler()
    sh.setLevel(stream_level)
    sh.setFormatter(formatter)
    logger.addHandler(sh)

    file_level = min(stream_level, logging.INFO)
    if log_file:
        fh = logging.FileHandler(log_file)
        fh.setLevel(file_level)
        fh.setFormatter(formatter)
        logger.addHandler(fh)

    logger.setLevel(file_level if log_file else stream_level)
    return logger


def now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime())


def log_event(logger: logging.Logger, event: str, fields: Dict[str, Any]) -> None:
    payload = {"ts": now_iso(), "event": event, **fields}
    logger.info(json.dumps(payload, ensure_ascii=False))
