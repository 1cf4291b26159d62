import logging
import sys

LOG_FORMAT = "[%(asctime)s] [MONITOR] %(levelname)s - %(message)s"

def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configura el logger raíz del monitor (stdout)."""
    lvl = logging.getLevelName(str(level).upper())
    if not isinstance(lvl, int):
        lvl = logging.INFO
    logging.basicConfig(
        level=lvl,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logger = logging.getLogger("monitor")
    logger.info(f"logging inicializado (level={logging.getLevelName(lvl)})")
    return logger
