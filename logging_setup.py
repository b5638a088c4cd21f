# ===============================================================
# logging_setup.py
# ===============================================================
import logging
import os
import sys

# ------------------------------------------------
# Environment & log level
# ------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
numeric_level = getattr(logging, LOG_LEVEL, logging.INFO)

# ------------------------------------------------
# Configure the application logger
# ------------------------------------------------
formatter = logging.Formatter(
    "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    "%Y-%m-%d %H:%M:%S",
)
handler = logging.StreamHandler(sys.stdout)
handler.setFormatter(formatter)

logger = logging.getLogger("SportsTrivia")
logger.setLevel(numeric_level)
if not logger.handlers:
    logger.addHandler(handler)
