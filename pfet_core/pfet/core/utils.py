import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

from pfet.core.config import settings

Number = Union[Decimal, int, float, str]

WHOLE_SHILLING = Decimal("1")

def mkdir_safe(path: str):
    Path(path).mkdir(parents=True, exist_ok=True)

def setup_logging(name: str = None, *, log_level: str = None):
    # no name configures the app logger that every module logger propagates to
    logger_name = f"{settings.APP_NAME}.{name}" if name else settings.APP_NAME
    logger = logging.getLogger(logger_name)
    if logger.handlers:
        return logger
    level = log_level or getattr(settings, "LOG_LEVEL", "INFO")
    logger.setLevel(getattr(logging, level))
    log_dir = getattr(settings, "LOG_PATH", "./data/logs")
    mkdir_safe(log_dir)
    logfile = Path(log_dir) / f"{name or settings.APP_NAME.lower()}.log"
    handler = RotatingFileHandler(str(logfile), maxBytes=10_000_000, backupCount=5)
    formatter = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    if os.getenv("DEV", "").lower() in ("1","true","yes"):
        ch = logging.StreamHandler()
        ch.setFormatter(formatter)
        logger.addHandler(ch)
    logger.propagate = False
    return logger

def get_logger(module: str) -> logging.Logger:
    """Child of the app logger, e.g. ``PFET.loans.ledger``."""
    return logging.getLogger(f"{settings.APP_NAME}.{module}")

def to_decimal(value: Number) -> Decimal:
    # floats go through str() so 0.1 stays 0.1
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))

def round_shillings(value: Decimal) -> Decimal:
    """Round half-up to a whole shilling."""
    return value.quantize(WHOLE_SHILLING, rounding=ROUND_HALF_UP)

def as_date(value: Union[date, datetime, None]) -> date:
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    return value

def decimal_sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, Decimal("0"))
