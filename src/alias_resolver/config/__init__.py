"""Application configuration"""

import logging
from dotenv import load_dotenv

from .loader import load_raw_config
from .storage import Storage

load_dotenv()

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(format=LOG_FORMAT, datefmt=DATE_FORMAT, level=logging.INFO)

_RAW_CONFIG = load_raw_config()

storage = Storage(_RAW_CONFIG)


class Config:
    storage = storage


__all__ = ["storage", "Config", "load_raw_config", "LOG_FORMAT", "DATE_FORMAT"]
