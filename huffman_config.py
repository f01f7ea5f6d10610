# filename: huffman_config.py

import os
import sys
from dataclasses import dataclass

from dotenv import load_dotenv
from loguru import logger

TRUTHY = {"1", "true", "yes", "on"}

CODEC_MODULES = ("huffman_core", "huffman_service")


def _env_flag(name, default):
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in TRUTHY


@dataclass(frozen=True)
class HuffmanConfig:
    # Raise on symbols missing from the code table instead of skipping them
    strict_encoding: bool = True
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls):
        """Read settings from the environment, after loading a ``.env`` file if present."""
        load_dotenv()
        return cls(
            strict_encoding=_env_flag("HUFFMAN_STRICT_ENCODING", cls.strict_encoding),
            log_level=(os.getenv("HUFFMAN_LOG_LEVEL") or cls.log_level).upper(),
        )


def configure_logging(config):
    """Replace loguru sinks with one stderr sink and turn on the codec modules' records."""
    for name in CODEC_MODULES:
        logger.enable(name)
    logger.remove()
    return logger.add(sys.stderr, level=config.log_level)
