import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"

logger = logging.getLogger("auggie-mcp")


def configure_logging(level: str = "INFO") -> None:
    # stdout carries the MCP transport, so every handler writes to stderr
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
