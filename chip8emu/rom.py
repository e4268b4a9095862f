import logging
from pathlib import Path

from .config import MAX_PROGRAM_SIZE
from .errors import ProgramTooLarge

logger = logging.getLogger(__name__)


def read_rom(path):
    """Read a raw, headerless ROM image and check it fits above 0x200."""
    path = Path(path)
    logger.info("Loading ROM: %s", path)
    with open(path, "rb") as f:
        data = f.read()
    if len(data) > MAX_PROGRAM_SIZE:
        raise ProgramTooLarge(len(data), MAX_PROGRAM_SIZE)
    return data
