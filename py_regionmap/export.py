"""
PNG image sink for generated region maps.

The generation core only produces a colour buffer; this module is the
reference consumer that writes it to disk.
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import matplotlib.pyplot as plt
import numpy as np
import structlog

from .config import settings

logger = structlog.get_logger()

_UNSAFE_CHARS = re.compile(r"[^\w.@-]")


def clean_filename(text: str) -> str:
    """Strip everything except word characters, '.', '@' and '-'."""
    return _UNSAFE_CHARS.sub("", text)


def timestamped_path(directory: Optional[Union[str, Path]] = None,
                     now: Optional[datetime] = None) -> Path:
    """Path of the form ``<directory>/VoronoiGen-<timestamp>.png``."""
    directory = Path(directory or settings.output_dir)
    stamp = clean_filename(str(now or datetime.now()))
    return directory / f"VoronoiGen-{stamp}.png"


def save_png(buffer: np.ndarray, path: Union[str, Path]) -> Path:
    """
    Write an RGBA buffer as a PNG.

    Row 0 of the buffer is written as the bottom of the image, matching
    texture coordinates where y grows upwards.

    Args:
        buffer: float ``(height, width, 4)`` array with channels in [0, 1]
        path: Destination file; parent directories are created

    Returns:
        The written path
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    plt.imsave(path, np.clip(buffer, 0.0, 1.0), origin="lower", format="png")
    logger.info("Region map saved", path=str(path),
                kilobytes=path.stat().st_size // 1024)
    return path
