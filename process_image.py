import json
import logging
from pathlib import Path
from typing import Optional

import numpy as np
import cv2

from constants import (
    CANNY_HIGH_THRESHOLD,
    CANNY_LOW_THRESHOLD,
    EDGES_FILENAME,
    GRAY_FILENAME,
    METADATA_FILENAME,
    RESIZED_FILENAME,
)


logger = logging.getLogger(__name__)


class ImageLoadError(Exception):
    pass


class ImageWriteError(OSError):
    pass


def load_image(filename: Path) -> np.ndarray:
    """
    Decode `filename` as a 3-channel BGR image. `cv2.imread` returns `None`
    instead of raising on unreadable files.
    """

    image = cv2.imread(str(filename), cv2.IMREAD_COLOR)
    if image is None or image.size == 0:
        raise ImageLoadError(f'Could not load image {filename.name}')
    return image


def write_image(path: Path, image: np.ndarray) -> Path:
    if not cv2.imwrite(str(path), image):
        raise ImageWriteError(f'Could not write {path}')
    return path


def half_size(width: int, height: int):
    return width // 2, height // 2


def build_metadata(filename: Path, size_bytes: int, width: int, height: int,
                   gray_path: Path, resized_path: Path, edges_path: Path):
    return {
        'OriginalFile': str(filename.absolute()),
        'SizeBytes': size_bytes,
        'Dimensions': {'Width': width, 'Height': height},
        'Outputs': {
            'Grayscale': str(gray_path),
            'Resized': str(resized_path),
            'Edges': str(edges_path),
        },
    }


def save_metadata(metadata: dict, output_dir: Path) -> Path:
    metadata_path = output_dir / METADATA_FILENAME
    with open(metadata_path, 'w', encoding='utf-8') as f:
        json.dump(metadata, f, indent=2)
    logger.info('Metadata saved: %s', metadata_path)
    return metadata_path


def transform_image(filename: Path, output_root: Path) -> dict:
    """
    Derive grayscale, half-size and edge images from `filename` and write them,
    along with `metadata.json`, to `output_root/<stem>/`. Nothing is written if
    the image can't be decoded. Existing outputs for the same stem are
    overwritten.
    """

    size_bytes = filename.stat().st_size
    logger.info('Processing: %s (%d bytes)', filename.name, size_bytes)

    image = load_image(filename)
    height, width = image.shape[:2]

    output_dir = output_root / filename.stem
    output_dir.mkdir(parents=True, exist_ok=True)

    gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    gray_path = write_image(output_dir / GRAY_FILENAME, gray)

    resized = cv2.resize(image, half_size(width, height))
    resized_path = write_image(output_dir / RESIZED_FILENAME, resized)

    edges = cv2.Canny(gray, CANNY_LOW_THRESHOLD, CANNY_HIGH_THRESHOLD)
    edges_path = write_image(output_dir / EDGES_FILENAME, edges)

    metadata = build_metadata(
        filename,
        size_bytes=size_bytes,
        width=width,
        height=height,
        gray_path=gray_path,
        resized_path=resized_path,
        edges_path=edges_path,
    )
    save_metadata(metadata, output_dir)
    return metadata


def process_image(filename: Path, output_root: Path) -> Optional[dict]:
    """
    Per-file boundary used by the watcher. Failures are logged and never
    propagate; returns the metadata on success and `None` otherwise.
    """

    filename = Path(filename)
    try:
        return transform_image(filename, Path(output_root))
    except ImageLoadError:
        logger.error('Error: Could not load image %s', filename.name)
    except Exception as e:
        logger.error('Error processing image %s: %s', filename.name, e)
    return None
