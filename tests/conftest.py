import json
import time
from pathlib import Path

import numpy as np
import cv2
import pytest


def write_bitmap(path: Path, width: int, height: int) -> Path:
    # Gradient background with a filled square so Canny has edges to find
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :, 0] = np.linspace(0, 255, width, dtype=np.uint8)[None, :]
    image[:, :, 1] = np.linspace(0, 255, height, dtype=np.uint8)[:, None]
    cv2.rectangle(
        image,
        (width // 4, height // 4),
        (3 * width // 4, 3 * height // 4),
        (255, 255, 255),
        -1,
    )
    assert cv2.imwrite(str(path), image)
    return path


@pytest.fixture
def input_dir(tmp_path):
    path = tmp_path / 'Input'
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path):
    path = tmp_path / 'Output'
    path.mkdir()
    return path


@pytest.fixture
def staging_dir(tmp_path):
    """Somewhere outside the watched directory to build files before moving
    them in, so the watcher never sees a half-written file."""
    path = tmp_path / 'staging'
    path.mkdir()
    return path


@pytest.fixture
def bitmap():
    return write_bitmap


def read_metadata(path: Path):
    try:
        return json.loads(path.read_text(encoding='utf-8'))
    except (OSError, ValueError):
        return None


@pytest.fixture
def wait_for():
    def wait(predicate, timeout=10.0, interval=0.05):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            result = predicate()
            if result:
                return result
            time.sleep(interval)
        pytest.fail(f'Timed out after {timeout}s waiting for {predicate}')
    return wait


@pytest.fixture
def metadata_ready(wait_for):
    """Block until `<output>/<stem>/metadata.json` exists and parses."""
    def wait(output: Path, stem: str):
        return wait_for(lambda: read_metadata(output / stem / 'metadata.json'))
    return wait
