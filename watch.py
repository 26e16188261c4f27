"""
Watch a directory for new bitmaps and hand each one to `process_image` on a
worker thread. Only creation events directly inside the watched directory count;
the observer is scheduled non-recursively.
"""

import logging
import os
import signal
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Union

from watchdog.observers import Observer
from watchdog.events import FileSystemEvent, FileSystemEventHandler

from constants import KEEP_ALIVE_INTERVAL, LOG_LEVEL, MAX_WORKERS, \
    WATCH_SUFFIX
from process_image import process_image


logger = logging.getLogger(__name__)


def is_bitmap(path: Path) -> bool:
    return path.suffix.lower() == WATCH_SUFFIX


class EventHandler(FileSystemEventHandler):
    def __init__(self, output_dir: Path, executor: Executor):
        super().__init__()
        self.output_dir = output_dir
        self.executor = executor

    def on_created(self, event: FileSystemEvent):
        if event.is_directory:
            return
        path = Path(os.fsdecode(event.src_path))
        if not is_bitmap(path):
            return

        # Fire and forget, the outcome is only ever reported through logging
        self.executor.submit(process_image, path, self.output_dir)


class WatchService:
    """
    Owns the observer and the worker pool. `run` blocks until `stop` is called
    (from a signal handler or another thread) or the observer dies.
    """

    def __init__(self, input_dir: Union[str, Path], output_dir: Union[str, Path],
                 max_workers: Optional[int] = MAX_WORKERS):
        self.input_dir = Path(input_dir)
        self.output_dir = Path(output_dir)
        self.max_workers = max_workers
        self._stopping = threading.Event()
        self._observer = None
        self._executor = None

    def start(self):
        self.input_dir.mkdir(parents=True, exist_ok=True)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix='process-image',
        )
        self._observer = Observer()
        self._observer.schedule(
            EventHandler(self.output_dir, self._executor),
            str(self.input_dir),
            recursive=False,
        )
        self._observer.start()
        logger.info('Image Processor Service is starting... (watching %s, '
                    'writing to %s)', self.input_dir, self.output_dir)

    def stop(self):
        self._stopping.set()

    def wait(self):
        try:
            while not self._stopping.wait(KEEP_ALIVE_INTERVAL):
                if not self._observer.is_alive():
                    logger.error('Observer thread died, shutting down')
                    break
        finally:
            self._shutdown()

    def run(self):
        self.start()
        self.wait()

    def _shutdown(self):
        self._observer.stop()
        self._observer.join()
        # In-flight tasks are left to finish on their own
        self._executor.shutdown(wait=False)
        logger.info('Image Processor Service is stopping...')


def setup_watch(input_dir: Union[str, Path], output_dir: Union[str, Path]):
    logging.basicConfig(level=LOG_LEVEL,
                        format='%(asctime)s - %(message)s',
                        datefmt='%Y-%m-%d %H:%M:%S')
    service = WatchService(input_dir, output_dir)
    previous = signal.signal(signal.SIGTERM,
                             lambda signum, frame: service.stop())
    try:
        service.run()
    except KeyboardInterrupt:
        pass
    finally:
        signal.signal(signal.SIGTERM,
                      signal.SIG_DFL if previous is None else previous)
