"""
Polling save-event source.

Walks the monitored tree every ``interval`` seconds and turns modified text
files into documents for Tracker.handle_save.
"""
import asyncio
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

from pastewatch.documents import LANGUAGE_IDS, FileDocument
from pastewatch.logging import logger

SOURCE_EXTENSIONS: Set[str] = set(LANGUAGE_IDS)

# Directories to skip
SKIP_DIRS: Set[str] = {
    'venv', 'env', '.venv', 'node_modules', '__pycache__',
    '.git', '.svn', '.hg', 'dist', 'build', '.tox', '.pytest_cache',
    '.mypy_cache', '.ruff_cache', 'eggs', '.eggs',
}

FileState = Tuple[int, int]


class PollingWatcher:
    def __init__(
        self,
        root: Path,
        interval: float = 1.0,
        extensions: Optional[Iterable[str]] = None,
        skip_dirs: Optional[Iterable[str]] = None,
        max_files: int = 5000,
    ):
        self.root = Path(root).absolute()
        self.interval = interval
        self.extensions = set(extensions) if extensions is not None else SOURCE_EXTENSIONS
        self.skip_dirs = set(skip_dirs) if skip_dirs is not None else SKIP_DIRS
        self.max_files = max_files
        self._states: Optional[Dict[Path, FileState]] = None

    def _capture(self) -> Dict[Path, FileState]:
        states = {}
        for path in self.root.rglob("*"):
            if len(states) >= self.max_files:
                logger.warning(f"More than {self.max_files} files under {self.root}, watching the first ones only")
                break
            if path.suffix.lower() not in self.extensions:
                continue
            rel_parts = path.relative_to(self.root).parts[:-1]
            if any(part in self.skip_dirs or part.startswith('.') for part in rel_parts):
                continue
            try:
                if not path.is_file():
                    continue
                st = path.stat()
            except OSError:
                continue
            states[path] = (st.st_mtime_ns, st.st_size)
        return states

    def poll(self) -> List[Path]:
        """
        Return files changed since the previous poll.

        The first call only records a baseline and returns nothing.
        """
        current = self._capture()
        previous = self._states
        self._states = current
        if previous is None:
            return []
        return sorted(path for path, state in current.items() if previous.get(path) != state)

    async def run(self, tracker, stop: asyncio.Event):
        """Feed changed files into ``tracker`` until ``stop`` is set."""
        pending: Set[asyncio.Task] = set()
        logger.info(f"Watching {self.root} every {self.interval}s")
        while not stop.is_set():
            changed = await asyncio.to_thread(self.poll)
            for path in changed:
                try:
                    document = await asyncio.to_thread(FileDocument, path)
                except OSError as e:
                    logger.warning(f"Could not read {path}: {e}")
                    continue
                task = asyncio.create_task(tracker.handle_save(document))
                pending.add(task)
                task.add_done_callback(pending.discard)
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass
        if pending:
            await asyncio.gather(*pending)
