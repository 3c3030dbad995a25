"""
AI plugin presence scan.

Looks through an editor extensions directory for known AI coding assistants.
Independent of the snapshot engine; runs on its own interval.
"""
import asyncio
import json
import re
from pathlib import Path
from typing import Callable, List, Optional

from pastewatch.logging import logger

KNOWN_AI_EXTENSIONS = frozenset({
    # GitHub Copilot
    "github.copilot",
    "github.copilot-chat",
    "microsoft.github-copilot-labs",
    # Claude
    "saoudrizwan.claude-dev",
    "anthropic.claude-3-vscode",
    # Coding assistants
    "tabnine.tabnine-vscode",
    "codeium.codeium",
    "cursor.cursor-vscode",
    "continue.continue",
    "sourcegraph.cody-ai",
    # Cloud vendors
    "amazonwebservices.aws-toolkit-vscode",
    "amazon.q-developer",
    "visualstudioexptteam.vscodeintellicode",
    "google.duet-ai",
    # Others
    "windsurf.windsurf-cascade",
    "openai.openai-vscode",
    "meta.code-llama",
    "kite.kite",
    "deepcode.deepcode",
    "intellij.ai-assistant",
    "stability.stablecode",
    "cohere.cohere-vscode",
    "ai-toolkit.ai-toolkit",
    "blackbox.blackbox-ai",
})

_VERSION_SUFFIX = re.compile(r"-\d+(\.\d+)*([-.][\w.-]+)?$")


def extension_id(extension_dir: Path) -> str:
    """Return ``publisher.name`` for an installed extension directory."""
    manifest = extension_dir / "package.json"
    if manifest.is_file():
        try:
            with open(manifest, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.debug(f"Unreadable manifest {manifest}: {e}")
        else:
            if isinstance(data, dict):
                publisher = data.get("publisher")
                name = data.get("name")
                if publisher and name:
                    return f"{publisher}.{name}".lower()
    return _VERSION_SUFFIX.sub("", extension_dir.name).lower()


def scan_extensions(extensions_dir: Path, known: frozenset = KNOWN_AI_EXTENSIONS) -> List[str]:
    """Return the sorted ids of known AI extensions installed under ``extensions_dir``."""
    extensions_dir = Path(extensions_dir)
    if not extensions_dir.is_dir():
        return []

    found = set()
    for entry in extensions_dir.iterdir():
        if not entry.is_dir():
            continue
        ext_id = extension_id(entry)
        if ext_id in known:
            found.add(ext_id)

    detected = sorted(found)
    for ext_id in detected:
        logger.info(f"Detected AI extension: {ext_id}")
    return detected


class PluginScanTask:
    """Runs scan_extensions now and then every ``interval_ms`` until stopped."""

    def __init__(
        self,
        extensions_dir: Path,
        interval_ms: int = 300000,
        on_result: Optional[Callable[[List[str]], None]] = None,
    ):
        self.extensions_dir = Path(extensions_dir)
        self.interval_ms = interval_ms
        self.on_result = on_result
        self.detected: List[str] = []
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.running:
            logger.warning("AI plugin scan already running, skipping start.")
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"AI plugin scan started, interval {self.interval_ms / 1000:.0f}s")

    def stop(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.info("AI plugin scan stopped")

    async def scan_once(self) -> List[str]:
        self.detected = await asyncio.to_thread(scan_extensions, self.extensions_dir)
        if self.detected:
            logger.warning(f"{len(self.detected)} AI coding extensions installed: {', '.join(self.detected)}")
        if self.on_result:
            self.on_result(self.detected)
        return self.detected

    async def _run(self):
        while True:
            try:
                await self.scan_once()
            except Exception as e:
                logger.exception(f"AI plugin scan failed: {e}")
            await asyncio.sleep(self.interval_ms / 1000)
