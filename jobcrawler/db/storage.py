"""
Persistence services injected into the crawl controller.

- RecordSink: append-only destination for job records
- SideChannelStore: key-value store for screenshots, failed-request
  snapshots and run statistics

File-backed implementations write under out/ (JSON Lines for records, one
file per key for the store). In-memory implementations back tests and
embedding applications that collect results themselves.
"""

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from jobcrawler.core.logging import get_logger

logger = get_logger(__name__)

JSON_CONTENT_TYPE = "application/json"

_EXTENSIONS = {
    JSON_CONTENT_TYPE: ".json",
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "text/html": ".html",
    "text/plain": ".txt",
}


@runtime_checkable
class RecordSink(Protocol):
    async def push(self, record: Dict[str, Any]) -> None:
        ...


@runtime_checkable
class SideChannelStore(Protocol):
    async def set_value(self, key: str, value: Any, content_type: str = JSON_CONTENT_TYPE) -> None:
        ...

    async def get_value(self, key: str) -> Any:
        ...


def safe_key(key: str) -> str:
    """
    Restrict a store key to filename-safe characters.

    Example:
        >>> safe_key("failed-url-1700000000000/../x")
        'failed-url-1700000000000_.._x'
    """
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", key).strip("_")
    if not cleaned:
        raise ValueError(f"Invalid store key: {key!r}")
    return cleaned


class DatasetSink:
    """Appends each record as one JSON line to out/datasets/<name>.jsonl."""

    def __init__(self, base_dir: Path = Path("out"), name: str = "jobs"):
        self.path = Path(base_dir) / "datasets" / f"{name}.jsonl"
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.count = 0

    async def push(self, record: Dict[str, Any]) -> None:
        line = json.dumps(record, ensure_ascii=False, default=str)
        with self.path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")
        self.count += 1

    def read_all(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        return [
            json.loads(line)
            for line in self.path.read_text("utf-8").splitlines()
            if line.strip()
        ]


class KeyValueStore:
    """Stores each key as its own file under out/key_value/."""

    def __init__(self, base_dir: Path = Path("out")):
        self.root = Path(base_dir) / "key_value"
        self.root.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str, content_type: str) -> Path:
        return self.root / f"{safe_key(key)}{_EXTENSIONS.get(content_type, '.bin')}"

    async def set_value(self, key: str, value: Any, content_type: str = JSON_CONTENT_TYPE) -> None:
        path = self._path_for(key, content_type)
        if content_type == JSON_CONTENT_TYPE:
            path.write_text(json.dumps(value, ensure_ascii=False, indent=2, default=str), "utf-8")
        elif isinstance(value, (bytes, bytearray)):
            path.write_bytes(bytes(value))
        else:
            path.write_text(str(value), "utf-8")
        logger.debug(f"[store] saved {path.name}")

    async def get_value(self, key: str) -> Any:
        matches = sorted(self.root.glob(f"{safe_key(key)}.*"))
        if not matches:
            return None
        path = matches[0]
        if path.suffix == ".json":
            return json.loads(path.read_text("utf-8"))
        if path.suffix in (".txt", ".html"):
            return path.read_text("utf-8")
        return path.read_bytes()


class MemoryRecordSink:
    """Keeps pushed records in a list."""

    def __init__(self):
        self.records: List[Dict[str, Any]] = []

    async def push(self, record: Dict[str, Any]) -> None:
        self.records.append(record)


class MemoryKeyValueStore:
    """Keeps values (and their content types) in a dict."""

    def __init__(self):
        self.values: Dict[str, Any] = {}
        self.content_types: Dict[str, str] = {}

    async def set_value(self, key: str, value: Any, content_type: str = JSON_CONTENT_TYPE) -> None:
        self.values[key] = value
        self.content_types[key] = content_type

    async def get_value(self, key: str) -> Optional[Any]:
        return self.values.get(key)

    def keys_with_prefix(self, prefix: str) -> List[str]:
        return [k for k in self.values if k.startswith(prefix)]


class FanOutRecordSink:
    """Pushes every record to each wrapped sink in order."""

    def __init__(self, *sinks: RecordSink):
        self.sinks = [s for s in sinks if s is not None]

    async def push(self, record: Dict[str, Any]) -> None:
        for sink in self.sinks:
            await sink.push(record)
