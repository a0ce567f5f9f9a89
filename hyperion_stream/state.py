"""
Resume cursor persisted as a small JSON file.

The file is replaced atomically after each batch, so a crash leaves either
the previous head or the new one on disk, never a torn write.
"""

import os
from dataclasses import dataclass
from pathlib import Path

import orjson

from hyperion_stream.errors import StateError


@dataclass
class State:
    head_global_sequence: int = 0


class StateFile:
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> State:
        """Read the saved head. A missing file means start from zero."""
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return State()
        except OSError as e:
            raise StateError(f"read {self.path}: {e}") from e

        try:
            data = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise StateError(f"decode {self.path}: {e}") from e

        head = data.get("head_global_sequence") if isinstance(data, dict) else None
        if isinstance(head, bool) or not isinstance(head, int) or head < 0:
            raise StateError(f"decode {self.path}: invalid head_global_sequence {head!r}")
        return State(head_global_sequence=head)

    def store(self, state: State) -> None:
        """Durably replace the saved head."""
        tmp = self.path.with_name(self.path.name + ".tmp")
        payload = orjson.dumps({"head_global_sequence": state.head_global_sequence})
        try:
            with open(tmp, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except OSError as e:
            raise StateError(f"write {self.path}: {e}") from e
