# src/epistemic_engine/persistence/store.py

import json
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError

from epistemic_engine.persistence.models import EngineSnapshot


class StateStore(ABC):
    """
    Abstract Base Class for a snapshot store.
    """

    @abstractmethod
    def save(self, snapshot: EngineSnapshot) -> None:
        raise NotImplementedError

    @abstractmethod
    def load(self) -> EngineSnapshot:
        raise NotImplementedError


def _read_snapshot(path: Path) -> EngineSnapshot:
    if not path.is_file():
        raise FileNotFoundError(f"Snapshot file not found at: {path}")
    try:
        return EngineSnapshot.model_validate_json(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Snapshot at {path} is not valid JSON: {e}")
    except ValidationError as e:
        raise ValueError(f"Snapshot at {path} does not match the engine schema: {e}")
    except IOError as e:
        print(f"ERROR: Could not read snapshot from {path}. Reason: {e}")
        raise


def _write_snapshot(path: Path, snapshot: EngineSnapshot) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
    except (IOError, TypeError) as e:
        print(f"ERROR: Could not save snapshot to {path}. Reason: {e}")
        raise


class FileStateStore(StateStore):
    """Keeps one engine snapshot in a single JSON file."""

    def __init__(self, file_path: Union[str, Path]):
        self.file_path = Path(file_path)

    def save(self, snapshot: EngineSnapshot) -> None:
        """
        Writes the snapshot, creating the parent directory if needed.

        Raises:
            IOError: If the file cannot be written.
        """
        _write_snapshot(self.file_path, snapshot)

    def load(self) -> EngineSnapshot:
        """
        Raises:
            FileNotFoundError: If the snapshot file does not exist.
            ValueError: If the file holds invalid JSON or does not match the schema.
        """
        return _read_snapshot(self.file_path)


class RoundSnapshotStore(StateStore):
    """
    Keeps one snapshot per simulation round in a directory, named
    ``snapshot_round_<n>.json`` after the snapshot's round number.
    """

    _pattern = re.compile(r"^snapshot_round_(\d+)\.json$")

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def path_for(self, round_number: int) -> Path:
        return self.directory / f"snapshot_round_{round_number}.json"

    def rounds(self) -> List[int]:
        """Round numbers with a saved snapshot, ascending."""
        if not self.directory.is_dir():
            return []
        found = (self._pattern.match(path.name) for path in self.directory.iterdir())
        return sorted(int(match.group(1)) for match in found if match)

    def save(self, snapshot: EngineSnapshot) -> None:
        _write_snapshot(self.path_for(snapshot.round), snapshot)

    def load(self, round_number: Optional[int] = None) -> EngineSnapshot:
        """Loads the given round, or the latest one when no round is named."""
        if round_number is None:
            saved = self.rounds()
            if not saved:
                raise FileNotFoundError(f"No round snapshots found in: {self.directory}")
            round_number = saved[-1]
        return _read_snapshot(self.path_for(round_number))
