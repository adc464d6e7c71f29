"""Key-value persistence for students, marks and sessions."""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from grade_tracker.config import STUDENTS_KEY, MARKS_KEY
from grade_tracker.models import Student, MarkRecord

logger = logging.getLogger(__name__)

ModelT = TypeVar('ModelT', bound=BaseModel)


class KeyValueStore(ABC):
    """
    Whole-value get/put store keyed by collection name.

    Failures are logged and reads degrade to the supplied default.
    """

    @abstractmethod
    def get_item(self, key: str, default: Any = None) -> Any:
        ...

    def set_item(self, key: str, value: Any) -> bool:
        return self.set_items({key: value})

    @abstractmethod
    def set_items(self, items: Dict[str, Any]) -> bool:
        """Write several keys as one commit. Returns False if nothing was written."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        ...


class MemoryStore(KeyValueStore):
    """In-process store. Values are JSON copies, never shared references."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, str] = {}
        if initial:
            self.set_items(initial)

    def get_item(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        if not raw:
            return default
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.error("Error reading key %s: %s", key, e)
            return default

    def set_items(self, items: Dict[str, Any]) -> bool:
        try:
            encoded = {key: json.dumps(value) for key, value in items.items()}
        except (TypeError, ValueError) as e:
            logger.error("Error writing keys %s: %s", list(items), e)
            return False
        self._data.update(encoded)
        return True

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """All keys in a single JSON document on disk."""

    def __init__(self, path: str):
        self.path = path

    def _read_all(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Error reading %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.error("Ignoring %s: top-level value is not an object", self.path)
            return {}
        return data

    def _write_all(self, data: Dict[str, Any]) -> bool:
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            fd, tmp_path = tempfile.mkstemp(dir=directory, suffix='.tmp')
        except OSError as e:
            logger.error("Error writing %s: %s", self.path, e)
            return False
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error writing %s: %s", self.path, e)
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            return False
        return True

    def get_item(self, key: str, default: Any = None) -> Any:
        value = self._read_all().get(key)
        if value is None:
            return default
        return value

    def set_items(self, items: Dict[str, Any]) -> bool:
        data = self._read_all()
        data.update(items)
        return self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


def _load_models(store: KeyValueStore, key: str, model: Type[ModelT]) -> List[ModelT]:
    raw = store.get_item(key, [])
    if not isinstance(raw, list):
        logger.warning("Expected a list under %s, got %s", key, type(raw).__name__)
        return []

    items = []
    for entry in raw:
        try:
            items.append(model.model_validate(entry))
        except ValidationError as e:
            logger.warning("Skipping invalid %s entry under %s: %s", model.__name__, key, e)
    return items


def load_students(store: KeyValueStore) -> List[Student]:
    return _load_models(store, STUDENTS_KEY, Student)


def load_marks(store: KeyValueStore) -> List[MarkRecord]:
    return _load_models(store, MARKS_KEY, MarkRecord)


def dump_models(items: List[BaseModel]) -> List[Dict[str, Any]]:
    return [item.model_dump(mode='json') for item in items]


def save_students(store: KeyValueStore, students: List[Student]) -> bool:
    return store.set_item(STUDENTS_KEY, dump_models(students))


def save_marks(store: KeyValueStore, records: List[MarkRecord]) -> bool:
    return store.set_item(MARKS_KEY, dump_models(records))
