"""
Stockage clé/valeur partagé entre l'application et ses widgets

Chaque groupe d'application correspond à un fichier JSON dans SHARED_DIR.
"""
import json
from pathlib import Path
from typing import Any, Optional

from config.settings import APP_GROUP_ID, SHARED_DIR
from utils.logger import get_logger

logger = get_logger(__name__)


class SharedDefaults:
    """Préférences partagées d'un groupe d'application (fichier JSON)"""

    def __init__(self, suite_name: str = APP_GROUP_ID, directory: Optional[Path] = None):
        self.suite_name = suite_name
        self.directory = Path(directory) if directory else SHARED_DIR
        self.filepath = self.directory / f"{suite_name}.json"

    def _read(self) -> dict:
        if not self.filepath.exists():
            return {}
        try:
            with open(self.filepath, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("❌ Lecture impossible de %s : %s", self.filepath, e)
            return {}

    def _write(self, data: dict) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        with open(self.filepath, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Lit une valeur

        Args:
            key: Clé de stockage
            default: Valeur si la clé est absente

        Returns:
            Valeur JSON décodée
        """
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Écrit une valeur sérialisable en JSON"""
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def contains(self, key: str) -> bool:
        return key in self._read()

    def keys(self) -> list[str]:
        return list(self._read().keys())
