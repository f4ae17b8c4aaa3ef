import json
import os
import logging
from typing import Any, Dict, List, Optional
from threading import RLock

from pydantic import ValidationError

from area_agent.config.settings import settings
from area_agent.models.schemas import Area

logger = logging.getLogger(__name__)


class AreaStore:
    """
    Read-side view of the doctor-drawn areas kept in a JSON file.

    The file holds either a list of area objects or a mapping of name -> area object.
    Editing areas belongs to the area-management service; this store only loads them.
    """

    def __init__(self, file_path: Optional[str] = None):
        self.file_path = file_path or settings.areas_file
        self._lock = RLock()
        self._areas: List[Area] = []
        self._by_id: Dict[str, Area] = {}
        self._load()

    def _read_records(self) -> List[Dict[str, Any]]:
        if not os.path.exists(self.file_path) or os.path.getsize(self.file_path) == 0:
            logger.warning(f"Areas file {self.file_path} is missing or empty. No areas loaded.")
            return []

        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.error(f"Failed to load areas file from {self.file_path}: {e}")
            return []

        if isinstance(data, dict):
            return list(data.values())
        if isinstance(data, list):
            return data
        logger.error(f"Areas file {self.file_path} must contain a list or an object, got {type(data).__name__}.")
        return []

    def _load(self):
        with self._lock:
            areas: List[Area] = []
            for record in self._read_records():
                try:
                    areas.append(Area.model_validate(record))
                except ValidationError as e:
                    logger.warning(f"Skipping invalid area record in {self.file_path}: {e}")

            self._areas = sorted(areas, key=lambda a: a.name)
            self._by_id = {area.id: area for area in self._areas}
            logger.info(f"Loaded {len(self._areas)} areas from {self.file_path}.")

    def reload(self) -> List[Area]:
        """Re-reads the areas file and returns the fresh snapshot."""
        self._load()
        return self.get_all_areas()

    def get_all_areas(self) -> List[Area]:
        with self._lock:
            return list(self._areas)

    def get_area(self, area_id: str) -> Optional[Area]:
        with self._lock:
            return self._by_id.get(area_id)
