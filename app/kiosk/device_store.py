"""키오스크 디바이스 로컬 저장소.

Local state of a display device: one persisted device id plus one cached
pairing record per screen, kept in a small JSON file.
"""

import json
import logging
import os
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class DeviceStore:
    """디바이스 ID와 화면별 페어링 레코드를 JSON 파일에 보관합니다.

    Args:
        path: JSON 파일 경로 (Path of the JSON state file)
    """

    def __init__(self, path: str | Path) -> None:
        self.path: Path = Path(path)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"device_id": None, "pairings": {}}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Kiosk state file %s is unreadable, starting fresh", self.path)
            return {"device_id": None, "pairings": {}}
        data.setdefault("pairings", {})
        return data

    def _save(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)

    def get_or_create_device_id(self) -> str:
        """디바이스 ID — 최초 호출 시 생성 후 재사용.

        Stable device id. Generated once, then reused for every pairing attempt.
        """
        data = self._load()
        if not data.get("device_id"):
            data["device_id"] = str(uuid.uuid4())
            self._save(data)
        return data["device_id"]

    def get_pairing(self, screen_id: str) -> dict[str, Any] | None:
        return self._load()["pairings"].get(screen_id)

    def save_pairing(self, screen_id: str, device_id: str, authorized_at: datetime | str) -> dict[str, Any]:
        record: dict[str, Any] = {
            "screen_id": screen_id,
            "device_id": device_id,
            "authorized_at": authorized_at.isoformat() if isinstance(authorized_at, datetime) else authorized_at,
        }
        data = self._load()
        data["pairings"][screen_id] = record
        self._save(data)
        return record

    def remove_pairing(self, screen_id: str) -> None:
        data = self._load()
        if data["pairings"].pop(screen_id, None) is not None:
            self._save(data)
