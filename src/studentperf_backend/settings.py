import json
import os
import threading

DEFAULT_ROLE_NAME_ALIASES = {
    "admin": "admin",
    "administrator": "admin",
    "администратор": "admin",
    "teacher": "teacher",
    "преподаватель": "teacher",
    "student": "student",
    "студент": "student",
}


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ["true", "1", "yes", "on"]


def _role_name_aliases() -> dict:
    aliases = dict(DEFAULT_ROLE_NAME_ALIASES)
    raw = os.environ.get("ROLE_NAME_ALIASES", None)
    if raw:
        # JSON object: {"stored role name": "admin" | "teacher" | "student"}
        aliases.update({str(k).lower(): str(v).lower() for k, v in json.loads(raw).items()})
    return aliases


class BackendSettings:
    _instance = None
    _lock = threading.Lock()

    def __init__(self):
        self.DEBUG_MODE = os.environ.get("DEBUG_MODE", "development")
        self.DATABASE_URL = os.environ.get("DATABASE_URL", None)
        # Policy: group-less teaching assignments are open to every grouped student
        self.OPEN_UNGROUPED_ASSIGNMENTS = _env_flag("OPEN_UNGROUPED_ASSIGNMENTS", "false")
        self.ROLE_NAME_ALIASES = _role_name_aliases()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(BackendSettings, cls).__new__(cls)
        return cls._instance

settings = BackendSettings()
