import json
import secrets
import time
from typing import Any


def utc_seconds() -> float:
    return time.time()


def generate_session_id(key_length: int = 32) -> str:
    return secrets.token_urlsafe(key_length)


def dump_json(data: Any) -> str:
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def load_json(raw: str) -> Any:
    return json.loads(raw)
