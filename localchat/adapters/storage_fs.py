"""
Local filesystem adapters: model artifact discovery and the JSON user store
that keeps per-user conversation history.
"""
import asyncio
import json
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from localchat.internal.constants import HISTORY_LIMIT, RECOGNIZED_EXTENSIONS
from localchat.internal.logging import get_logger
from localchat.internal.security import hash_password, verify_password
from localchat.kernel.artifacts import ArtifactLocator, ModelArtifact
from localchat.kernel.errors import UserExists

logger = get_logger(__name__)


class FileSystemArtifactLocator(ArtifactLocator):
    """
    Finds model files by extension in a single directory.
    This is an 'adapter' in the hexagonal architecture.
    """

    def __init__(self, extensions: Iterable[str] = RECOGNIZED_EXTENSIONS):
        self.extensions = tuple(ext.lower().lstrip(".") for ext in extensions)

    def matches(self, name: str) -> bool:
        lowered = name.lower()
        return any(lowered.endswith(f".{ext}") for ext in self.extensions)

    def locate(self, directory: Path) -> Optional[ModelArtifact]:
        try:
            names = os.listdir(directory)
        except OSError as e:
            # Directory might not exist yet
            logger.debug("Models directory not readable", directory=str(directory), error=repr(e))
            return None

        # Listing order on purpose: first match wins, no sorting.
        for name in names:
            if self.matches(name):
                return ModelArtifact(path=Path(directory) / name)
        return None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _off_loop(fn, *args):
    """Run CPU-bound key derivation in the default executor."""
    return await asyncio.get_running_loop().run_in_executor(None, fn, *args)


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": user["id"], "username": user["username"], "email": user.get("email")}


class JsonUserStore:
    """
    Users and their chat history in a single JSON file.

    Every read-modify-write goes through one asyncio.Lock; writes replace the
    file atomically. A missing file is an empty store, a malformed one is an
    error.
    """

    def __init__(self, users_file: Path, history_limit: int = HISTORY_LIMIT):
        self.users_file = Path(users_file)
        self.history_limit = history_limit
        self._lock = asyncio.Lock()

    def _load(self) -> List[Dict[str, Any]]:
        if not self.users_file.exists():
            return []
        raw = self.users_file.read_text(encoding="utf-8")
        return json.loads(raw or "[]")

    def _save(self, users: List[Dict[str, Any]]) -> None:
        self.users_file.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.users_file.with_suffix(f"{self.users_file.suffix}.tmp")
        temp_path.write_text(json.dumps(users, indent=2), encoding="utf-8")
        temp_path.replace(self.users_file)

    @staticmethod
    def _find(users: List[Dict[str, Any]], user_id: str) -> Optional[Dict[str, Any]]:
        return next((u for u in users if str(u["id"]) == str(user_id)), None)

    async def create_user(self, username: str, password: str, email: Optional[str] = None) -> Dict[str, Any]:
        password_hash, salt = await _off_loop(hash_password, password)
        async with self._lock:
            users = self._load()
            if any(u["username"] == username for u in users):
                raise UserExists("username", "username taken")
            if email and any(u.get("email") == email for u in users):
                raise UserExists("email", "email already registered")

            user = {
                "id": uuid.uuid4().hex,
                "username": username,
                "email": email,
                "password_hash": password_hash,
                "salt": salt,
                "created_at": _now(),
                "data": {"history": []},
            }
            users.append(user)
            self._save(users)

        logger.info("User created", user_id=user["id"], username=username)
        return user

    async def authenticate(self, username: str, password: str) -> Optional[Dict[str, Any]]:
        async with self._lock:
            users = self._load()
        user = next((u for u in users if u["username"] == username), None)
        if user is None or not await _off_loop(verify_password, password, user["password_hash"], user["salt"]):
            logger.warning("Authentication failed", username=username)
            return None
        return user

    async def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        async with self._lock:
            return self._find(self._load(), user_id)

    async def append_history(self, user_id: str, prompt: str, reply: str) -> None:
        async with self._lock:
            users = self._load()
            user = self._find(users, user_id)
            if user is None:
                logger.warning("History not saved, unknown user", user_id=user_id)
                return

            data = user.setdefault("data", {})
            history = data.setdefault("history", [])
            history.append({"prompt": prompt, "reply": reply, "t": _now()})
            # keep the most recent entries only
            data["history"] = history[-self.history_limit:]
            self._save(users)

    async def get_history(self, user_id: str) -> List[Dict[str, Any]]:
        user = await self.get_user(user_id)
        if user is None:
            return []
        return list(user.get("data", {}).get("history", []))
