import httpx

from localchat.internal.constants import RUNTIME_HOST, RUNTIME_PORT
from localchat.internal.logging import get_logger

logger = get_logger(__name__)


class RuntimeClient:
    """
    Thin async client for a running localchat service.
    """

    def __init__(self, host: str = RUNTIME_HOST, port: int = RUNTIME_PORT, timeout: float = 5.0):
        self.base_url = f"http://{host}:{port}"
        self.timeout = timeout

    async def health(self) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            r = await client.get(f"{self.base_url}/health")
            r.raise_for_status()
            return r.json()

    def __repr__(self) -> str:
        return f"<RuntimeClient base_url={self.base_url}>"
