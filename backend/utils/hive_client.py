# backend/utils/hive_client.py
import httpx
import logging
from pathlib import Path
from typing import Optional

from config import settings

logger = logging.getLogger(__name__)

HIVE_MODELS = "image,ai_generated,image_similarity"

class HiveClient:
    """Thin client for Hive's synchronous task endpoint."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_url = settings.HIVE_API_URL
        self.api_key = settings.HIVE_API_KEY
        self.timeout = settings.HIVE_TIMEOUT_SECONDS
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def analyze_image(self, path: Path) -> dict:
        # Submit the image and return Hive's raw JSON result
        path = Path(path)
        headers = {"Authorization": f"Token {self.api_key}"}
        async with self._client() as client:
            try:
                with open(path, "rb") as media:
                    response = await client.post(
                        self.api_url,
                        headers=headers,
                        data={"models": HIVE_MODELS},
                        files={"media": (path.name, media)},
                    )
                response.raise_for_status()
                return response.json()
            except (httpx.RequestError, httpx.HTTPStatusError) as e:
                try:
                    resp_text = e.response.text if getattr(e, "response", None) is not None else str(e)
                except Exception:
                    resp_text = str(e)
                logger.error(f"Hive analysis error for {path.name}: {resp_text}")
                raise

hive_client = HiveClient()
