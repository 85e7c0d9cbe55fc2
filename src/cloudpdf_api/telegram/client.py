"""Minimal Telegram Bot API client: resolve a file_id and download the file."""

import logging
import os
from pathlib import Path
from typing import Optional

import requests

from cloudpdf_api.errors import UpstreamError
from cloudpdf_api.utils.decorators import log_execution_time

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class TelegramClient:
    """Talks to the Bot API with a single token.

    The token is part of every URL, so URLs built here must never be logged.
    """

    def __init__(
        self,
        bot_token: str,
        api_base: str = "https://api.telegram.org",
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        self.bot_token = bot_token
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_file_path(self, file_id: str) -> str:
        """Call `getFile` and return the server-side path of the file."""
        try:
            response = self.session.get(
                f"{self.api_base}/bot{self.bot_token}/getFile",
                params={"file_id": file_id},
                timeout=self.timeout,
            )
            payload = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"Telegram getFile request failed: {type(e).__name__}")
            raise UpstreamError("Telegram getFile failed") from e

        if not isinstance(payload, dict):
            raise UpstreamError("Telegram getFile failed", info=payload)
        result = payload.get("result")
        if not payload.get("ok") or not isinstance(result, dict) or not result.get("file_path"):
            raise UpstreamError("Telegram getFile failed", info=payload)
        return result["file_path"]

    @log_execution_time
    def download_file(self, file_path: str, destination: Path) -> int:
        """Stream a file to ``destination`` and return the number of bytes written.

        The data lands in a sibling ``.part`` file first and is renamed only
        once complete.
        """
        partial = destination.with_name(destination.name + ".part")
        try:
            with self.session.get(
                f"{self.api_base}/file/bot{self.bot_token}/{file_path}",
                stream=True,
                timeout=self.timeout,
            ) as response:
                if not response.ok:
                    raise UpstreamError("Failed to download from Telegram", status=response.status_code)

                written = 0
                with open(partial, "wb") as out:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            out.write(chunk)
                            written += len(chunk)
            os.replace(partial, destination)
            return written
        except requests.exceptions.RequestException as e:
            logger.error(f"Telegram download failed: {type(e).__name__}")
            raise UpstreamError("Failed to download from Telegram") from e
        finally:
            if partial.exists():
                partial.unlink()
