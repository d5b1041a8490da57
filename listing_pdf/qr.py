"""QR code image for a listing's public URL, fetched from an external service."""

import base64
from urllib.parse import urlencode

import httpx
from loguru import logger

from .config import DEFAULT_QR_SERVICE


class QrCodeService:
    """
    Builds QR service URLs and fetches the image to embed as a data URI.

    Fetch failures never raise: the plain service URL is returned instead so
    the PDF still carries a (remote) QR reference.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_QR_SERVICE,
        size: int = 150,
        timeout: float = 10.0,
        embed: bool = True,
        client: httpx.Client | None = None,
    ):
        self.base_url = base_url
        self.size = size
        self.timeout = timeout
        self.embed = embed
        self._client = client

    def service_url(self, target: str) -> str:
        query = urlencode({"size": f"{self.size}x{self.size}", "data": target})
        return f"{self.base_url}?{query}"

    def qr_code_data(self, target: str) -> str:
        url = self.service_url(target)
        if not self.embed:
            return url

        try:
            if self._client is not None:
                response = self._client.get(url, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("QR service unreachable, using plain URL: {}", e)
            return url

        if response.status_code != 200 or not response.content:
            logger.warning(
                "QR service returned {} ({} bytes), using plain URL",
                response.status_code,
                len(response.content),
            )
            return url

        content_type = response.headers.get("content-type", "image/png").split(";")[0].strip()
        encoded = base64.b64encode(response.content).decode()
        return f"data:{content_type};base64,{encoded}"
