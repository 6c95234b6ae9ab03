"""
Image service — downloads an optional thumbnail and embeds it in a pass.

The download is bounded three ways:
  - IMAGE_RESPONSE_TIMEOUT: connect/read timeout, i.e. time to first byte
  - IMAGE_DEADLINE: total time for the whole download
  - IMAGE_MAX_BYTES: response size ceiling (checked on Content-Length and
    while streaming, since the header can be absent or wrong)

Any non-2xx answer, timeout, transport error or oversized body aborts the
request with ImageRequestAbortedError. Nothing is retried.

The image is then resized three times (90, 180 and 270 px bounding boxes,
aspect ratio preserved, alpha dropped, PNG) and attached to the pass as
thumbnail.png, thumbnail@2x.png and thumbnail@3x.png.
"""

import asyncio
import io
import logging

import httpx
from PIL import Image, ImageOps

from gera.exceptions import ImageRequestAbortedError
from gera.passkit import GeraPass

logger = logging.getLogger(__name__)

THUMBNAIL_VARIANTS = (
    ((90, 90), "thumbnail.png"),
    ((180, 180), "thumbnail@2x.png"),
    ((270, 270), "thumbnail@3x.png"),
)


async def _download(
    client: httpx.AsyncClient,
    url: str,
    max_bytes: int,
    response_timeout: float,
) -> bytes:
    async with client.stream("GET", url, timeout=httpx.Timeout(response_timeout)) as response:
        if not response.is_success:
            raise ImageRequestAbortedError(url, f"status {response.status_code}")

        declared = response.headers.get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > max_bytes:
            raise ImageRequestAbortedError(url, f"content length {declared} over {max_bytes} bytes")

        body = bytearray()
        async for chunk in response.aiter_bytes():
            body.extend(chunk)
            if len(body) > max_bytes:
                raise ImageRequestAbortedError(url, f"body over {max_bytes} bytes")
        return bytes(body)


async def fetch_image(
    client: httpx.AsyncClient,
    url: str,
    *,
    max_bytes: int,
    response_timeout: float,
    deadline: float,
) -> bytes:
    """
    Download an image within the configured limits.

    Raises:
        ImageRequestAbortedError: On any failure of the download itself.
    """
    try:
        return await asyncio.wait_for(
            _download(client, url, max_bytes, response_timeout),
            timeout=deadline,
        )
    except asyncio.TimeoutError as exc:
        raise ImageRequestAbortedError(url, f"deadline of {deadline}s exceeded") from exc
    except httpx.HTTPError as exc:
        raise ImageRequestAbortedError(url, str(exc) or type(exc).__name__) from exc


def resize_image(data: bytes, size: tuple[int, int]) -> bytes:
    """
    Fit an image inside a bounding box and encode it as PNG.

    Images smaller than the box are scaled up, like larger ones are scaled
    down. The alpha channel is removed.

    Raises:
        PIL.UnidentifiedImageError: If the bytes are not a readable image.
    """
    with Image.open(io.BytesIO(data)) as image:
        resized = ImageOps.contain(image.convert("RGB"), size)
    buffer = io.BytesIO()
    resized.save(buffer, format="PNG")
    return buffer.getvalue()


async def embed_image(
    pass_: GeraPass,
    image_url: str | None,
    client: httpx.AsyncClient,
    *,
    max_bytes: int,
    response_timeout: float,
    deadline: float,
) -> GeraPass:
    """Attach the thumbnail variants of image_url to the pass (no-op without a URL)."""
    if not image_url:
        return pass_

    url = str(image_url)
    try:
        data = await fetch_image(
            client,
            url,
            max_bytes=max_bytes,
            response_timeout=response_timeout,
            deadline=deadline,
        )
    except ImageRequestAbortedError as exc:
        logger.warning("Thumbnail download failed: %s", exc.detail)
        raise

    # The three resizes are independent; run them off the event loop together
    variants = await asyncio.gather(
        *(asyncio.to_thread(resize_image, data, size) for size, _ in THUMBNAIL_VARIANTS)
    )
    for (_, file_name), png in zip(THUMBNAIL_VARIANTS, variants):
        pass_.addFile(file_name, io.BytesIO(png))
    return pass_
