"""Image-generation backend proxy and placeholder images.

:class:`ImageBackend` forwards a prompt to the configured image backend
(``POST {image_backend_url}/generate`` returning ``{"imageUrl": ...}``).
When no backend is configured, or the backend fails, it returns a
placeholder URL derived deterministically from the prompt, so distinct
prompts get visibly distinct placeholders.

Placeholders are rendered on request by :func:`render_placeholder` with
Pillow: a flat background whose colour comes from the image id, with the id
written in the centre.
"""

from __future__ import annotations

import hashlib
import io
import logging
import time
from dataclasses import dataclass

import httpx
from PIL import Image, ImageDraw, ImageFont

from promptwizard.core.models import GenerationOptions

logger = logging.getLogger(__name__)

PLACEHOLDER_ROUTE = "/api/images"


def image_id_for_prompt(prompt: str) -> str:
    """Return a stable 16-character hex id for *prompt*."""
    return hashlib.sha256(prompt.encode("utf-8")).hexdigest()[:16]


def placeholder_url(prompt: str) -> str:
    return f"{PLACEHOLDER_ROUTE}/{image_id_for_prompt(prompt)}"


@dataclass
class GeneratedImage:
    """Result of one image request."""

    image_url: str
    prompt: str
    timestamp: int
    placeholder: bool = False

    def to_dict(self) -> dict:
        return {"imageUrl": self.image_url, "prompt": self.prompt, "timestamp": self.timestamp}


class ImageBackend:
    """Client for the external image backend with placeholder fallback.

    Args:
        base_url: Backend base URL, or ``None`` to always use placeholders.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        base_url: str | None,
        *,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") if base_url else None
        self._timeout = timeout
        self._transport = transport

    async def generate(
        self, prompt: str, options: GenerationOptions | None = None
    ) -> GeneratedImage:
        """Request an image for *prompt*; never raises for backend failures."""
        timestamp = int(time.time() * 1000)
        if self.base_url is None:
            return GeneratedImage(placeholder_url(prompt), prompt, timestamp, placeholder=True)

        payload = {"prompt": prompt}
        if options is not None:
            payload["options"] = options.model_dump(by_alias=True)
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post("/generate", json=payload)
                response.raise_for_status()
                image_url = response.json().get("imageUrl")
            if not isinstance(image_url, str) or not image_url:
                raise ValueError("response has no imageUrl")
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.warning(f"Image backend failed, serving placeholder: {e}")
            return GeneratedImage(placeholder_url(prompt), prompt, timestamp, placeholder=True)

        return GeneratedImage(image_url, prompt, timestamp)


def _colour_for(image_id: str) -> tuple[int, int, int]:
    digest = hashlib.sha256(image_id.encode("utf-8")).digest()
    # Keep the background mid-toned so black text stays readable.
    return tuple(96 + b % 128 for b in digest[:3])


def render_placeholder(image_id: str, size: int = 512) -> bytes:
    """Render a PNG placeholder for *image_id*.

    Args:
        image_id: Identifier written on the image; also seeds the colour.
        size: Width and height in pixels.

    Returns:
        PNG-encoded bytes.
    """
    image = Image.new("RGB", (size, size), _colour_for(image_id))
    draw = ImageDraw.Draw(image)
    font = ImageFont.load_default()
    left, top, right, bottom = draw.textbbox((0, 0), image_id, font=font)
    position = ((size - (right - left)) / 2, (size - (bottom - top)) / 2)
    draw.text(position, image_id, fill=(0, 0, 0), font=font)

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
