"""
Image storage for ID-proof uploads. The booking core only keeps the
reference string returned by `store`.
"""

import base64
from abc import ABC, abstractmethod


class ImageStorage(ABC):
    @abstractmethod
    async def store(self, content: bytes, content_type: str) -> str:
        """Persist an image and return a retrievable reference."""
        pass


class DataUriImageStorage(ImageStorage):
    """Inlines the image as a data: URI; nothing leaves the process."""

    async def store(self, content: bytes, content_type: str) -> str:
        encoded = base64.b64encode(content).decode("ascii")
        return f"data:{content_type};base64,{encoded}"
