"""AI gateway: text generation, grounded search and image editing."""

import base64
import logging
from abc import ABC, abstractmethod
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Raised when the AI provider rejects or fails a call."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")


class AIGateway(ABC):
    """Abstract base class for the generative AI service."""

    @abstractmethod
    async def generate_text(
        self,
        prompt: str,
        image: Optional[bytes] = None,
        mime_type: str = "image/jpeg",
    ) -> str:
        pass

    @abstractmethod
    async def generate_grounded_text(
        self,
        prompt: str,
        enable_search: bool = True,
    ) -> str:
        pass

    @abstractmethod
    async def edit_image(
        self,
        image: bytes,
        mime_type: str,
        prompt: str,
        size: str | None = None,
    ) -> Optional[bytes]:
        pass


def to_data_uri(image: bytes, mime_type: str = "image/jpeg") -> str:
    """Encode raw image bytes as a base64 data URI."""
    encoded = base64.b64encode(image).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


# File extension sent with the multipart upload for each MIME type
_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class OpenAIGateway(AIGateway):
    """OpenAI implementation of AIGateway."""

    def __init__(
        self,
        api_key: str,
        text_model: str = "gpt-4o-mini",
        search_model: str = "gpt-4o-mini",
        image_model: str = "gpt-image-1",
        timeout: float = 120.0,
    ):
        if not api_key:
            raise ValueError("OPENAI_API_KEY is not configured")
        self.text_model = text_model
        self.search_model = search_model
        self.image_model = image_model
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout)

    async def generate_text(
        self,
        prompt: str,
        image: Optional[bytes] = None,
        mime_type: str = "image/jpeg",
    ) -> str:
        """
        Generate text with Chat Completions.

        When an image is given it is sent inline as a data URI next to the prompt.
        """
        logger.info(f"Generating text with model {self.text_model}, prompt: {prompt.strip()[:100]}...")

        content: list[dict] = [{"type": "text", "text": prompt}]
        if image is not None:
            content.append({
                "type": "image_url",
                "image_url": {"url": to_data_uri(image, mime_type)},
            })

        try:
            response = await self.client.chat.completions.create(
                model=self.text_model,
                messages=[{"role": "user", "content": content}],
            )
        except OpenAIError as e:
            logger.error(f"Text generation failed: {e}")
            raise GatewayError("generate_text", str(e)) from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def generate_grounded_text(
        self,
        prompt: str,
        enable_search: bool = True,
    ) -> str:
        """
        Generate text with the Responses API.

        With enable_search the web search tool is attached so the answer
        is grounded in live results.
        """
        logger.info(
            f"Generating grounded text with model {self.search_model} "
            f"(search={'on' if enable_search else 'off'}), prompt: {prompt.strip()[:100]}..."
        )

        tools = [{"type": "web_search_preview"}] if enable_search else []

        try:
            response = await self.client.responses.create(
                model=self.search_model,
                input=prompt,
                tools=tools,
            )
        except OpenAIError as e:
            logger.error(f"Grounded text generation failed: {e}")
            raise GatewayError("generate_grounded_text", str(e)) from e

        return response.output_text or ""

    async def edit_image(
        self,
        image: bytes,
        mime_type: str,
        prompt: str,
        size: str | None = None,
    ) -> Optional[bytes]:
        """
        Edit an image using OpenAI Images API.

        Returns the decoded image bytes, or None when the response carries
        no image payload.
        """
        logger.info(f"Editing image with model {self.image_model}, size {size or 'auto'}, prompt: {prompt.strip()[:100]}...")

        extension = _EXTENSIONS.get(mime_type.lower(), "png")
        upload = (f"product.{extension}", image, mime_type)

        try:
            # GPT image models always return b64_json
            response = await self.client.images.edit(
                model=self.image_model,
                image=upload,
                prompt=prompt,
                n=1,
                size=size or "auto",
            )
        except OpenAIError as e:
            logger.error(f"Image edit failed: {e}")
            raise GatewayError("edit_image", str(e)) from e

        if not response.data:
            logger.warning("OpenAI edit returned no data")
            return None

        image_data = response.data[0]
        if getattr(image_data, "b64_json", None):
            logger.info("Image edited successfully (base64)")
            return base64.b64decode(image_data.b64_json)

        logger.warning("OpenAI edit returned empty response")
        return None
