"""AI grammar correction and image generation through provider HTTP APIs."""

import base64
import logging
from pathlib import Path
from typing import Any

import requests

from fednotes.core.config import HTTP_CONNECT_TIMEOUT, HTTP_READ_TIMEOUT
from fednotes.core.fed_config import FedConfig

logger = logging.getLogger(__name__)

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

# Used when a reference image is supplied; Imagen only takes text prompts
GEMINI_IMAGE_EDIT_MODEL = "gemini-2.5-flash-image"

MAX_OUTPUT_TOKENS = 8192
AI_TIMEOUT = (HTTP_CONNECT_TIMEOUT, max(HTTP_READ_TIMEOUT, 120))

GRAMMAR_INSTRUCTIONS = (
    "You are a careful copy editor. Fix spelling, grammar and punctuation in "
    "the user's markdown text. Keep the original language, meaning, tone and "
    "all markdown formatting, links, code blocks and frontmatter unchanged. "
    "Reply with the corrected text only, without explanations or code fences."
)

_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


class AIProviderError(Exception):
    """Provider returned an error or an unusable response."""


def mime_type_for_path(path: str | Path) -> str:
    return _MIME_TYPES.get(Path(path).suffix.lower(), "image/jpeg")


def extract_image_from_imagen_response(
    response: dict[str, Any] | None, model: str
) -> dict[str, Any]:
    predictions = (response or {}).get("predictions") or []
    if not predictions:
        return {"error": "No predictions in response"}

    prediction = predictions[0]
    data = prediction.get("bytesBase64Encoded")
    if not data:
        return {"error": "No image data in response"}

    return {
        "data": data,
        "mime_type": prediction.get("mimeType") or "image/png",
        "model": model,
    }


def extract_image_from_gemini_response(
    response: dict[str, Any] | None, model: str
) -> dict[str, Any]:
    if response is None:
        return {"error": "No response from Gemini"}

    candidates = response.get("candidates") or []
    if not candidates:
        return {"error": "No candidates in response"}

    for part in (candidates[0].get("content") or {}).get("parts") or []:
        inline = part.get("inlineData")
        if inline and inline.get("data"):
            return {
                "data": inline["data"],
                "mime_type": inline.get("mimeType") or "image/png",
                "model": model,
            }
    return {"error": "No image data in response"}


class AIService:
    """Provider-agnostic AI helpers configured from `.fed`."""

    def __init__(
        self,
        config: FedConfig,
        notes_path: Path | str | None = None,
        session: requests.Session | None = None,
    ):
        self.config = config
        self.notes_path = Path(notes_path) if notes_path else config.base_path
        self.session = session or requests.Session()

    # --- Provider info ---

    @property
    def enabled(self) -> bool:
        return bool(self.config.ai_providers_available())

    @property
    def current_provider(self) -> str | None:
        return self.config.effective_ai_provider()

    @property
    def current_model(self) -> str | None:
        return self.config.effective_ai_model()

    def provider_info(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "provider": self.current_provider,
            "model": self.current_model,
            "available_providers": self.config.ai_providers_available(),
        }

    @property
    def image_generation_enabled(self) -> bool:
        return bool(self.config.get_ai("gemini_api_key"))

    @property
    def image_generation_model(self) -> str:
        return self.config.get("image_generation_model")

    def image_generation_info(self) -> dict[str, Any]:
        return {
            "enabled": self.image_generation_enabled,
            "model": self.image_generation_model,
        }

    # --- Grammar ---

    def fix_grammar(self, text: str | None) -> dict[str, Any]:
        """
        Correct grammar and spelling of ``text``.

        Returns:
            {"corrected", "provider", "model"} on success, else {"error"}
        """
        if not self.enabled:
            return {"error": "AI not configured"}
        if not text or not text.strip():
            return {"error": "No text provided"}

        provider, model = self.current_provider, self.current_model
        try:
            corrected = self._chat(provider, model, GRAMMAR_INSTRUCTIONS, text)
        except (AIProviderError, requests.RequestException) as e:
            logger.error("AI grammar request to %s failed: %s", provider, e)
            return {"error": f"AI request failed: {e}"}

        return {"corrected": corrected, "provider": provider, "model": model}

    # --- Image generation ---

    def generate_image(
        self, prompt: str | None, reference_image_path: str | None = None
    ) -> dict[str, Any]:
        """
        Generate an image with Gemini.

        Text-only prompts go to the configured Imagen model; a readable
        reference image switches to Gemini image editing.

        Returns:
            {"data": base64, "mime_type", "model"} or {"error"}
        """
        if not self.image_generation_enabled:
            return {"error": "Image generation not configured (set gemini_api_key)"}
        if not prompt or not prompt.strip():
            return {"error": "No prompt provided"}

        reference = self._reference_image(reference_image_path)
        try:
            if reference is not None:
                return self._generate_with_reference(prompt, reference)
            return self._generate_with_imagen(prompt)
        except (AIProviderError, requests.RequestException) as e:
            logger.error("Image generation failed: %s", e)
            return {"error": f"Image generation failed: {e}"}

    def _generate_with_imagen(self, prompt: str) -> dict[str, Any]:
        model = self.image_generation_model
        data = self._post_json(
            f"{GEMINI_BASE_URL}/{model}:predict",
            {"instances": [{"prompt": prompt}], "parameters": {"sampleCount": 1}},
            params={"key": self.config.get_ai("gemini_api_key")},
        )
        return extract_image_from_imagen_response(data, model)

    def _generate_with_reference(self, prompt: str, reference: Path) -> dict[str, Any]:
        model = GEMINI_IMAGE_EDIT_MODEL
        encoded = base64.b64encode(reference.read_bytes()).decode("ascii")
        data = self._post_json(
            f"{GEMINI_BASE_URL}/{model}:generateContent",
            {
                "contents": [
                    {
                        "parts": [
                            {"text": prompt},
                            {
                                "inlineData": {
                                    "mimeType": mime_type_for_path(reference),
                                    "data": encoded,
                                }
                            },
                        ]
                    }
                ],
                "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
            },
            params={"key": self.config.get_ai("gemini_api_key")},
        )
        return extract_image_from_gemini_response(data, model)

    def _reference_image(self, path: str | None) -> Path | None:
        if not path:
            return None
        root = self.notes_path.resolve()
        candidate = (root / path).resolve()
        if not candidate.is_relative_to(root) or not candidate.is_file():
            logger.info("Reference image %s not found, using text prompt", path)
            return None
        return candidate

    # --- Provider calls ---

    def _chat(self, provider: str | None, model: str | None, system: str, text: str) -> str:
        if provider in ("openai", "openrouter"):
            key = self.config.get_ai(f"{provider}_api_key")
            url = OPENAI_URL if provider == "openai" else OPENROUTER_URL
            data = self._post_json(
                url,
                {
                    "model": model,
                    "messages": [
                        {"role": "system", "content": system},
                        {"role": "user", "content": text},
                    ],
                },
                headers={"Authorization": f"Bearer {key}"},
            )
            return _dig_text(data, "choices", 0, "message", "content")

        if provider == "anthropic":
            data = self._post_json(
                ANTHROPIC_URL,
                {
                    "model": model,
                    "max_tokens": MAX_OUTPUT_TOKENS,
                    "system": system,
                    "messages": [{"role": "user", "content": text}],
                },
                headers={
                    "x-api-key": self.config.get_ai("anthropic_api_key"),
                    "anthropic-version": ANTHROPIC_VERSION,
                },
            )
            return _dig_text(data, "content", 0, "text")

        if provider == "ollama":
            base = self.config.get_ai("ollama_api_base").rstrip("/")
            data = self._post_json(
                f"{base}/api/chat",
                {
                    "model": model,
                    "stream": False,
                    "messages": [
                        {"role": "system", "content": system},
                        {"role": "user", "content": text},
                    ],
                },
            )
            return _dig_text(data, "message", "content")

        if provider == "gemini":
            data = self._post_json(
                f"{GEMINI_BASE_URL}/{model}:generateContent",
                {
                    "systemInstruction": {"parts": [{"text": system}]},
                    "contents": [{"role": "user", "parts": [{"text": text}]}],
                },
                params={"key": self.config.get_ai("gemini_api_key")},
            )
            return _dig_text(data, "candidates", 0, "content", "parts", 0, "text")

        raise AIProviderError(f"Unknown provider: {provider}")

    def _post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        response = self.session.post(
            url, json=payload, headers=headers, params=params, timeout=AI_TIMEOUT
        )
        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.ok:
            message = _error_message(data) or response.text[:200] or response.reason
            raise AIProviderError(f"{response.status_code}: {message}")
        if not isinstance(data, dict):
            raise AIProviderError("Invalid JSON response")
        return data


def _dig_text(data: Any, *keys: str | int) -> str:
    node = data
    for key in keys:
        try:
            node = node[key]
        except (KeyError, IndexError, TypeError):
            raise AIProviderError("Unexpected response format") from None
    if not isinstance(node, str):
        raise AIProviderError("Unexpected response format")
    return node.strip()


def _error_message(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict):
        return error.get("message")
    if isinstance(error, str):
        return error
    return None
