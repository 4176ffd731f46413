"""Tests for AI grammar correction and image generation."""

from unittest.mock import MagicMock

import pytest

from fednotes.core.ai import (
    ANTHROPIC_URL,
    OPENAI_URL,
    AIService,
    extract_image_from_gemini_response,
    extract_image_from_imagen_response,
    mime_type_for_path,
)
from fednotes.core.fed_config import FedConfig


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def make_service(notes_dir, fed_file, session):
    def build(config_text=""):
        fed_file(config_text)
        return AIService(FedConfig(notes_dir), notes_dir, session=session)

    return build


class TestResponseExtraction:
    """Tests for image extraction helpers."""

    def test_imagen(self):
        result = extract_image_from_imagen_response(
            {"predictions": [{"bytesBase64Encoded": "AAA", "mimeType": "image/jpeg"}]},
            "imagen-4",
        )

        assert result == {"data": "AAA", "mime_type": "image/jpeg", "model": "imagen-4"}

    @pytest.mark.parametrize(
        "response,error",
        [
            (None, "No predictions in response"),
            ({"predictions": []}, "No predictions in response"),
            ({"predictions": [{}]}, "No image data in response"),
        ],
    )
    def test_imagen_errors(self, response, error):
        assert extract_image_from_imagen_response(response, "m") == {"error": error}

    def test_gemini_skips_text_parts(self):
        response = {
            "candidates": [
                {
                    "content": {
                        "parts": [
                            {"text": "Here you go"},
                            {"inlineData": {"data": "BBB", "mimeType": "image/png"}},
                        ]
                    }
                }
            ]
        }

        assert extract_image_from_gemini_response(response, "g")["data"] == "BBB"

    @pytest.mark.parametrize(
        "response,error",
        [
            (None, "No response from Gemini"),
            ({"candidates": []}, "No candidates in response"),
            ({"candidates": [{"content": {"parts": [{"text": "no"}]}}]}, "No image data in response"),
        ],
    )
    def test_gemini_errors(self, response, error):
        assert extract_image_from_gemini_response(response, "g") == {"error": error}

    def test_mime_type_for_path(self):
        assert mime_type_for_path("a/b.PNG") == "image/png"
        assert mime_type_for_path("a/b.heic") == "image/jpeg"


class TestProviderInfo:
    def test_not_configured(self, make_service):
        service = make_service()

        assert service.provider_info() == {
            "enabled": False,
            "provider": None,
            "model": None,
            "available_providers": [],
        }
        assert service.image_generation_info()["enabled"] is False

    def test_configured(self, make_service):
        service = make_service("anthropic_api_key = a\ngemini_api_key = g\n")

        info = service.provider_info()

        assert info["provider"] == "anthropic"
        assert info["model"] == "claude-sonnet-4-20250514"
        assert service.image_generation_info() == {
            "enabled": True,
            "model": "imagen-4.0-generate-001",
        }


class TestFixGrammar:
    """Tests for grammar correction through each provider."""

    def test_not_configured(self, make_service):
        assert make_service().fix_grammar("text") == {"error": "AI not configured"}

    def test_no_text(self, make_service):
        service = make_service("openai_api_key = o\n")

        assert service.fix_grammar("  ") == {"error": "No text provided"}

    def test_openai(self, make_service, session, mock_response):
        session.post.return_value = mock_response(
            json_data={"choices": [{"message": {"content": " Fixed text. "}}]}
        )
        service = make_service("openai_api_key = sk-o\n")

        result = service.fix_grammar("fixd text")

        assert result == {
            "corrected": "Fixed text.",
            "provider": "openai",
            "model": "gpt-4o-mini",
        }
        assert session.post.call_args.args[0] == OPENAI_URL
        assert session.post.call_args.kwargs["headers"] == {"Authorization": "Bearer sk-o"}
        messages = session.post.call_args.kwargs["json"]["messages"]
        assert messages[1] == {"role": "user", "content": "fixd text"}

    def test_anthropic(self, make_service, session, mock_response):
        session.post.return_value = mock_response(
            json_data={"content": [{"type": "text", "text": "Fixed."}]}
        )
        service = make_service("anthropic_api_key = sk-a\n")

        assert service.fix_grammar("fixd")["corrected"] == "Fixed."
        assert session.post.call_args.args[0] == ANTHROPIC_URL
        assert session.post.call_args.kwargs["headers"]["x-api-key"] == "sk-a"

    def test_ollama(self, make_service, session, mock_response):
        session.post.return_value = mock_response(
            json_data={"message": {"content": "Fixed."}}
        )
        service = make_service("ollama_api_base = http://localhost:11434/\n")

        assert service.fix_grammar("fixd")["corrected"] == "Fixed."
        assert session.post.call_args.args[0] == "http://localhost:11434/api/chat"

    def test_gemini(self, make_service, session, mock_response):
        session.post.return_value = mock_response(
            json_data={"candidates": [{"content": {"parts": [{"text": "Fixed."}]}}]}
        )
        service = make_service("gemini_api_key = g\n")

        assert service.fix_grammar("fixd")["corrected"] == "Fixed."
        assert session.post.call_args.args[0].endswith(
            "/gemini-2.0-flash:generateContent"
        )
        assert session.post.call_args.kwargs["params"] == {"key": "g"}

    def test_upstream_error(self, make_service, session, mock_response):
        session.post.return_value = mock_response(
            status_code=401, json_data={"error": {"message": "Invalid key"}}
        )
        service = make_service("openai_api_key = bad\n")

        result = service.fix_grammar("text")

        assert result == {"error": "AI request failed: 401: Invalid key"}

    def test_unexpected_format(self, make_service, session, mock_response):
        session.post.return_value = mock_response(json_data={"choices": []})
        service = make_service("openai_api_key = o\n")

        assert service.fix_grammar("text")["error"] == (
            "AI request failed: Unexpected response format"
        )


class TestGenerateImage:
    """Tests for image generation."""

    def test_not_configured(self, make_service):
        assert make_service("openai_api_key = o\n").generate_image("a cat") == {
            "error": "Image generation not configured (set gemini_api_key)"
        }

    def test_no_prompt(self, make_service):
        assert make_service("gemini_api_key = g\n").generate_image("") == {
            "error": "No prompt provided"
        }

    def test_imagen(self, make_service, session, mock_response):
        session.post.return_value = mock_response(
            json_data={"predictions": [{"bytesBase64Encoded": "AAA"}]}
        )
        service = make_service("gemini_api_key = g\n")

        result = service.generate_image("a cat")

        assert result == {
            "data": "AAA",
            "mime_type": "image/png",
            "model": "imagen-4.0-generate-001",
        }
        assert session.post.call_args.args[0].endswith(
            "/imagen-4.0-generate-001:predict"
        )
        assert session.post.call_args.kwargs["json"]["instances"] == [
            {"prompt": "a cat"}
        ]

    def test_reference_image(self, make_service, session, mock_response, notes_dir):
        (notes_dir / "images").mkdir()
        (notes_dir / "images" / "cat.png").write_bytes(b"png")
        session.post.return_value = mock_response(
            json_data={
                "candidates": [{"content": {"parts": [{"inlineData": {"data": "CCC"}}]}}]
            }
        )
        service = make_service("gemini_api_key = g\n")

        result = service.generate_image("make it blue", "images/cat.png")

        assert result["data"] == "CCC"
        assert result["model"] == "gemini-2.5-flash-image"
        parts = session.post.call_args.kwargs["json"]["contents"][0]["parts"]
        assert parts[1]["inlineData"] == {"mimeType": "image/png", "data": "cG5n"}

    def test_missing_reference_uses_text_prompt(self, make_service, session, mock_response):
        session.post.return_value = mock_response(
            json_data={"predictions": [{"bytesBase64Encoded": "AAA"}]}
        )
        service = make_service("gemini_api_key = g\n")

        service.generate_image("a cat", "../outside.png")

        assert session.post.call_args.args[0].endswith(":predict")

    def test_upstream_failure(self, make_service, session, mock_response):
        session.post.return_value = mock_response(status_code=500, text="boom")
        service = make_service("gemini_api_key = g\n")

        assert service.generate_image("a cat")["error"].startswith(
            "Image generation failed: 500"
        )
