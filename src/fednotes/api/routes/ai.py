"""AI proxy endpoints: grammar correction and image generation."""

from typing import Any

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from fednotes.api.deps import AIServiceDep

router = APIRouter()


class FixGrammarRequest(BaseModel):
    text: str = Field(default="", description="Text to correct")


class GenerateImageRequest(BaseModel):
    prompt: str = Field(default="", description="Image description")
    reference_image_path: str | None = Field(
        default=None, description="Image in the library to edit instead"
    )


MISSING_INPUT_ERRORS = frozenset({"No text provided", "No prompt provided"})


def _raise_for_error(result: dict[str, Any], unconfigured: str) -> None:
    error = result.get("error")
    if not error:
        return
    if error == unconfigured:
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif error in MISSING_INPUT_ERRORS:
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    raise HTTPException(status_code=code, detail=error)


@router.get("/ai/config")
def ai_config(ai: AIServiceDep) -> dict[str, Any]:
    return ai.provider_info()


@router.get("/ai/image_config")
def ai_image_config(ai: AIServiceDep) -> dict[str, Any]:
    return ai.image_generation_info()


@router.post("/ai/fix_grammar")
def fix_grammar(request: FixGrammarRequest, ai: AIServiceDep) -> dict[str, Any]:
    """
    Correct grammar and spelling.

    Returns:
        {"corrected", "provider", "model"}
    """
    result = ai.fix_grammar(request.text)
    _raise_for_error(result, "AI not configured")
    return result


@router.post("/ai/generate_image")
def generate_image(request: GenerateImageRequest, ai: AIServiceDep) -> dict[str, Any]:
    """
    Generate an image from a prompt.

    Returns:
        {"data": base64, "mime_type", "model"}; the client stores it through
        ``/images/upload_base64``
    """
    result = ai.generate_image(
        request.prompt, reference_image_path=request.reference_image_path
    )
    _raise_for_error(result, "Image generation not configured (set gemini_api_key)")
    return result
