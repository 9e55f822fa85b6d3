from typing import Any, Dict, List, Optional

from openai import OpenAI, OpenAIError

from ..config import GENERATION_MODEL, IMAGE_OUTPUT_FORMAT
from ..errors import GenerationError
from ..logger import logger
from ..schemas import GenerationRequest, GenerationResult, IntegrationRequest, IntegrationResult
from .data_uri import b64_to_data_uri
from .prompt_builder import PromptSegment, build_generation_prompt, build_integration_prompt


def segments_to_content(segments: List[PromptSegment]) -> List[Dict[str, Any]]:
    """Map prompt segments onto Responses API input parts, keeping their order."""
    content: List[Dict[str, Any]] = []
    for segment in segments:
        if segment.kind == "image":
            content.append({"type": "input_image", "image_url": segment.image_data_uri})
        else:
            content.append({"type": "input_text", "text": segment.text})
    return content


class AssetGenerator:
    """Sends an assembled prompt to the image model and returns the first image."""

    def __init__(self, client: OpenAI | None = None, model: str = GENERATION_MODEL):
        self.client = client or OpenAI()
        self.model = model

    def generate(self, request: GenerationRequest) -> GenerationResult:
        segments = build_generation_prompt(request)
        logger.info(
            "Generating %s for %r (%d prompt segments)",
            request.asset_type,
            request.business_name,
            len(segments),
        )
        image_b64, notes = self._generate_image(segments)
        return GenerationResult(
            asset_data_uri=b64_to_data_uri(image_b64, f"image/{IMAGE_OUTPUT_FORMAT}"),
            notes=notes,
        )

    def integrate(self, request: IntegrationRequest) -> IntegrationResult:
        segments = build_integration_prompt(request)
        logger.info("Integrating logo and name for %r", request.business_name)
        image_b64, _ = self._generate_image(segments)
        return IntegrationResult(
            integrated_asset_data_uri=b64_to_data_uri(image_b64, f"image/{IMAGE_OUTPUT_FORMAT}"),
        )

    def _generate_image(self, segments: List[PromptSegment]) -> tuple[str, Optional[str]]:
        # Text stays enabled next to the image tool; image-only output is not requested.
        try:
            response = self.client.responses.create(
                model=self.model,
                input=[{"role": "user", "content": segments_to_content(segments)}],
                tools=[{"type": "image_generation", "output_format": IMAGE_OUTPUT_FORMAT}],
            )
        except OpenAIError as exc:
            raise GenerationError(f"Image service error: {exc}") from exc

        images = [
            item.result
            for item in (response.output or [])
            if getattr(item, "type", None) == "image_generation_call" and getattr(item, "result", None)
        ]
        if not images:
            raise GenerationError("Image generation failed.")

        notes = (getattr(response, "output_text", "") or "").strip() or None
        return images[0], notes
