from dataclasses import dataclass
from typing import List, Optional

from ..errors import ValidationFailed
from ..schemas import GenerationRequest, IntegrationRequest
from .validation import ASSET_TYPE_MESSAGE, BUSINESS_NAME_MESSAGE, DESCRIPTION_MESSAGE, LOGO_REQUIRED_MESSAGE

DESIGNER_PREAMBLE = (
    "You are a professional graphic designer AI assistant that creates high-quality, "
    "modern, and creative marketing assets for businesses."
)

REFERENCE_GUIDANCE = (
    "Reference images are provided for stylistic inspiration only (mood, composition, "
    "color treatment, typography feel). Never copy their content, text, logos, or subjects."
)

CLOSING_INSTRUCTION = (
    "Return a single finished image. Keep the logo faithful to the original and render the "
    "business name legibly."
)


@dataclass
class PromptSegment:
    kind: str                            # "text" | "image"
    text: Optional[str] = None
    image_data_uri: Optional[str] = None

    @classmethod
    def of_text(cls, text: str) -> "PromptSegment":
        return cls(kind="text", text=text)

    @classmethod
    def of_image(cls, data_uri: str) -> "PromptSegment":
        return cls(kind="image", image_data_uri=data_uri)


def _require_fields(request: GenerationRequest) -> None:
    errors = {}
    if not (request.logo or "").strip():
        errors["logo"] = LOGO_REQUIRED_MESSAGE
    if not (request.business_name or "").strip():
        errors["business_name"] = BUSINESS_NAME_MESSAGE
    if not (request.asset_type or "").strip():
        errors["asset_type"] = ASSET_TYPE_MESSAGE
    if not (request.image_description or "").strip():
        errors["image_description"] = DESCRIPTION_MESSAGE
    if errors:
        raise ValidationFailed(errors)


def _reference_images(request: GenerationRequest) -> List[str]:
    return [uri for uri in (request.reference_image_1, request.reference_image_2) if uri]


def build_instructions(request: GenerationRequest, reference_count: int = 0) -> str:
    """Render the textual part of the generation prompt; blank optional fields are left out."""
    lines = [
        DESIGNER_PREAMBLE,
        "",
        f"Generate a {request.asset_type} that incorporates the user's provided business logo "
        "and name in a clean, visually appealing way.",
        "",
        f"Business Name: {request.business_name}",
        f"Image Description: {request.image_description}",
    ]
    if request.custom_text and request.custom_text.strip():
        lines.append(f"Custom Text (render exactly): '{request.custom_text.strip()}'")
    if request.color_palette and request.color_palette.strip():
        lines.append(f"Color Palette: '{request.color_palette.strip()}'")
    if reference_count:
        lines.extend(["", REFERENCE_GUIDANCE])
    return "\n".join(lines)


def build_generation_prompt(request: GenerationRequest) -> List[PromptSegment]:
    """
    Assemble the ordered multimodal prompt for one asset.

    Layout: instructions, the labelled logo, each labelled reference image that
    is present, then a closing instruction.
    """
    _require_fields(request)
    references = _reference_images(request)

    segments = [
        PromptSegment.of_text(build_instructions(request, reference_count=len(references))),
        PromptSegment.of_text("Business Logo:"),
        PromptSegment.of_image(request.logo),
    ]
    for index, uri in enumerate(references, start=1):
        segments.append(PromptSegment.of_text(f"Reference Image {index} (style inspiration only):"))
        segments.append(PromptSegment.of_image(uri))
    segments.append(PromptSegment.of_text(CLOSING_INSTRUCTION))
    return segments


def build_integration_prompt(request: IntegrationRequest) -> List[PromptSegment]:
    """Template first, then the instruction, then the logo to place into it."""
    return [
        PromptSegment.of_text(
            "You are a graphic designer AI assistant. Incorporate the user's provided business "
            "logo and name into the marketing asset template in a clean, visually appealing way."
        ),
        PromptSegment.of_text("Template:"),
        PromptSegment.of_image(request.template),
        PromptSegment.of_text(
            f"Integrate this logo and the business name '{request.business_name}' into the template."
        ),
        PromptSegment.of_image(request.logo),
    ]
