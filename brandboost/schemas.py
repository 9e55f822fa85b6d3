from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config import MIN_BUSINESS_NAME_LENGTH
from .errors import InvalidDataUri
from .services.data_uri import parse_data_uri
from .services.validation import check_image_upload

DATA_URI_HINT = "Expected format: 'data:<mimetype>;base64,<encoded_data>'."


def _check_image_data_uri(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    try:
        parsed = parse_data_uri(value)
    except InvalidDataUri as exc:
        raise ValueError(str(exc)) from exc
    message = check_image_upload(parsed.mime_type, len(parsed.data))
    if message:
        raise ValueError(message)
    return value


class FileField(str, Enum):
    LOGO = "logo"
    REFERENCE_IMAGE_1 = "reference_image_1"
    REFERENCE_IMAGE_2 = "reference_image_2"


class DownloadFormat(str, Enum):
    PNG = "png"
    JPEG = "jpeg"


class GenerationRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    logo: str = Field(..., min_length=1, description=f"The business logo as a data URI. {DATA_URI_HINT}")
    business_name: str = Field(..., min_length=MIN_BUSINESS_NAME_LENGTH, description="The name of the business.")
    asset_type: str = Field(
        ..., min_length=1, description="The type of marketing asset to generate (e.g., banner, social media post)."
    )
    image_description: str = Field(..., min_length=1, description="What the generated image should show.")
    custom_text: Optional[str] = Field(None, description="Optional text to render inside the asset.")
    color_palette: Optional[str] = Field(None, description="Optional color palette to use for the asset.")
    reference_image_1: Optional[str] = Field(None, description="Optional style reference as a data URI.")
    reference_image_2: Optional[str] = Field(None, description="Optional style reference as a data URI.")

    @field_validator("logo", "reference_image_1", "reference_image_2")
    @classmethod
    def _image_fields(cls, value: Optional[str]) -> Optional[str]:
        return _check_image_data_uri(value)

    @field_validator("reference_image_1", "reference_image_2", "custom_text", "color_palette", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class GenerationResult(BaseModel):
    asset_data_uri: str = Field(..., description="The generated marketing asset as a data URI.")
    notes: Optional[str] = Field(None, description="Any text the model returned alongside the image.")


class IntegrationRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    template: str = Field(..., min_length=1, description=f"A marketing asset template as a data URI. {DATA_URI_HINT}")
    logo: str = Field(..., min_length=1, description=f"The user's logo as a data URI. {DATA_URI_HINT}")
    business_name: str = Field(..., min_length=1, description="The user's business name.")

    @field_validator("template", "logo")
    @classmethod
    def _image_fields(cls, value: str) -> str:
        return _check_image_data_uri(value)


class IntegrationResult(BaseModel):
    integrated_asset_data_uri: str


class ConvertRequest(BaseModel):
    asset_data_uri: str = Field(..., min_length=1)
    format: DownloadFormat = DownloadFormat.PNG
    business_name: Optional[str] = ""


class SessionCreated(BaseModel):
    session_id: str


class UploadPreview(BaseModel):
    field: FileField
    preview_url: str
    content_type: str
    size: int


class SessionState(BaseModel):
    session_id: str
    files: dict = Field(default_factory=dict, description="Attached field name -> preview URL.")
    result: Optional[GenerationResult] = None
    business_name: Optional[str] = None
    is_generating: bool = False
