from typing import Dict, Optional

from ..config import ACCEPTED_IMAGE_TYPES, ASSET_TYPES, MAX_FILE_SIZE, MIN_BUSINESS_NAME_LENGTH
from ..errors import ValidationFailed

FILE_TOO_LARGE_MESSAGE = f"Max file size is {MAX_FILE_SIZE // (1024 * 1024)}MB."
FILE_TYPE_MESSAGE = ".jpg, .jpeg, .png and .webp files are accepted."
LOGO_REQUIRED_MESSAGE = "Logo is required."
BUSINESS_NAME_MESSAGE = f"Business name must be at least {MIN_BUSINESS_NAME_LENGTH} characters."
ASSET_TYPE_MESSAGE = "Please select an asset type."
DESCRIPTION_MESSAGE = "Image description is required."


def check_image_upload(content_type: Optional[str], size: int) -> Optional[str]:
    """Return the error message for an unacceptable image, or None if it passes."""
    if size > MAX_FILE_SIZE:
        return FILE_TOO_LARGE_MESSAGE
    if (content_type or "").lower() not in ACCEPTED_IMAGE_TYPES:
        return FILE_TYPE_MESSAGE
    return None


def validate_image_upload(field: str, content_type: Optional[str], size: int) -> None:
    message = check_image_upload(content_type, size)
    if message:
        raise ValidationFailed({field: message})


def _blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def validate_form(
    has_logo: bool,
    business_name: Optional[str],
    asset_type: Optional[str],
    image_description: Optional[str],
    allowed_asset_types=ASSET_TYPES,
) -> None:
    """
    Check the required form fields and raise every failure at once.

    Optional fields (custom text, color palette, reference images) are never
    rejected here; uploaded files are checked when they are attached.
    """
    errors: Dict[str, str] = {}

    if not has_logo:
        errors["logo"] = LOGO_REQUIRED_MESSAGE
    if len((business_name or "").strip()) < MIN_BUSINESS_NAME_LENGTH:
        errors["business_name"] = BUSINESS_NAME_MESSAGE
    if _blank(asset_type) or (allowed_asset_types and asset_type.strip() not in allowed_asset_types):
        errors["asset_type"] = ASSET_TYPE_MESSAGE
    if _blank(image_description):
        errors["image_description"] = DESCRIPTION_MESSAGE

    if errors:
        raise ValidationFailed(errors)


# Messages shown when a required field is missing or empty.
REQUIRED_FIELD_MESSAGES = {
    "logo": LOGO_REQUIRED_MESSAGE,
    "business_name": BUSINESS_NAME_MESSAGE,
    "asset_type": ASSET_TYPE_MESSAGE,
    "image_description": DESCRIPTION_MESSAGE,
}
_MISSING_ERROR_TYPES = {"missing", "string_too_short", "string_type"}


def field_errors(errors) -> Dict[str, str]:
    """Turn pydantic error dicts into one ``{field: message}`` entry per field."""
    result: Dict[str, str] = {}
    for error in errors:
        loc = [part for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        name = str(loc[0]) if loc else "body"
        if name in result:
            continue
        message = error.get("msg", "Invalid value.")
        if error.get("type") in _MISSING_ERROR_TYPES and name in REQUIRED_FIELD_MESSAGES:
            message = REQUIRED_FIELD_MESSAGES[name]
        elif message.startswith("Value error, "):
            message = message[len("Value error, "):]
        result[name] = message
    return result
