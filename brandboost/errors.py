from typing import Dict


class BrandBoostError(Exception):
    """Base class for errors raised by BrandBoost services."""


class ValidationFailed(BrandBoostError):
    """One or more form fields are invalid; ``errors`` maps field name to message."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(f"{field}: {message}" for field, message in errors.items()))
        self.errors = dict(errors)


class GenerationError(BrandBoostError):
    """The image service failed or returned no image."""


class InvalidDataUri(BrandBoostError):
    """A string could not be parsed as a base64 data URI."""


class SessionNotFound(BrandBoostError):
    pass


class GenerationInProgress(BrandBoostError):
    pass
