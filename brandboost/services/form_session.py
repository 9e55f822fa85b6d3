"""
Per-user form state.

A form session holds the files a user has attached (logo plus two optional
reference images), the preview token issued for each, and the last generated
asset. Preview tokens are revocable: removing or replacing a file revokes the
old token, and discarding the session revokes all of them.
"""

import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from ..config import MAX_SESSIONS, SESSION_TTL_SECONDS
from ..errors import GenerationInProgress, SessionNotFound
from ..logger import logger
from ..schemas import FileField, GenerationRequest, GenerationResult
from .data_uri import encode_data_uri
from .validation import validate_form, validate_image_upload


@dataclass
class UploadedImage:
    filename: str
    content_type: str
    data: bytes
    preview_token: str

    @property
    def size(self) -> int:
        return len(self.data)

    def to_data_uri(self) -> str:
        return encode_data_uri(self.data, self.content_type)


@dataclass
class FormSession:
    session_id: str
    files: Dict[FileField, UploadedImage] = field(default_factory=dict)
    result: Optional[GenerationResult] = None
    result_business_name: Optional[str] = None
    is_generating: bool = False
    last_seen: float = field(default_factory=time.monotonic)

    def attach(self, file_field: FileField, filename: str, content_type: str, data: bytes) -> UploadedImage:
        """Validate and store a file, issuing a new preview token for it."""
        file_field = FileField(file_field)
        validate_image_upload(file_field.value, content_type, len(data))

        self.remove(file_field)
        upload = UploadedImage(
            filename=filename or file_field.value,
            content_type=content_type.lower(),
            data=data,
            preview_token=uuid.uuid4().hex,
        )
        self.files[file_field] = upload
        logger.debug("Session %s: attached %s (%d bytes)", self.session_id, file_field.value, upload.size)
        return upload

    def remove(self, file_field: FileField) -> bool:
        """Clear a field and revoke its preview. Returns False if nothing was attached."""
        upload = self.files.pop(FileField(file_field), None)
        if upload is None:
            return False
        logger.debug("Session %s: released preview for %s", self.session_id, FileField(file_field).value)
        return True

    def preview(self, token: str) -> Optional[UploadedImage]:
        for upload in self.files.values():
            if upload.preview_token == token:
                return upload
        return None

    def release_all(self) -> None:
        for file_field in list(self.files):
            self.remove(file_field)

    def build_request(
        self,
        business_name: Optional[str],
        asset_type: Optional[str],
        image_description: Optional[str],
        custom_text: Optional[str] = None,
        color_palette: Optional[str] = None,
    ) -> GenerationRequest:
        """Validate the submitted fields and encode attached files as data URIs."""
        validate_form(
            has_logo=FileField.LOGO in self.files,
            business_name=business_name,
            asset_type=asset_type,
            image_description=image_description,
        )

        logo = self.files[FileField.LOGO].to_data_uri()
        reference_1 = self.files.get(FileField.REFERENCE_IMAGE_1)
        reference_2 = self.files.get(FileField.REFERENCE_IMAGE_2)

        return GenerationRequest(
            logo=logo,
            business_name=business_name,
            asset_type=asset_type,
            image_description=image_description,
            custom_text=custom_text,
            color_palette=color_palette,
            reference_image_1=reference_1.to_data_uri() if reference_1 else None,
            reference_image_2=reference_2.to_data_uri() if reference_2 else None,
        )

    def begin_generation(self) -> None:
        if self.is_generating:
            raise GenerationInProgress("A generation is already running for this session.")
        self.is_generating = True

    def finish_generation(self, result: Optional[GenerationResult] = None, business_name: Optional[str] = None) -> None:
        """Clear the in-flight flag; a previous result is kept unless a new one is given."""
        self.is_generating = False
        if result is not None:
            self.result = result
            self.result_business_name = business_name


class SessionStore:
    """
    In-process registry of form sessions.

    Sessions idle for more than ``ttl`` seconds are discarded on the next
    ``create`` or ``get``. When ``max_sessions`` are live, creating another
    evicts the least recently used session that is not generating.
    """

    def __init__(self, ttl: float = SESSION_TTL_SECONDS, max_sessions: int = MAX_SESSIONS, clock=time.monotonic):
        self._sessions: Dict[str, FormSession] = {}
        self.ttl = ttl
        self.max_sessions = max_sessions
        self._clock = clock

    def create(self) -> FormSession:
        self.sweep()
        if len(self._sessions) >= self.max_sessions:
            self._evict_oldest()
        session = FormSession(session_id=uuid.uuid4().hex, last_seen=self._clock())
        self._sessions[session.session_id] = session
        logger.info("Created form session %s", session.session_id)
        return session

    def get(self, session_id: str) -> FormSession:
        self.sweep()
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(f"Unknown session: {session_id}")
        session.last_seen = self._clock()
        return session

    def discard(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFound(f"Unknown session: {session_id}")
        session.release_all()
        logger.info("Discarded form session %s", session_id)

    def sweep(self) -> int:
        """Discard expired sessions; a session mid-generation is never expired."""
        cutoff = self._clock() - self.ttl
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if session.last_seen < cutoff and not session.is_generating
        ]
        for session_id in expired:
            self._sessions.pop(session_id).release_all()
        if expired:
            logger.info("Expired %d idle form session(s)", len(expired))
        return len(expired)

    def _evict_oldest(self) -> None:
        idle = [s for s in self._sessions.values() if not s.is_generating]
        if not idle:
            return
        oldest = min(idle, key=lambda s: s.last_seen)
        self.discard(oldest.session_id)

    def __len__(self) -> int:
        return len(self._sessions)
