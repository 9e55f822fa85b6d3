from functools import lru_cache
from typing import Optional
from urllib.parse import quote

from fastapi import Depends, FastAPI, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, Response
from fastapi.staticfiles import StaticFiles

from .config import GENERATION_FAILED_MESSAGE, STATIC_DIR
from .errors import GenerationError, GenerationInProgress, InvalidDataUri, SessionNotFound, ValidationFailed
from .logger import logger
from .schemas import (
    ConvertRequest,
    DownloadFormat,
    FileField,
    GenerationRequest,
    GenerationResult,
    IntegrationRequest,
    IntegrationResult,
    SessionCreated,
    SessionState,
    UploadPreview,
)
from .services.asset_generator import AssetGenerator
from .services.download import convert_for_download, download_filename
from .services.form_session import FormSession, SessionStore
from .services.validation import field_errors

app = FastAPI(title="BrandBoost API", version="1.0.0")

# Basic CORS to allow calls from a separately hosted front end.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Serve the form page and its assets.
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


@lru_cache
def get_asset_generator() -> AssetGenerator:
    return AssetGenerator()


@lru_cache
def get_session_store() -> SessionStore:
    return SessionStore()


def get_session(session_id: str, store: SessionStore = Depends(get_session_store)) -> FormSession:
    try:
        return store.get(session_id)
    except SessionNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@app.exception_handler(ValidationFailed)
async def validation_failed_handler(request: Request, exc: ValidationFailed) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": "Validation failed", "errors": exc.errors})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": "Validation failed", "errors": field_errors(exc.errors())})


def attachment(content: bytes, media_type: str, filename: str) -> Response:
    disposition = f"attachment; filename=\"{filename}\""
    if not filename.isascii():
        disposition = f"attachment; filename*=utf-8''{quote(filename)}"
    return Response(content=content, media_type=media_type, headers={"Content-Disposition": disposition})


def session_state(session: FormSession) -> SessionState:
    return SessionState(
        session_id=session.session_id,
        files={
            file_field.value: f"/sessions/{session.session_id}/previews/{upload.preview_token}"
            for file_field, upload in session.files.items()
        },
        result=session.result,
        business_name=session.result_business_name,
        is_generating=session.is_generating,
    )


async def _run_generation(func, payload):
    try:
        return await run_in_threadpool(func, payload)
    except ValidationFailed:
        raise
    except GenerationError as exc:
        logger.error("Generation failed: %s", exc, exc_info=True)
        raise HTTPException(status_code=502, detail=GENERATION_FAILED_MESSAGE) from exc
    except Exception as exc:
        logger.exception("Unexpected error during asset generation")
        raise HTTPException(status_code=500, detail="Unexpected error during asset generation") from exc


@app.get("/", include_in_schema=False)
async def index() -> FileResponse:
    return FileResponse(STATIC_DIR / "index.html")


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.post("/generate", response_model=GenerationResult)
async def generate_asset(
    payload: GenerationRequest,
    generator: AssetGenerator = Depends(get_asset_generator),
) -> GenerationResult:
    return await _run_generation(generator.generate, payload)


@app.post("/integrate", response_model=IntegrationResult)
async def integrate_logo_and_name(
    payload: IntegrationRequest,
    generator: AssetGenerator = Depends(get_asset_generator),
) -> IntegrationResult:
    return await _run_generation(generator.integrate, payload)


@app.post("/convert")
async def convert_asset(payload: ConvertRequest) -> Response:
    try:
        content, media_type = convert_for_download(payload.asset_data_uri, payload.format)
    except InvalidDataUri as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except OSError as exc:
        raise HTTPException(status_code=400, detail="Asset is not a readable image") from exc
    return attachment(content, media_type, download_filename(payload.business_name, payload.format))


# -------------------
# Form sessions
# -------------------

@app.post("/sessions", response_model=SessionCreated, status_code=201)
async def create_session(store: SessionStore = Depends(get_session_store)) -> SessionCreated:
    return SessionCreated(session_id=store.create().session_id)


@app.get("/sessions/{session_id}", response_model=SessionState)
async def get_session_state(session: FormSession = Depends(get_session)) -> SessionState:
    return session_state(session)


@app.delete("/sessions/{session_id}", status_code=204)
async def discard_session(session_id: str, store: SessionStore = Depends(get_session_store)) -> Response:
    try:
        store.discard(session_id)
    except SessionNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=204)


@app.put("/sessions/{session_id}/files/{file_field}", response_model=UploadPreview)
async def attach_file(
    file_field: FileField,
    file: UploadFile = File(...),
    session: FormSession = Depends(get_session),
) -> UploadPreview:
    data = await file.read()
    upload = session.attach(file_field, file.filename or "", file.content_type or "", data)
    return UploadPreview(
        field=file_field,
        preview_url=f"/sessions/{session.session_id}/previews/{upload.preview_token}",
        content_type=upload.content_type,
        size=upload.size,
    )


@app.delete("/sessions/{session_id}/files/{file_field}", status_code=204)
async def remove_file(file_field: FileField, session: FormSession = Depends(get_session)) -> Response:
    session.remove(file_field)
    return Response(status_code=204)


@app.get("/sessions/{session_id}/previews/{token}")
async def get_preview(token: str, session: FormSession = Depends(get_session)) -> Response:
    upload = session.preview(token)
    if upload is None:
        raise HTTPException(status_code=404, detail="Preview not found")
    return Response(content=upload.data, media_type=upload.content_type, headers={"Cache-Control": "no-store"})


@app.post("/sessions/{session_id}/generate", response_model=GenerationResult)
async def generate_from_session(
    business_name: Optional[str] = Form(None),
    asset_type: Optional[str] = Form(None),
    image_description: Optional[str] = Form(None),
    custom_text: Optional[str] = Form(None),
    color_palette: Optional[str] = Form(None),
    session: FormSession = Depends(get_session),
    generator: AssetGenerator = Depends(get_asset_generator),
) -> GenerationResult:
    payload = session.build_request(
        business_name=business_name,
        asset_type=asset_type,
        image_description=image_description,
        custom_text=custom_text,
        color_palette=color_palette,
    )

    try:
        session.begin_generation()
    except GenerationInProgress as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    result = None
    try:
        result = await _run_generation(generator.generate, payload)
    finally:
        session.finish_generation(result, business_name=payload.business_name)
    return result


@app.get("/sessions/{session_id}/result", response_model=GenerationResult)
async def get_result(session: FormSession = Depends(get_session)) -> GenerationResult:
    if session.result is None:
        raise HTTPException(status_code=404, detail="No asset has been generated yet")
    return session.result


@app.get("/sessions/{session_id}/download")
async def download_result(
    format: DownloadFormat = Query(DownloadFormat.PNG),
    session: FormSession = Depends(get_session),
) -> Response:
    if session.result is None:
        raise HTTPException(status_code=404, detail="No asset has been generated yet")
    content, media_type = convert_for_download(session.result.asset_data_uri, format)
    return attachment(content, media_type, download_filename(session.result_business_name, format))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("brandboost.main:app", host="0.0.0.0", port=8000, reload=True)
