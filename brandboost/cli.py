#!/usr/bin/env python3
"""
brandboost CLI

  logo + business details (+ up to two reference images)
    -> validate files and fields
    -> encode files as data URIs
    -> (image model) one marketing asset
    -> optional JPEG flattening
    -> <business name>-asset.<png|jpeg> or JSON on stdout

Env (.env):

  OPENAI_API_KEY=...
  BRANDBOOST_MODEL=gpt-4.1   # optional
"""

import argparse
import json
import mimetypes
import os
import sys
from typing import List, Optional

from openai import OpenAIError

from .config import ASSET_TYPES, DEFAULT_ASSET_TYPE
from .errors import GenerationError, ValidationFailed
from .schemas import DownloadFormat, FileField
from .services.asset_generator import AssetGenerator
from .services.download import convert_for_download, download_filename
from .services.form_session import FormSession

MAX_REFERENCES = 2


def _attach_path(session: FormSession, file_field: FileField, path: str) -> None:
    content_type, _ = mimetypes.guess_type(path)
    with open(path, "rb") as f:
        data = f.read()
    session.attach(file_field, os.path.basename(path), content_type or "", data)


def build_session(logo: Optional[str], references: List[str]) -> FormSession:
    session = FormSession(session_id="cli")
    if logo:
        _attach_path(session, FileField.LOGO, logo)
    slots = [FileField.REFERENCE_IMAGE_1, FileField.REFERENCE_IMAGE_2]
    for file_field, path in zip(slots, references):
        _attach_path(session, file_field, path)
    return session


def cli_main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Generate a marketing asset from a logo and business details.")
    parser.add_argument("--logo", type=str, help="Path to the business logo (.jpg, .jpeg, .png, .webp)")
    parser.add_argument("--business-name", type=str, default="", help="Business name")
    parser.add_argument("--asset-type", type=str, default=DEFAULT_ASSET_TYPE, choices=ASSET_TYPES)
    parser.add_argument("--description", type=str, default="", help="What the image should show")
    parser.add_argument("--custom-text", type=str, help="Text to render inside the asset")
    parser.add_argument("--color-palette", type=str, help='e.g. "blue and gold"')
    parser.add_argument(
        "--reference", action="append", default=[], help="Style reference image (may be given twice)"
    )
    parser.add_argument("--format", type=str, default="png", choices=[f.value for f in DownloadFormat])
    parser.add_argument("--out-dir", type=str, help="Directory to save the asset (or print JSON)")
    args = parser.parse_args(argv)

    if len(args.reference) > MAX_REFERENCES:
        parser.error(f"At most {MAX_REFERENCES} reference images are supported.")

    try:
        session = build_session(args.logo, args.reference)
        request = session.build_request(
            business_name=args.business_name,
            asset_type=args.asset_type,
            image_description=args.description,
            custom_text=args.custom_text,
            color_palette=args.color_palette,
        )
    except ValidationFailed as exc:
        for file_field, message in exc.errors.items():
            print(f"{file_field}: {message}", file=sys.stderr)
        return 2
    except OSError as exc:
        print(f"Cannot read image: {exc}", file=sys.stderr)
        return 2

    try:
        result = AssetGenerator().generate(request)
    except (GenerationError, OpenAIError) as exc:
        print(f"Generation failed: {exc}", file=sys.stderr)
        return 1

    fmt = DownloadFormat(args.format)
    if args.out_dir:
        os.makedirs(args.out_dir, exist_ok=True)
        content, _ = convert_for_download(result.asset_data_uri, fmt)
        path = os.path.join(args.out_dir, download_filename(request.business_name, fmt))
        with open(path, "wb") as f:
            f.write(content)
        print(f"Wrote asset to: {path}")
    else:
        print(json.dumps(result.model_dump(), ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(cli_main())
