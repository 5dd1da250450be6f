# research_eval/core/uploads.py
from __future__ import annotations

import logging
import os
import random
import time
from typing import Optional

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from research_eval.core.errors import UploadRejected
from research_eval.core.settings import settings

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"


def has_file(file: Optional[UploadFile]) -> bool:
    # browsers send an empty part when no file was picked
    return file is not None and bool(file.filename)


def check_pdf(file: UploadFile) -> None:
    if file.content_type != PDF_MIME:
        logger.info("Upload rejected: %s (%s)", file.filename, file.content_type)
        raise UploadRejected("Only PDF files are allowed", extra={"content_type": file.content_type})


def _unique_name(original: str) -> str:
    ext = os.path.splitext(original)[1].lower() or ".pdf"
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"


def _write(path: str, content: bytes) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as fh:
        fh.write(content)


async def save_pdf(file: UploadFile) -> str:
    """
    Rejects non-PDF uploads, then writes the file to UPLOAD_DIR and
    returns its served URL. Disk IO runs in the threadpool.
    """
    check_pdf(file)
    name = _unique_name(file.filename or "")
    content = await file.read()
    await run_in_threadpool(_write, os.path.join(settings.UPLOAD_DIR, name), content)
    return f"{settings.UPLOAD_URL_PREFIX.rstrip('/')}/{name}"


def remove_upload(file_url: Optional[str]) -> None:
    if not file_url:
        return
    prefix = settings.UPLOAD_URL_PREFIX.rstrip("/") + "/"
    if not file_url.startswith(prefix):
        return
    path = os.path.join(settings.UPLOAD_DIR, os.path.basename(file_url[len(prefix):]))
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not remove upload %s: %s", path, exc)
