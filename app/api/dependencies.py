"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from fastapi import File, HTTPException, UploadFile, status


def get_import_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Require an uploaded file with a name; the extension is checked by the parser.
    """

    if not (file.filename or "").strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file must have a file name.",
        )
    return file
