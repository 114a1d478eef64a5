from __future__ import annotations

from typing import Any, List

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import FileResponse

from site_backend.domain.files import FileSortOption
from site_backend.routers.deps import current_user, get_services, http_errors, int_param, json_body, require_auth
from site_backend.services.pagination import DEFAULT_PAGE, DEFAULT_PAGINATION

router = APIRouter(prefix="/api/files", tags=["files"])


def _sort_option(value: str | None) -> FileSortOption:
    try:
        return FileSortOption(value)
    except ValueError:
        return FileSortOption.DATE_ADDED


@router.get("")
def get_file_list(
    request: Request,
    page: str | None = None,
    pagination: str | None = None,
    sortBy: str | None = None,
    _user: str = Depends(require_auth),
):
    svc = get_services(request).file_data
    result = svc.get_file_list(
        int_param(page, DEFAULT_PAGE),
        int_param(pagination, DEFAULT_PAGINATION),
        _sort_option(sortBy),
    )
    return {
        "files": [details.to_json() for details in result.items],
        "morePages": result.more_pages,
        "totalFiles": svc.get_total_files(),
    }


@router.get("/{filename}")
def get_file(filename: str, request: Request):
    services = get_services(request)
    with http_errors(not_found="File Not Found"):
        details = services.file_data.get_file_by_name(filename)
    if details.is_private and not current_user(request):
        # private files are indistinguishable from missing ones for anonymous callers
        raise HTTPException(404, "File Not Found")
    path = services.file_ops.saved_path(details.filename)
    if not path.is_file():
        raise HTTPException(404, "File Not Found")
    return FileResponse(path, media_type=details.mimetype, filename=details.original_filename)


@router.post("/upload")
def upload_files(
    request: Request,
    files: List[UploadFile] = File(...),
    isPrivate: bool = Form(True),
    user: str = Depends(require_auth),
):
    ops = get_services(request).file_ops
    if not files:
        raise HTTPException(400, "No files uploaded")
    with http_errors(invalid="Invalid Upload"):
        staged = ops.stage_uploads(
            ((upload.file, upload.filename or "", upload.content_type or "") for upload in files),
            is_private=isPrivate,
        )
        saved = ops.save_uploaded_files(staged, user)
    return [details.to_json() for details in saved]


@router.post("/delete")
def delete_files(request: Request, _user: str = Depends(require_auth), body: Any = Depends(json_body)):
    names = body.get("names") if isinstance(body, dict) else None
    if not isinstance(names, list) or not all(isinstance(name, str) for name in names):
        raise HTTPException(400, "names must be a list of strings")
    with http_errors():
        results = get_services(request).file_ops.delete_files(names)
    return [result.to_json() for result in results.values()]
