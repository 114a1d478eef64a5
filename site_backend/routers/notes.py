from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from site_backend.domain.notes import NewNote, Note
from site_backend.routers.deps import get_services, http_errors, int_param, json_body, require_auth
from site_backend.services.pagination import DEFAULT_PAGE, DEFAULT_PAGINATION

router = APIRouter(prefix="/api/notes", tags=["notes"], dependencies=[Depends(require_auth)])


@router.get("")
def get_notes(request: Request, page: str | None = None, pagination: str | None = None):
    result = get_services(request).notes.get_notes(
        int_param(page, DEFAULT_PAGE), int_param(pagination, DEFAULT_PAGINATION)
    )
    return {"notes": [note.to_json() for note in result.items], "morePages": result.more_pages}


@router.get("/{note_id}")
def get_note(note_id: str, request: Request):
    with http_errors(not_found="Note Not Found"):
        return get_services(request).notes.get_by_id(note_id).to_json()


@router.post("")
def add_note(request: Request, body: Any = Depends(json_body)):
    with http_errors(invalid="Invalid New Note Input"):
        note = get_services(request).notes.add_note(NewNote.from_json(body))
    return note.to_json()


@router.put("/{note_id}")
def update_note(
    note_id: str,
    request: Request,
    user: str = Depends(require_auth),
    body: Any = Depends(json_body),
):
    svc = get_services(request).notes
    with http_errors(not_found="Note Not Found", invalid="Invalid Note Input"):
        current = svc.get_by_id(note_id)
        new_note = NewNote.from_json(body)
        updated = Note(
            id=note_id,
            title=new_note.title,
            content=new_note.content,
            author=current.author,
            date_added=current.date_added,
            update_author=user,
        )
        note = svc.update_note(updated)
    return note.to_json()


@router.delete("/{note_id}")
def delete_note(note_id: str, request: Request):
    if not note_id.strip():
        raise HTTPException(400, "Invalid Id")
    with http_errors(not_found="Note Not Found"):
        note = get_services(request).notes.delete_note(note_id)
    return note.to_json()
