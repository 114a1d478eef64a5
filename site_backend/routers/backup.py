from fastapi import APIRouter, Depends, HTTPException, Request

from site_backend.routers.deps import get_services, require_auth

router = APIRouter(prefix="/api/backup", tags=["backup"])


@router.post("")
def run_backup(request: Request, _user: str = Depends(require_auth)):
    failed = get_services(request).backup_all()
    if failed:
        raise HTTPException(500, {"message": "Backup failed", "modules": failed})
    return {"ok": True}
