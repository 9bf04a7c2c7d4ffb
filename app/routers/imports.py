from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import StreamingResponse
from sqlmodel import Session
from app.db.session import engine
from app.models.admin_user import AdminUser
from app.routers.auth import get_current_admin
from app.services.importer import CsvImporter

router = APIRouter()

@router.post("/")
async def import_posts(
    file: UploadFile = File(...),
    current_admin: AdminUser = Depends(get_current_admin)
):
    """
    Import legacy posts from a CSV file.
    Streams one JSON event per line: log lines, progress percentages,
    and a final "done" or "error" event.
    """
    content = await file.read()

    def events():
        # The stream outlives the request's dependencies, so it owns its session
        with Session(engine) as session:
            for event in CsvImporter(session).import_csv(content):
                yield event.model_dump_json(exclude_none=True) + "\n"

    return StreamingResponse(events(), media_type="application/x-ndjson")
