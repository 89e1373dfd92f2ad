import io
import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse

from db.database import backup_archive_bytes
from utils.records import utc_now

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/backup")
async def download_backup():
    """Download the database and config as a zip."""
    try:
        data = backup_archive_bytes()
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    filename = f"passaporte-backup-{utc_now():%Y%m%d-%H%M%S}.zip"
    logger.info("Serving backup %s", filename)
    return StreamingResponse(
        io.BytesIO(data),
        media_type="application/zip",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
