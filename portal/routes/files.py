# portal/routes/files.py
import uuid

from fastapi import APIRouter, HTTPException, UploadFile, File, status
import structlog

from portal.schemas.purchase import BillReference
from portal.services.storage import bill_storage

logger = structlog.get_logger()
router = APIRouter()

ALLOWED_CONTENT_TYPES = {
    "application/pdf",
    "image/jpeg",
    "image/png",
}
MAX_FILE_SIZE = 50 * 1024 * 1024  # 50 MB


@router.post("/bills", response_model=BillReference, status_code=status.HTTP_201_CREATED)
async def upload_bill(file: UploadFile = File(...)):
    """Upload a bill to the purchase-files bucket. Returns the reference to submit or attach."""
    if file.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": {
                    "code": "UNSUPPORTED_FILE_TYPE",
                    "message": f"Unsupported file type: {file.content_type}. Allowed: pdf, png, jpeg",
                }
            },
        )

    file_bytes = await file.read()
    if len(file_bytes) > MAX_FILE_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail={
                "error": {
                    "code": "FILE_TOO_LARGE",
                    "message": f"File too large. Max size: {MAX_FILE_SIZE // (1024 * 1024)} MB",
                }
            },
        )

    filename = file.filename or "bill.pdf"
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "pdf"
    key = f"bills/{uuid.uuid4()}.{ext}"

    try:
        bill_storage.upload(file_bytes, key, content_type=file.content_type)
        url = bill_storage.public_url(key)
    except Exception as e:
        logger.error("bill_upload_failed", key=key, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "error": {
                    "code": "STORAGE_UNAVAILABLE",
                    "message": "Failed to upload file to storage",
                }
            },
        )

    return BillReference(file_url=url, file_name=filename)
