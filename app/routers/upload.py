from fastapi import APIRouter, UploadFile, File, HTTPException, Depends
from app.services.images import validate_image_file
from app.services.s3 import s3_service
from app.routers.auth import get_current_admin
from app.models.admin_user import AdminUser

router = APIRouter()

@router.post("/post-image")
async def upload_post_image(
    file: UploadFile = File(...),
    current_admin: AdminUser = Depends(get_current_admin)
):
    """
    Upload a featured image for a post to S3.
    Returns the S3 key and public URL.
    """
    content = await file.read()

    error = validate_image_file(file.content_type, len(content))
    if error:
        raise HTTPException(status_code=400, detail=error)

    s3_key = s3_service.upload_file(
        file_content=content,
        file_name=file.filename or "image",
        content_type=file.content_type,
        folder="posts"
    )

    if not s3_key:
        raise HTTPException(status_code=500, detail="Failed to upload image")

    return {
        "s3_key": s3_key,
        "url": s3_service.get_public_url(s3_key),
        "message": "Image uploaded successfully"
    }


@router.delete("/image/{path:path}")
async def delete_image(
    path: str,
    current_admin: AdminUser = Depends(get_current_admin)
):
    """Delete an image from S3."""
    success = s3_service.delete_file(path)

    if not success:
        raise HTTPException(status_code=500, detail="Failed to delete image")

    return {"message": "Image deleted successfully"}
