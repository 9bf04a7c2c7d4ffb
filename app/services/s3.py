import logging
import os
import uuid
from typing import Optional

import boto3
from botocore.exceptions import ClientError

from app.core.config import settings

logger = logging.getLogger(__name__)


class S3Service:
    def __init__(self):
        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
            region_name=settings.AWS_REGION
        )
        self.bucket_name = settings.S3_BUCKET

    def upload_file(self, file_content: bytes, file_name: str, content_type: str = "image/jpeg", folder: str = "posts") -> Optional[str]:
        """
        Upload a file to S3 and return its key.

        Args:
            file_content: Binary content of the file
            file_name: Original filename, only its extension is kept
            content_type: MIME type of the file
            folder: Key prefix inside the bucket

        Returns:
            Key such as "posts/uuid.jpg", or None if the upload failed
        """
        file_extension = os.path.splitext(file_name)[1].lower()
        s3_key = f"{folder}/{uuid.uuid4()}{file_extension}"
        try:
            # Public read is granted by the bucket policy, not per-object ACLs
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=s3_key,
                Body=file_content,
                ContentType=content_type
            )
            return s3_key
        except ClientError as e:
            logger.error("Error uploading %s to S3: %s", s3_key, e)
            return None

    def delete_file(self, s3_key: str) -> bool:
        try:
            self.s3_client.delete_object(
                Bucket=self.bucket_name,
                Key=s3_key
            )
            return True
        except ClientError as e:
            logger.error("Error deleting %s from S3: %s", s3_key, e)
            return False

    def get_public_url(self, s3_key: str) -> str:
        return f"{settings.S3_BASE_URL}/{s3_key}"

# Singleton instance
s3_service = S3Service()
