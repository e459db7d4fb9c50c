"""
Product image storage on Amazon S3.
"""

import os
from typing import Any, List, Optional
from uuid import uuid4

import boto3
from aws_lambda_powertools.metrics import MetricUnit
from botocore.exceptions import BotoCoreError, ClientError

from cloudmart.handlers.utils.errors import FileUploadError
from cloudmart.handlers.utils.observability import logger, metrics, tracer

S3_HOST_SUFFIX = '.amazonaws.com/'


class StorageService:
    """Validates and stores uploaded files in a public-read S3 bucket."""

    def __init__(
        self,
        bucket_name: str,
        prefix: str,
        allowed_extensions: List[str],
        max_file_size: int,
        client: Optional[Any] = None,
    ):
        self.bucket_name = bucket_name
        self.prefix = prefix
        self.allowed_extensions = allowed_extensions
        self.max_file_size = max_file_size
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client('s3')
        return self._client

    def _validate(self, filename: Optional[str], content: bytes) -> str:
        if not content:
            raise FileUploadError('File is empty')
        if len(content) > self.max_file_size:
            raise FileUploadError('File size exceeds maximum allowed size')
        if not filename or '.' not in filename:
            raise FileUploadError('Invalid filename')

        extension = os.path.splitext(filename)[1][1:].lower()
        if extension not in self.allowed_extensions:
            raise FileUploadError(f"File type not allowed. Allowed types: {', '.join(self.allowed_extensions)}")
        return extension

    @tracer.capture_method
    def upload_file(self, filename: Optional[str], content: bytes, content_type: Optional[str] = None) -> str:
        """
        Upload a file under a random key.

        Args:
            filename: Original filename, used for its extension only
            content: Raw file bytes
            content_type: MIME type stored with the object

        Returns:
            Public URL of the stored object

        Raises:
            FileUploadError: If the file is rejected or the upload fails
        """
        extension = self._validate(filename, content)
        if not self.bucket_name:
            raise FileUploadError('File storage is not configured')

        key = f'{self.prefix}{uuid4()}.{extension}'
        put_kwargs = {'Bucket': self.bucket_name, 'Key': key, 'Body': content}
        if content_type:
            put_kwargs['ContentType'] = content_type

        try:
            self.client.put_object(**put_kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error("Failed to upload file to S3", extra={"bucket": self.bucket_name, "key": key, "error": str(e)})
            raise FileUploadError(f'Failed to upload file: {str(e)}') from e

        metrics.add_metric(name="FileUploaded", unit=MetricUnit.Count, value=1)
        logger.info("File uploaded", extra={"bucket": self.bucket_name, "key": key, "size": len(content)})
        return f'https://{self.bucket_name}.s3.amazonaws.com/{key}'

    @tracer.capture_method
    def delete_file(self, file_url: Optional[str]) -> None:
        """Delete a previously uploaded file by URL. Failures are only logged."""
        if not file_url or S3_HOST_SUFFIX not in file_url:
            return

        key = file_url.split(S3_HOST_SUFFIX, 1)[1]
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=key)
            logger.info("File deleted", extra={"bucket": self.bucket_name, "key": key})
        except (ClientError, BotoCoreError) as e:
            logger.warning("Failed to delete file from S3", extra={"key": key, "error": str(e)})
