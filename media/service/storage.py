"""
Object storage on S3.

Writes downloaded payloads and reads the cookies object. Bucket lifecycle
(expiry of stored videos) is managed outside this code.
"""

from pathlib import Path

import boto3


class S3ObjectStore:
    """Thin wrapper over a boto3 S3 client"""

    def __init__(self, client=None, region=None, logger=None):
        self.client = client or boto3.client('s3', region_name=region)
        self.logger = logger

    def log(self, message):
        if self.logger:
            self.logger(message)

    def upload_file(self, local_path, bucket, key, content_type=None):
        """
        Upload a local file.

        Args:
            local_path: File to upload (Path object or str)
            bucket: Destination bucket
            key: Destination object key
            content_type: Optional MIME type

        Returns:
            str: s3:// URI of the stored object
        """
        extra_args = {}
        if content_type:
            extra_args['ContentType'] = content_type

        self.log(f'upload s3://{bucket}/{key} size={Path(local_path).stat().st_size}')
        self.client.upload_file(str(local_path), bucket, key, ExtraArgs=extra_args)
        return f's3://{bucket}/{key}'

    def download_file(self, bucket, key, local_path):
        """Download one object to a local path. boto3 errors propagate."""
        self.log(f'download s3://{bucket}/{key}')
        self.client.download_file(bucket, key, str(local_path))
        return Path(local_path)
