"""
Google Cloud Storage service for uploaded document files.
"""

from datetime import timedelta
from typing import BinaryIO, Optional, Tuple
from google.cloud import storage


def parse_gcs_path(gcs_path: str) -> Tuple[str, str]:
    """
    Split a gs://bucket/path key into (bucket, blob path).

    Raises:
        ValueError: If the key is not a gs:// URI with a blob path
    """
    if not gcs_path or not gcs_path.startswith("gs://"):
        raise ValueError(f"Invalid GCS path: {gcs_path}")

    parts = gcs_path.replace("gs://", "", 1).split("/", 1)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ValueError(f"Invalid GCS path format: {gcs_path}")

    return parts[0], parts[1]


class StorageService:
    """
    Service for storing document files in Google Cloud Storage.

    Attributes:
        project_id: GCP project identifier
        bucket_name: Bucket that receives uploads
    """

    def __init__(self, project_id: str, bucket_name: str, client: Optional[storage.Client] = None):
        """
        Initialize the storage service.

        Args:
            project_id: GCP project identifier
            bucket_name: Bucket that receives uploads
            client: Pre-built storage client (created on first use when omitted)
        """
        self.project_id = project_id
        self.bucket_name = bucket_name
        self._client = client

    @property
    def client(self) -> storage.Client:
        if self._client is None:
            self._client = storage.Client(project=self.project_id)
        return self._client

    def upload_file(
        self,
        file_obj: BinaryIO,
        destination_blob_name: str,
        content_type: Optional[str] = None
    ) -> str:
        """
        Upload a file to the upload bucket.

        Args:
            file_obj: File-like object to upload
            destination_blob_name: Destination path in the bucket
            content_type: MIME type of the file

        Returns:
            GCS URI of the uploaded file, used as the document's file key
        """
        bucket = self.client.bucket(self.bucket_name)
        blob = bucket.blob(destination_blob_name)

        if content_type:
            blob.content_type = content_type

        blob.upload_from_file(file_obj, rewind=True)

        return f"gs://{self.bucket_name}/{destination_blob_name}"

    def delete_file(self, gcs_path: str) -> bool:
        """
        Delete a file from GCS.

        Args:
            gcs_path: Path to file (gs://bucket/path)

        Returns:
            True if file was deleted, False if file didn't exist

        Raises:
            ValueError: If the path is not a GCS URI
        """
        bucket_name, blob_path = parse_gcs_path(gcs_path)
        blob = self.client.bucket(bucket_name).blob(blob_path)

        # Check if file exists before attempting delete
        if blob.exists():
            blob.delete()
            return True
        return False

    def generate_signed_url(self, gcs_path: str, expiration_minutes: int = 15) -> str:
        """
        Generate a signed URL for file download.

        Args:
            gcs_path: Path to file (gs://bucket/path)
            expiration_minutes: URL expiration time in minutes (default: 15)

        Returns:
            Signed URL string that expires after specified minutes
        """
        bucket_name, blob_path = parse_gcs_path(gcs_path)
        blob = self.client.bucket(bucket_name).blob(blob_path)

        return blob.generate_signed_url(
            version="v4",
            expiration=timedelta(minutes=expiration_minutes),
            method="GET"
        )
