# quotation_generator/services/azure_storage.py
# Azure Blob Storage for company assets, with a local-disk fallback

import io
import os
import logging
from datetime import datetime
from typing import Optional, Tuple
from uuid import uuid4

from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.storage.blob import BlobServiceClient, ContentSettings
from PIL import Image, UnidentifiedImageError
from werkzeug.security import safe_join
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

IMAGE_CONTENT_TYPES = {
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'png': 'image/png',
    'gif': 'image/gif',
    'webp': 'image/webp',
}


class AzureStorageService:
    """Upload blobs to Azure when configured, otherwise to a local uploads folder"""

    def __init__(self, connection_string=None, container_name='company-assets', upload_folder='uploads'):
        self.connection_string = connection_string
        self.container_name = container_name
        self.upload_folder = upload_folder
        self.blob_service_client = None
        self.container_client = None
        self.use_azure = False

        if not connection_string:
            logger.warning("Azure Storage connection string not configured - using local storage fallback")
            return

        try:
            self.blob_service_client = BlobServiceClient.from_connection_string(connection_string)
            self.container_client = self.blob_service_client.get_container_client(container_name)
            self._ensure_container_exists()
            self.use_azure = True
            logger.info(f"Azure Blob Storage initialized - Container: {container_name}")
        except (AzureError, ValueError) as e:
            logger.error(f"Failed to initialize Azure Storage: {e}")
            self.blob_service_client = None
            self.container_client = None

    @classmethod
    def from_config(cls, config):
        return cls(
            connection_string=config.get('AZURE_STORAGE_CONNECTION_STRING'),
            container_name=config.get('AZURE_STORAGE_CONTAINER_NAME', 'company-assets'),
            upload_folder=config.get('UPLOAD_FOLDER', 'uploads'),
        )

    def _ensure_container_exists(self):
        try:
            self.container_client.get_container_properties()
        except ResourceNotFoundError:
            self.container_client.create_container(public_access='blob')
            logger.info(f"Created container: {self.container_name}")

    def _get_blob_name(self, folder: str, filename: str) -> str:
        """Random, collision-free blob name that keeps the original extension"""
        secure_name = secure_filename(filename) or 'upload'
        ext = secure_name.rsplit('.', 1)[-1].lower() if '.' in secure_name else 'bin'
        return f"{folder}/{uuid4().hex}.{ext}"

    def upload_file(self, file_content: bytes, filename: str, folder: str = 'general') -> Tuple[bool, str, Optional[str]]:
        """
        Upload a file to Azure Blob Storage or the local fallback

        Returns:
            Tuple of (success, message, public_url)
        """
        if self.use_azure:
            return self._upload_to_azure(file_content, filename, folder)
        return self._upload_to_local(file_content, filename, folder)

    def _upload_to_azure(self, file_content, filename, folder):
        blob_name = self._get_blob_name(folder, filename)
        try:
            blob_client = self.container_client.get_blob_client(blob_name)
            blob_client.upload_blob(
                file_content,
                overwrite=True,
                content_settings=ContentSettings(content_type=self._get_content_type(filename)),
                metadata={
                    'original_filename': secure_filename(filename),
                    'upload_timestamp': datetime.utcnow().isoformat(),
                },
            )
            logger.info(f"Successfully uploaded to Azure: {blob_name}")
            return True, 'File uploaded successfully', blob_client.url
        except AzureError as e:
            logger.error(f"Azure upload failed: {e}")
            return False, f"Azure upload failed: {str(e)}", None

    def _upload_to_local(self, file_content, filename, folder):
        blob_name = self._get_blob_name(folder, filename)
        local_path = os.path.join(self.upload_folder, blob_name)
        try:
            os.makedirs(os.path.dirname(local_path), exist_ok=True)
            with open(local_path, 'wb') as f:
                f.write(file_content)
        except OSError as e:
            logger.error(f"Local upload failed: {e}")
            return False, f"Local upload failed: {str(e)}", None

        logger.info(f"Successfully uploaded locally: {local_path}")
        return True, 'File uploaded successfully (local storage)', f"/uploads/{blob_name}"

    def delete_file(self, file_url: str) -> Tuple[bool, str]:
        if self.use_azure and file_url.startswith('https://'):
            blob_name = file_url.split(f'{self.container_name}/')[-1]
            try:
                self.container_client.delete_blob(blob_name)
                logger.info(f"Deleted from Azure: {blob_name}")
                return True, 'File deleted successfully'
            except ResourceNotFoundError:
                return True, 'File not found (already deleted)'
            except AzureError as e:
                logger.error(f"Azure deletion failed: {e}")
                return False, f"Azure deletion failed: {str(e)}"

        local_path = self.local_path(file_url)
        if local_path is None:
            logger.warning(f"Refusing to delete file outside the upload folder: {file_url}")
            return False, 'Refusing to delete file outside the upload folder'
        if os.path.isfile(local_path):
            try:
                os.remove(local_path)
            except OSError as e:
                logger.error(f"Local deletion failed: {e}")
                return False, f"Local deletion failed: {str(e)}"
            logger.info(f"Deleted local file: {local_path}")
            return True, 'File deleted successfully'
        return True, 'File not found (already deleted)'

    def local_path(self, file_url: str) -> Optional[str]:
        """Path inside the upload folder for an '/uploads/...' URL, or None"""
        if not file_url or not file_url.startswith('/uploads/'):
            return None
        return safe_join(self.upload_folder, file_url[len('/uploads/'):])

    def _get_content_type(self, filename: str) -> str:
        ext = filename.lower().rsplit('.', 1)[-1]
        return IMAGE_CONTENT_TYPES.get(ext, 'application/octet-stream')


def is_image(content: bytes) -> bool:
    """True when Pillow can identify the bytes as an image"""
    try:
        with Image.open(io.BytesIO(content)) as img:
            img.verify()
        return True
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        return False
