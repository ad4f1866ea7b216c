"""
Project record operations against the projects table.

ProjectService wraps the injected table and storage clients: listing and
fetching projects, saving validated form values, uploading project images
and deleting projects.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from ..backend import StorageClient, TableClient
from ..config import TrackerConfig
from ..exceptions import BackendError, RecordNotFoundError, StorageError, TrackerError
from ..models import ApprovalStatus, CRM_MANAGED_FIELDS, ProjectRecord
from .validation import ProjectFormValidator


@dataclass
class ImageUpload:
    """An image file chosen in the form."""

    name: str
    data: bytes


class ProjectService:
    """
    Reads and writes project records.

    Approval fields belong to the CRM: new projects are inserted as pending
    and updates never carry approval fields.
    """

    def __init__(self, table_client: TableClient,
                 storage_client: Optional[StorageClient] = None,
                 config: Optional[TrackerConfig] = None,
                 validator: Optional[ProjectFormValidator] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the service.

        Args:
            table_client: Client for the projects table
            storage_client: Optional client for image storage
            config: Tracker configuration (table and bucket names)
            validator: Optional form validator
            logger: Optional logger instance
        """
        self.table_client = table_client
        self.storage_client = storage_client
        self.config = config or TrackerConfig()
        self.validator = validator or ProjectFormValidator()
        self.logger = logger or logging.getLogger(__name__)

    @property
    def table(self) -> str:
        return self.config.projects_table

    def list_projects(self, status: str = "all") -> List[ProjectRecord]:
        """
        List projects, newest first.

        Args:
            status: ``all`` or an approval status value

        Returns:
            List of ProjectRecord objects
        """
        filters = None
        if status != "all":
            filters = {'approval_status': ApprovalStatus(status).value}

        rows = self._call('select', lambda: self.table_client.select(
            self.table, filters=filters, order_by='created_at', descending=True
        ))
        records = [ProjectRecord.from_row(row) for row in rows]
        self.logger.debug(f"Fetched {len(records)} projects (status={status})")
        return records

    def get_project(self, project_id: str) -> ProjectRecord:
        """
        Fetch a single project.

        Raises:
            RecordNotFoundError: If no project has this id
        """
        rows = self._call('select', lambda: self.table_client.select(
            self.table, filters={'id': project_id}
        ))
        if not rows:
            raise RecordNotFoundError(
                f"Project not found: {project_id}",
                table=self.table,
                record_id=project_id
            )
        return ProjectRecord.from_row(rows[0])

    def save_project(self, values: Dict[str, Any], project_id: Optional[str] = None,
                     images: Iterable[ImageUpload] = ()) -> str:
        """
        Validate and store form values, then upload any images.

        Args:
            values: Raw form values
            project_id: Id of the project being edited; None creates a project
            images: New images to attach

        Returns:
            Id of the saved project

        Raises:
            ValidationError: If the values are invalid
            BackendError: If the table rejects the write
            StorageError: If an image cannot be uploaded
        """
        form = self.validator.validate(values)
        payload = form.to_payload()

        if project_id:
            self._call('update', lambda: self.table_client.update(
                self.table, project_id, strip_crm_fields(payload)
            ))
            target_id = project_id
            self.logger.info(f"Updated project {target_id}")
        else:
            payload['approval_status'] = ApprovalStatus.PENDING.value
            row = self._call('insert', lambda: self.table_client.insert(self.table, payload))
            target_id = str(row['id'])
            self.logger.info(f"Created project {target_id}")

        images = list(images)
        if images:
            existing = self.get_project(target_id).images if project_id else []
            self.attach_images(target_id, images, existing)

        return target_id

    def attach_images(self, project_id: str, images: List[ImageUpload],
                      existing: Optional[List[str]] = None) -> List[str]:
        """
        Upload images and append their public URLs to the project.

        Returns:
            The full list of image URLs stored on the project
        """
        if self.storage_client is None:
            raise StorageError("No storage client configured for image uploads",
                               bucket=self.config.images_bucket)

        bucket = self.config.images_bucket
        urls = list(existing or [])

        for image in images:
            path = f"{project_id}/{int(time.time() * 1000)}-{image.name}"
            try:
                self.storage_client.upload(bucket, path, image.data, upsert=False)
            except Exception as e:
                message = str(e).lower()
                if 'bucket' in message or 'not found' in message:
                    raise StorageError(
                        f"Storage bucket '{bucket}' not found. Create the bucket or remove image uploads.",
                        bucket=bucket, path=path, original_error=e
                    )
                raise StorageError(f"Image upload failed: {e}", bucket=bucket, path=path,
                                   original_error=e)

            url = self.storage_client.public_url(bucket, path)
            if url:
                urls.append(url)

        self._call('update', lambda: self.table_client.update(self.table, project_id, {'images': urls}))
        self.logger.info(f"Attached {len(images)} image(s) to project {project_id}")
        return urls

    def delete_project(self, project_id: str):
        self._call('delete', lambda: self.table_client.delete(self.table, project_id))
        self.logger.info(f"Deleted project {project_id}")

    def _call(self, operation: str, func):
        try:
            return func()
        except TrackerError:
            raise
        except Exception as e:
            raise BackendError(
                f"{operation} on {self.table} failed: {e}",
                table=self.table,
                operation=operation,
                original_error=e
            )


def strip_crm_fields(row: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``row`` without the CRM-managed approval fields."""
    return {key: value for key, value in row.items() if key not in CRM_MANAGED_FIELDS}
