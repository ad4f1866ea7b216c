"""
Data loading module.

This module provides the DataLoader class for reading the village/mandal
blob (bundled with the package or supplied by the user) and project exports
produced by the projects table.
"""

import json
import logging
from importlib import resources
from pathlib import Path
from typing import List, Optional, Any

import pandas as pd

from .models import ProjectRecord
from .exceptions import DataLoadError, FileAccessError
from .utils.data_utils import is_null_or_empty
from .utils.error_handler import (
    RetryConfig, safe_file_operation, create_error_context, log_error_details
)


BUNDLED_VILLAGES = "villages.csv"

REQUIRED_PROJECT_COLUMNS = ['id', 'project_name']


class DataLoader:
    """
    Handles loading of the location blob and project exports.

    The location blob is returned as raw text: its line syntax (village names
    may contain commas) is parsed by the location reconciler, not by a CSV
    reader.
    """

    def __init__(self, logger: Optional[logging.Logger] = None,
                 retry_config: Optional[RetryConfig] = None):
        """
        Initialize the DataLoader.

        Args:
            logger: Optional logger instance for logging operations
            retry_config: Optional retry configuration for file operations
        """
        self.logger = logger or logging.getLogger(__name__)
        self.retry_config = retry_config or RetryConfig(max_attempts=3, base_delay=0.5)

    def read_villages_blob(self, file_path: Optional[str] = None) -> str:
        """
        Read the village/mandal text blob.

        Args:
            file_path: Path to a villages file; the bundled file is used when omitted

        Returns:
            The file contents as text (UTF-8, BOM stripped)

        Raises:
            FileAccessError: If a given file cannot be read
            DataLoadError: If a given file is not valid UTF-8
        """
        if not file_path:
            text = resources.files('chittoor_tracker.data').joinpath(BUNDLED_VILLAGES).read_text(
                encoding='utf-8-sig'
            )
            self.logger.debug(f"Read bundled villages data ({len(text.splitlines())} lines)")
            return text

        path = Path(file_path)
        try:
            text = safe_file_operation(
                operation=lambda: path.read_text(encoding='utf-8-sig'),
                file_path=path,
                operation_name="read villages file",
                retry_config=self.retry_config,
                logger=self.logger
            )
        except UnicodeDecodeError as e:
            raise DataLoadError(
                f"Villages file is not valid UTF-8: {e}",
                file_path=str(file_path),
                original_error=e
            )
        self.logger.info(f"Read villages file: {file_path} ({len(text.splitlines())} lines)")
        return text

    def load_projects(self, file_path: str) -> List[ProjectRecord]:
        """
        Load project records from a CSV or JSON export.

        Args:
            file_path: Path to the export (``.json`` is read as JSON records,
                anything else as CSV)

        Returns:
            List of ProjectRecord objects in file order

        Raises:
            DataLoadError: If the file cannot be parsed or lacks required columns
        """
        self.logger.info(f"Loading projects from: {file_path}")
        path = Path(file_path)

        if not path.is_file():
            raise FileAccessError(
                f"Projects file not found: {file_path}",
                file_path=file_path,
                operation="read"
            )

        try:
            df = safe_file_operation(
                operation=lambda: self._read_frame(path),
                file_path=path,
                operation_name="read projects export",
                retry_config=self.retry_config,
                logger=self.logger
            )
        except ValueError as e:
            # pandas ParserError and JSONDecodeError are both ValueErrors
            raise DataLoadError(
                f"Error parsing projects file: {e}",
                file_path=file_path,
                original_error=e
            )

        if df.empty:
            self.logger.warning(f"Projects file contains no rows: {file_path}")
            return []

        df.columns = [str(col).strip() for col in df.columns]
        missing = [col for col in REQUIRED_PROJECT_COLUMNS if col not in df.columns]
        if missing:
            raise DataLoadError(
                f"Projects file is missing required columns: {missing}",
                file_path=file_path
            )

        records = []
        for index, row in enumerate(df.to_dict(orient='records')):
            row['images'] = parse_image_list(row.get('images'))
            try:
                records.append(ProjectRecord.from_row(row))
            except (TypeError, ValueError) as e:
                context = create_error_context(
                    operation="load_projects",
                    file_path=file_path,
                    row_index=index
                )
                log_error_details(self.logger, e, context, severity='low')

        self.logger.info(f"Loaded {len(records)} project records")
        return records

    def _read_frame(self, path: Path) -> pd.DataFrame:
        if path.suffix.lower() == '.json':
            with open(path, 'r', encoding='utf-8') as fh:
                data = json.load(fh)
            if isinstance(data, dict):
                data = data.get('data', [])
            return pd.DataFrame(data)
        return pd.read_csv(path, dtype=str, keep_default_na=False)


def parse_image_list(value: Any) -> List[str]:
    """
    Parse an ``images`` cell into a list of URLs.

    Accepts a list, a JSON array string, or a ``;`` separated string.
    """
    if isinstance(value, list):
        return [str(v) for v in value if not is_null_or_empty(v)]
    if is_null_or_empty(value):
        return []

    text = str(value).strip()
    if text.startswith('['):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return [str(v) for v in parsed if not is_null_or_empty(v)]

    return [part.strip() for part in text.split(';') if part.strip()]
