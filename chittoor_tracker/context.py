"""
Dashboard session context.

DashboardContext is built once when a dashboard session starts. It owns the
configuration, the logger and the injected backend clients, and hands out the
services that need them. ``close()`` tears everything down at session end.
"""

from typing import List, Optional

from .auth import AuthSession
from .backend import AuthProvider, RemoteTableSource, StorageClient, TableClient
from .config import TrackerConfig
from .data_loader import DataLoader
from .locations.reconciler import LocationReconciler, LocationSession
from .locations.selector import LocationSelector
from .logging_config import TrackerLogger, setup_logging
from .projects.feed import ProjectFeed
from .projects.service import ProjectService
from .models import ApprovalStatus


class DashboardContext:
    """Services of one dashboard session."""

    def __init__(self, config: TrackerConfig,
                 table_client: Optional[TableClient] = None,
                 storage_client: Optional[StorageClient] = None,
                 auth_provider: Optional[AuthProvider] = None,
                 remote_locations: Optional[RemoteTableSource] = None,
                 logger: Optional[TrackerLogger] = None):
        """
        Initialize the context.

        Args:
            config: Tracker configuration
            table_client: Client for the projects table
            storage_client: Client for image storage
            auth_provider: Authentication provider
            remote_locations: Source of the remote village/mandal table
            logger: Logger; one is built from the configuration when omitted
        """
        self.config = config
        self.logger = logger or setup_logging(config)
        self.table_client = table_client
        self.storage_client = storage_client
        self.data_loader = DataLoader(logger=self.logger)
        self.reconciler = LocationReconciler(
            remote_source=remote_locations,
            remote_table=config.remote_locations_table,
            logger=self.logger
        )
        self.auth = AuthSession(auth_provider, logger=self.logger) if auth_provider else None
        self._projects: Optional[ProjectService] = None
        self._villages_blob: Optional[str] = None
        self._location_sessions: List[LocationSession] = []
        self._open = False

    def open(self) -> 'DashboardContext':
        """Start the session: load the current user."""
        user = self.auth.start() if self.auth else None
        self._open = True
        self.logger.log_session_start(user.email if user else None)
        return self

    def close(self):
        """End the session: unmount location sessions and release subscriptions."""
        for session in self._location_sessions:
            session.unmount()
        self._location_sessions.clear()
        if not self._open:
            return
        if self.auth:
            self.auth.close()
        self._open = False
        self.logger.log_session_end()

    def __enter__(self) -> 'DashboardContext':
        return self.open()

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def projects(self) -> ProjectService:
        """Project service over the injected table and storage clients."""
        if self.table_client is None:
            raise RuntimeError("No table client configured for this session")
        if self._projects is None:
            self._projects = ProjectService(
                self.table_client,
                storage_client=self.storage_client,
                config=self.config,
                logger=self.logger
            )
        return self._projects

    def project_feed(self, status: str = "all") -> ProjectFeed:
        """A feed pre-loaded with the current project list."""
        status_filter = None if status == "all" else ApprovalStatus(status)
        feed = ProjectFeed(self.projects.list_projects(status), status_filter=status_filter,
                           logger=self.logger)
        self.logger.log_status_counts(feed.status_counts())
        return feed

    def villages_blob(self) -> str:
        """The local village/mandal blob, read once per session."""
        if self._villages_blob is None:
            self._villages_blob = self.data_loader.read_villages_blob(self.config.villages_file)
        return self._villages_blob

    def new_location_session(self) -> LocationSession:
        """A mounted location session for a project form."""
        session = LocationSession(self.reconciler, logger=self.logger)
        session.mount(self.villages_blob())
        self._location_sessions.append(session)
        return session

    def new_location_selector(self, session: LocationSession) -> LocationSelector:
        """A selector bound to ``session``; it follows mapping replacements."""
        selector = LocationSelector.from_config(session.mapping, self.config)
        session.subscribe(selector.replace_mapping)
        return selector
