"""issueboard - client for a project / issue / comment tracking REST service.

High-level public API:

from issueboard import ApiClients, ProjectListController
from issueboard.host import ConsoleHost

clients = ApiClients()  # base URL from ISSUEBOARD_API_BASE_URL
projects = ProjectListController(ConsoleHost(), clients.projects)
state = asyncio.run(projects.mount())
print(state.status, [p.name for p in state.rows])

The CLI (``issueboard``) renders the same controllers in a terminal.
"""

from __future__ import annotations

from .comment_thread import CommentThreadController, ThreadState
from .config import API_BASE_URL, ClientConfig, load_config
from .errors import ConfigError, RequestError
from .form_controller import IssueFormController, ProjectFormController
from .http_client import HttpClient
from .list_controller import IssueTableController, ProjectListController
from .models import (
    Comment,
    CreateCommentData,
    CreateIssueData,
    CreateProjectData,
    Issue,
    IssueStatus,
    Project,
)
from .resources import ApiClients, CommentsClient, IssuesClient, ProjectsClient
from .state import FormState, ListState, ListStatus, Reconcile

# Version constant (sync manually with pyproject)
__version__ = "0.1.0"

__all__ = [
    "API_BASE_URL",
    "ApiClients",
    "ClientConfig",
    "Comment",
    "CommentThreadController",
    "CommentsClient",
    "ConfigError",
    "CreateCommentData",
    "CreateIssueData",
    "CreateProjectData",
    "FormState",
    "HttpClient",
    "Issue",
    "IssueFormController",
    "IssueStatus",
    "IssueTableController",
    "IssuesClient",
    "ListState",
    "ListStatus",
    "Project",
    "ProjectFormController",
    "ProjectListController",
    "ProjectsClient",
    "Reconcile",
    "RequestError",
    "ThreadState",
    "load_config",
    "__version__",
]
