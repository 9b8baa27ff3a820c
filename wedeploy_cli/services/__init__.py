"""
WeDeploy CLI Services Layer

API transport and resource clients shared by commands, machines and watchers.
"""

from .api_client import APIClient
from .projects_client import ProjectsClient
from .services_client import ServicesClient
from .activities_client import ActivitiesClient
from .logs_client import LogsClient

__all__ = [
    "APIClient",
    "ProjectsClient",
    "ServicesClient",
    "ActivitiesClient",
    "LogsClient",
]
