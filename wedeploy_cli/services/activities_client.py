"""Activities API client"""

from typing import Optional
from urllib.parse import quote

from wedeploy_cli.constants import ACTIVITIES_TIMEOUT
from wedeploy_cli.exceptions import InvalidProjectIDError
from wedeploy_cli.models.activity import Activities, Activity, ActivityFilter
from wedeploy_cli.services.api_client import APIClient


class ActivitiesClient:
    def __init__(self, api: APIClient):
        self.api = api

    def list(
        self,
        project_id: str,
        activity_filter: Optional[ActivityFilter] = None,
        timeout: float = ACTIVITIES_TIMEOUT,
    ) -> Activities:
        """
        List activities of a project, newest first.

        Raises:
            InvalidProjectIDError: project_id is empty
        """
        if not project_id:
            raise InvalidProjectIDError(project_id)

        params = (activity_filter or ActivityFilter()).to_params()
        data = self.api.get(
            f"/projects/{quote(project_id)}/activities",
            params=params,
            timeout=timeout,
        ) or []
        return Activities([Activity.from_dict(a) for a in data])
