"""Tests for the HTTP transport and resource clients"""

from unittest.mock import MagicMock

import pytest
import requests

from wedeploy_cli.exceptions import (
    APIConnectionError,
    APIFault,
    APIFaultError,
    InvalidProjectIDError,
)
from wedeploy_cli.models.activity import ActivityFilter
from wedeploy_cli.models.descriptors import ServiceDescriptor
from wedeploy_cli.services import (
    APIClient,
    ActivitiesClient,
    ProjectsClient,
    ServicesClient,
)


def response(status=200, body=None):
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status
    resp.content = b"x" if body is not None else b""
    resp.json.return_value = body
    resp.url = "http://localhost/projects"
    resp.request = MagicMock(method="GET")
    return resp


@pytest.fixture
def session():
    s = MagicMock(spec=requests.Session)
    s.headers = {}
    s.auth = None
    return s


class TestAPIClient:
    def test_bearer_token(self, cloud_context, session):
        APIClient(cloud_context, session=session)

        assert session.headers["Authorization"] == "Bearer secret-token"
        assert session.headers["User-Agent"].startswith("WeDeploy CLI/")

    def test_url(self, context, session):
        client = APIClient(context, session=session)

        assert client.url("/projects") == "http://localhost/projects"
        assert client.url("https://other/x") == "https://other/x"

    def test_get_decodes_json(self, context, session):
        session.request.return_value = response(body=[{"projectId": "photos"}])

        data = APIClient(context, session=session).get("/projects", timeout=5)

        assert data == [{"projectId": "photos"}]
        session.request.assert_called_once_with(
            "GET", "http://localhost/projects", params=None, json=None, timeout=5
        )

    def test_error_status_raises_fault(self, context, session):
        session.request.return_value = response(
            404, {"status": 404, "errors": [{"reason": "notFound", "context": {}}]}
        )

        with pytest.raises(APIFault) as exc_info:
            APIClient(context, session=session).get("/projects/x")

        assert exc_info.value.status == 404
        assert exc_info.value.has("notFound")

    def test_connection_error(self, context, session):
        session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(APIConnectionError):
            APIClient(context, session=session).get("/projects")


class TestProjectsClient:
    def test_validate_or_create_creates(self):
        api = MagicMock()
        api.post.return_value = {"projectId": "photos"}

        assert ProjectsClient(api).validate_or_create("photos") is True

    @pytest.mark.parametrize("reason", ["projectAlreadyExists", "invalidDocumentValue"])
    def test_existing_project_is_success(self, reason):
        api = MagicMock()
        api.post.side_effect = APIFault(status=400, errors=[APIFaultError(reason=reason)])

        assert ProjectsClient(api).validate_or_create("photos") is False

    def test_other_faults_propagate(self):
        api = MagicMock()
        api.post.side_effect = APIFault(status=403, errors=[APIFaultError(reason="restricted")])

        with pytest.raises(APIFault):
            ProjectsClient(api).validate_or_create("photos")

    def test_list_with_services(self):
        api = MagicMock()
        api.get.side_effect = [
            [{"projectId": "photos", "health": "up"}],
            [{"serviceId": "web", "health": "up"}],
        ]

        projects = ProjectsClient(api).list_with_services()

        assert projects[0].project_id == "photos"
        assert projects[0].services[0].service_id == "web"


class TestServicesClient:
    def test_existing_service_is_success(self):
        api = MagicMock()
        api.post.side_effect = APIFault(
            status=400, errors=[APIFaultError(reason="serviceAlreadyExists")]
        )

        created = ServicesClient(api).validate_or_create("photos", ServiceDescriptor(id="web"))

        assert created is False

    def test_catalog_sorted_by_image(self):
        api = MagicMock()
        api.get.return_value = {
            "b": {"image": "wedeploy/hosting", "name": "Hosting"},
            "a": {"image": "wedeploy/data", "name": "Data"},
        }

        catalog = ServicesClient(api).catalog()

        assert [item.image for item in catalog] == ["wedeploy/data", "wedeploy/hosting"]

    def test_env_as_mapping(self):
        api = MagicMock()
        api.get.return_value = {"B": "2", "A": "1"}

        envs = ServicesClient(api).get_env("photos", "web")

        assert [(e.name, e.value) for e in envs] == [("A", "1"), ("B", "2")]


class TestActivitiesClient:
    def test_empty_project(self):
        with pytest.raises(InvalidProjectIDError):
            ActivitiesClient(MagicMock()).list("")

    def test_list_passes_filter(self):
        api = MagicMock()
        api.get.return_value = [{"id": "1", "type": "BUILD_STARTED"}]

        activities = ActivitiesClient(api).list("photos", ActivityFilter(group_uid="g1"))

        assert len(activities) == 1
        assert api.get.call_args.kwargs["params"] == {"groupUid": "g1"}


class TestRestartAndDelete:
    def test_restart_service(self):
        api = MagicMock()

        ServicesClient(api).restart("photos", "web")

        api.post.assert_called_once_with(
            "/restart/service", params={"projectId": "photos", "serviceId": "web"}
        )

    def test_restart_project(self):
        api = MagicMock()

        ProjectsClient(api).restart("photos")

        api.post.assert_called_once_with("/restart/project", params={"projectId": "photos"})

    def test_delete_project(self):
        api = MagicMock()

        ProjectsClient(api).delete("photos")

        api.delete.assert_called_once_with("/projects/photos")
