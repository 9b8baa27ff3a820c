"""Tests for error aggregation and the exception hierarchy"""

from wedeploy_cli.exceptions import (
    APIFault,
    HookError,
    PortsUnavailableError,
    WeDeployError,
)
from wedeploy_cli.models.results import (
    ExecutionResult,
    FinalStates,
    LinkErrors,
    ServiceError,
    ServiceErrors,
)


class TestServiceErrors:
    def test_hook_failure_message(self):
        errors = ServiceErrors(
            [ServiceError(path="container_before_hook_failure", error=HookError("exit 1", 1))]
        )

        assert str(errors) == (
            "List of errors (format is container path: error)\n"
            "container_before_hook_failure: exit status 1"
        )

    def test_lists_every_item(self):
        errors = ServiceErrors(
            [
                ServiceError(path="a", error=ValueError("boom")),
                ServiceError(path="b", error=ValueError("bang")),
            ]
        )

        assert len(errors) == 2
        assert str(errors).splitlines()[1:] == ["a: boom", "b: bang"]

    def test_link_errors_banner(self):
        errors = LinkErrors([ServiceError(path="web", error=ValueError("down"))])

        assert str(errors) == "Linking errors:\nweb: down"
        assert isinstance(errors, ServiceErrors)


class TestExecutionResult:
    def test_success(self):
        result = ExecutionResult(returncode=0, stdout="ok\n")

        assert result.is_success
        assert not result.is_failure
        assert result.output == "ok"

    def test_failure_output_combines_streams(self):
        result = ExecutionResult(returncode=2, stdout="out", stderr="err")

        assert result.is_failure
        assert result.output == "out\nerr"


class TestFinalStates:
    def test_has_failures(self):
        assert not FinalStates(succeeded=["web"]).has_failures
        assert FinalStates(build_failed=["web"]).has_failures
        assert FinalStates(deploy_failed=["api"]).has_failures


class TestExceptions:
    def test_context_is_appended(self):
        error = WeDeployError("Something failed", "Try again")

        assert str(error) == "Something failed\nContext: Try again"

    def test_ports_unavailable_lists_ports(self):
        error = PortsUnavailableError([80, 8080])

        assert error.ports == [80, 8080]
        assert "80\n8080" in str(error)

    def test_api_fault_from_response(self):
        fault = APIFault.from_response(
            "POST",
            "http://localhost/projects",
            400,
            {
                "status": 400,
                "message": "Bad Request",
                "errors": [{"reason": "projectAlreadyExists", "context": {"message": "exists"}}],
            },
        )

        assert fault.status == 400
        assert fault.has("projectAlreadyExists")
        assert fault.get("projectAlreadyExists") == "exists"
        assert not fault.has("notFound")

    def test_api_fault_without_json_body(self):
        fault = APIFault.from_response("GET", "http://localhost/projects", 502, None)

        assert fault.status == 502
        assert fault.errors == []
