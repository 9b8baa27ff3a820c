"""Tests for the concurrent deploy machine"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from wedeploy_cli.core.packager import Bundle
from wedeploy_cli.deploy.machine import DeployFlags, DeployMachine, deploy_all
from wedeploy_cli.exceptions import APIFault, APIFaultError, HookError
from wedeploy_cli.models.results import ServiceErrors


def fake_packer(tmp_path):
    def _pack(directory, ignore=None):
        path = tmp_path / f"{Path(directory).name}.pod"
        path.write_bytes(b"zip")
        return Bundle(path=path, size=3, sha1="0" * 40)

    return _pack


class TestDeployMachine:
    def test_single_service_ready(self, context, tmp_path, make_service, projects_client, services_client):
        make_service("mycontainer")

        deployment = deploy_all(
            context,
            "project",
            ["mycontainer"],
            projects_client,
            services_client,
            base_dir=tmp_path,
            packer=fake_packer(tmp_path),
        )

        assert "Ready! mycontainer.project.wedeploy.me" in deployment.success
        assert deployment.group_uid == "group-1"
        assert deployment.service_ids == ["mycontainer"]
        assert deployment.started_at > 0

    def test_failures_are_isolated(self, context, tmp_path, make_service, projects_client, services_client):
        for name in ("ok1", "bad1", "ok2", "bad2", "ok3"):
            make_service(name)

        def upload(project_id, service_id, bundle):
            if service_id.startswith("bad"):
                raise APIFault(status=500, message="upload failed")
            return "group-1"

        services_client.upload_bundle.side_effect = upload
        machine = DeployMachine(
            context,
            "photos",
            projects_client,
            services_client,
            base_dir=tmp_path,
            packer=fake_packer(tmp_path),
        )

        with pytest.raises(ServiceErrors) as exc_info:
            machine.run(["ok1", "bad1", "ok2", "bad2", "ok3"])

        failed = sorted(item.path for item in exc_info.value.items)
        assert failed == ["bad1", "bad2"]
        assert sorted(machine.service_ids) == ["ok1", "ok2", "ok3"]

    def test_missing_descriptor_is_tagged_by_path(self, context, tmp_path, projects_client, services_client):
        (tmp_path / "empty").mkdir()
        machine = DeployMachine(
            context, "photos", projects_client, services_client, base_dir=tmp_path
        )

        with pytest.raises(ServiceErrors) as exc_info:
            machine.run(["empty"])

        assert exc_info.value.items[0].path == "empty"
        services_client.upload_bundle.assert_not_called()

    def test_before_hook_failure(self, context, tmp_path, make_service, projects_client, services_client):
        make_service("container_before_hook_failure", hooks={"before_deploy": "false"})

        def failing_hook(command, cwd=None):
            raise HookError(command, 1)

        with pytest.raises(ServiceErrors) as exc_info:
            deploy_all(
                context,
                "photos",
                ["container_before_hook_failure"],
                projects_client,
                services_client,
                flags=DeployFlags(hooks=True),
                base_dir=tmp_path,
                hook_runner=failing_hook,
                packer=fake_packer(tmp_path),
            )

        assert str(exc_info.value) == (
            "List of errors (format is container path: error)\n"
            "container_before_hook_failure: exit status 1"
        )
        services_client.upload_bundle.assert_not_called()

    def test_hooks_skipped_without_flag(self, context, tmp_path, make_service, projects_client, services_client):
        make_service("web", hooks={"before_deploy": "false", "after_deploy": "false"})
        hook_runner = MagicMock()

        deploy_all(
            context,
            "photos",
            ["web"],
            projects_client,
            services_client,
            base_dir=tmp_path,
            hook_runner=hook_runner,
            packer=fake_packer(tmp_path),
        )

        hook_runner.assert_not_called()

    def test_hooks_run_around_upload(self, context, tmp_path, make_service, projects_client, services_client):
        make_service("web", hooks={"before_deploy": "make", "after_deploy": "notify"})
        calls = []
        services_client.upload_bundle.side_effect = lambda *a: calls.append("upload") or "g"

        deploy_all(
            context,
            "photos",
            ["web"],
            projects_client,
            services_client,
            flags=DeployFlags(hooks=True),
            base_dir=tmp_path,
            hook_runner=lambda command, cwd=None: calls.append(command),
            packer=fake_packer(tmp_path),
        )

        assert calls == ["make", "upload", "notify"]

    def test_project_created_once(self, context, tmp_path, make_service, projects_client, services_client):
        for name in ("a", "b", "c"):
            make_service(name)
        projects_client.validate_or_create.return_value = True

        deployment = deploy_all(
            context,
            "photos",
            ["a", "b", "c"],
            projects_client,
            services_client,
            base_dir=tmp_path,
            packer=fake_packer(tmp_path),
        )

        projects_client.validate_or_create.assert_called_once_with("photos")
        assert deployment.success.count("New project photos created") == 1

    def test_project_rejection_fails_every_service(self, context, tmp_path, make_service, projects_client, services_client):
        make_service("a")
        make_service("b")
        projects_client.validate_or_create.side_effect = APIFault(
            status=403, errors=[APIFaultError(reason="restricted")]
        )

        with pytest.raises(ServiceErrors) as exc_info:
            deploy_all(
                context,
                "photos",
                ["a", "b"],
                projects_client,
                services_client,
                base_dir=tmp_path,
                packer=fake_packer(tmp_path),
            )

        assert sorted(item.path for item in exc_info.value.items) == ["a", "b"]

    def test_mixed_group_uids(self, context, tmp_path, make_service, projects_client, services_client):
        make_service("a")
        make_service("b")
        services_client.upload_bundle.side_effect = lambda p, s, b: f"group-{s}"

        deployment = deploy_all(
            context,
            "photos",
            ["a", "b"],
            projects_client,
            services_client,
            base_dir=tmp_path,
            packer=fake_packer(tmp_path),
        )

        assert deployment.group_uid is None
        assert deployment.group_uids == {"a": "group-a", "b": "group-b"}

    def test_bundle_removed_after_upload(self, context, tmp_path, make_service, projects_client, services_client):
        make_service("web")
        packer = fake_packer(tmp_path)

        deploy_all(
            context,
            "photos",
            ["web"],
            projects_client,
            services_client,
            base_dir=tmp_path,
            packer=packer,
        )

        assert not (tmp_path / "web.pod").exists()
