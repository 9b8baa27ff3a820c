"""Tests for hooks, packaging, rate limiting and working directory discovery"""

import threading
import zipfile
from unittest.mock import patch

import pytest

from wedeploy_cli.core.hooks import run_hook
from wedeploy_cli.core.packager import iter_files, pack
from wedeploy_cli.core.rate_limit import RateLimiter
from wedeploy_cli.core.workdir import (
    discover_services,
    find_project_root,
    find_service_root,
)
from wedeploy_cli.exceptions import HookError, ValidationError


class TestRunHook:
    def test_success(self, tmp_path):
        with patch("wedeploy_cli.core.hooks.subprocess.run") as run:
            run.return_value.returncode = 0
            run_hook("npm run build", cwd=tmp_path)

        run.assert_called_once_with(["npm", "run", "build"], cwd=str(tmp_path))

    def test_failure_raises(self):
        with patch("wedeploy_cli.core.hooks.subprocess.run") as run:
            run.return_value.returncode = 1
            with pytest.raises(HookError) as exc_info:
                run_hook("false")

        assert str(exc_info.value) == "exit status 1"

    def test_empty_command_is_noop(self):
        with patch("wedeploy_cli.core.hooks.subprocess.run") as run:
            run_hook("   ")

        run.assert_not_called()


class TestPackager:
    def test_pack_skips_ignored(self, tmp_path):
        source = tmp_path / "web"
        (source / ".git").mkdir(parents=True)
        (source / ".git" / "HEAD").write_text("ref")
        (source / "node_modules").mkdir()
        (source / "node_modules" / "dep.js").write_text("x")
        (source / "index.html").write_text("hi")
        (source / "service.json").write_text('{"id": "web"}')

        bundle = pack(source, ignore=["node_modules"])
        try:
            with zipfile.ZipFile(bundle.path) as archive:
                names = sorted(archive.namelist())
            assert names == ["index.html", "service.json"]
            assert bundle.size == bundle.path.stat().st_size
            assert len(bundle.sha1) == 40
        finally:
            bundle.cleanup()

        assert not bundle.path.exists()

    def test_iter_files_nested(self, tmp_path):
        (tmp_path / "a" / "b").mkdir(parents=True)
        (tmp_path / "a" / "b" / "c.txt").write_text("c")

        assert [rel for _, rel in iter_files(tmp_path)] == ["a/b/c.txt"]


class TestRateLimiter:
    def test_first_slot_is_immediate(self):
        clock = iter([0.0, 0.2, 0.4]).__next__
        limiter = RateLimiter(1.0, clock=clock)

        assert limiter.reserve() == 0.0
        assert limiter.reserve() == pytest.approx(0.8)
        assert limiter.reserve() == pytest.approx(1.6)

    def test_slot_after_interval(self):
        clock = iter([0.0, 1.5]).__next__
        limiter = RateLimiter(1.0, clock=clock)

        limiter.reserve()
        assert limiter.reserve() == 0.0

    def test_wait_returns_false_when_stopped(self):
        stop = threading.Event()
        stop.set()
        limiter = RateLimiter(10)

        limiter.reserve()
        assert limiter.wait(stop) is False

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            RateLimiter(0)


class TestWorkdir:
    def test_find_roots(self, project_dir):
        web = project_dir / "web"

        assert find_project_root(web) == project_dir.resolve()
        assert find_service_root(web) == web.resolve()
        assert find_service_root(project_dir) is None

    def test_discover_services(self, project_dir):
        services = discover_services(project_dir)

        assert [s.id for s in services] == ["api", "web"]

    def test_noservice_marker(self, project_dir, make_service):
        make_service("docs/site", service_id="site", root=project_dir)
        (project_dir / "docs" / ".noservice").write_text("")

        assert [s.id for s in discover_services(project_dir)] == ["api", "web"]

    def test_duplicated_ids(self, project_dir, make_service):
        make_service("other", service_id="web", root=project_dir)

        with pytest.raises(ValidationError):
            discover_services(project_dir)
