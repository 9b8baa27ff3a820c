"""
Deploy Watcher

Polls the activities of a deployment and reconciles them into one live
line per service until every service reaches a final state.
"""

import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import click
from rich.console import Console

from wedeploy_cli.constants import ACTIVITIES_POLL_INTERVAL, DASHBOARD_PREFIX
from wedeploy_cli.core.config_loader import Context
from wedeploy_cli.core.rate_limit import RateLimiter
from wedeploy_cli.exceptions import DeploymentError
from wedeploy_cli.livemsg import Message, WaitLiveMsg, format_duration
from wedeploy_cli.logger import debug
from wedeploy_cli.models.activity import (
    Activity,
    ActivityFilter,
    ActivityType,
    DEPLOYMENT_TYPES,
    FINAL_TYPES,
    STATE_DEFINING_TYPES,
)
from wedeploy_cli.models.results import FinalStates
from wedeploy_cli.services.activities_client import ActivitiesClient
from wedeploy_cli.ui_components import prompt_yes_no

STATUS_SUFFIXES: Dict[ActivityType, str] = {
    ActivityType.BUILD_PENDING: "pending",
    ActivityType.BUILD_STARTED: "started",
    ActivityType.BUILD_FAILED: "failed",
    ActivityType.BUILD_SUCCEEDED: "succeeded",
    ActivityType.DEPLOY_PENDING: "pending",
    ActivityType.DEPLOY_STARTED: "started",
    ActivityType.DEPLOY_FAILED: "failed",
    ActivityType.DEPLOY_SUCCEEDED: "succeeded",
}

FAILURE_TYPES = frozenset({ActivityType.BUILD_FAILED, ActivityType.DEPLOY_FAILED})


@dataclass
class ServiceWatch:
    """Tracked state and live line of one service."""

    message: Message
    state: Optional[ActivityType] = None


class DeployWatcher:
    """
    Watches a deployment through its activities.

    Transport errors abort the loop and propagate to the caller.
    """

    def __init__(
        self,
        context: Context,
        project_id: str,
        services: List[str],
        activities: ActivitiesClient,
        activity_filter: Optional[ActivityFilter] = None,
        interval: float = ACTIVITIES_POLL_INTERVAL,
        console: Optional[Console] = None,
        live: bool = True,
        group_uids: Optional[Dict[str, str]] = None,
        since: int = 0,
    ):
        self.context = context
        self.project_id = project_id
        self.activities = activities
        self.filter = activity_filter or ActivityFilter()
        self.interval = interval
        self.console = console or Console()
        self.live = live
        self.group_uids = dict(group_uids or {})
        self.since = since
        self.stop_event = threading.Event()

        self.wlm = WaitLiveMsg(self.deploying_message(), console=self.console)
        self.services: Dict[str, ServiceWatch] = {}
        for service_id in services:
            message = Message(f"waiting {self.address(service_id)}")
            self.services[service_id] = ServiceWatch(message=message)
            self.wlm.add_message(message)

    def address(self, service_id: str) -> str:
        return f"{service_id}.{self.project_id}.{self.context.service_domain}"

    def deploying_message(self) -> str:
        return (
            f"Deploying services on project {self.project_id} "
            f"in {self.context.infrastructure_domain}..."
        )

    def belongs_to_deployment(self, activity: Activity) -> bool:
        """
        Whether an activity comes from the deployment being watched.

        The upload groupUid of the service decides when both sides have one;
        otherwise activities created before the upload started are stale.
        """
        expected = self.group_uids.get(activity.service_id or "")
        if expected and activity.group_uid:
            return activity.group_uid == expected
        return activity.created_at >= self.since

    def update_activity_state(self, activity: Activity) -> None:
        """Apply one activity to the tracked services. Unrelated ones are ignored."""
        service_id = activity.service_id
        if activity.type not in DEPLOYMENT_TYPES or service_id not in self.services:
            return
        if not self.belongs_to_deployment(activity) or self.is_final_state(service_id):
            return

        watch = self.services[service_id]
        if activity.type in STATE_DEFINING_TYPES:
            watch.state = activity.type

        prefix = "building" if activity.type.is_build else "deploying"
        text = f"{prefix} {self.address(service_id)} ({STATUS_SUFFIXES[activity.type]})"

        if activity.type in FAILURE_TYPES:
            watch.message.fail_text(text)
        elif activity.type == ActivityType.DEPLOY_SUCCEEDED:
            watch.message.stop_text(text)
        else:
            watch.message.play_text(text)

    def is_final_state(self, service_id: str) -> bool:
        return self.services[service_id].state in FINAL_TYPES

    def check_activities(self) -> bool:
        """
        Fetch and apply the current activities.

        Returns:
            True once every tracked service is final
        """
        activities = self.activities.list(self.project_id, self.filter)
        for activity in activities.reverse():
            self.update_activity_state(activity)
        self.wlm.refresh()
        return all(self.is_final_state(s) for s in self.services)

    def run_loop(self) -> None:
        limiter = RateLimiter(self.interval)
        while True:
            if not limiter.wait(self.stop_event):
                debug("Deploy watcher stopped")
                return
            if self.check_activities():
                return

    def stop(self) -> None:
        self.stop_event.set()

    def run(self) -> FinalStates:
        """
        Watch until every service is final.

        Raises:
            ValueError: No services to watch
        """
        if not self.services:
            raise ValueError("services parameter required for listening to services deployment")

        if self.live:
            self.wlm.start()
        self.wlm.reset_duration()

        try:
            self.run_loop()
        except Exception:
            self._finish(failed=True)
            raise

        states = self.final_states()
        self._finish(failed=states.has_failures)
        return states

    def _finish(self, failed: bool) -> None:
        elapsed = format_duration(self.wlm.duration())
        header = self.deploying_message()
        if failed:
            self.wlm.header.fail_text(f"{header}\nDeployment failed in {elapsed}")
        else:
            self.wlm.header.stop_text(f"{header}\nDeployment succeeded in {elapsed}")
        self.wlm.stop()

    def final_states(self) -> FinalStates:
        states = FinalStates()
        for service_id in sorted(self.services):
            state = self.services[service_id].state
            if state == ActivityType.BUILD_FAILED:
                states.build_failed.append(service_id)
            elif state == ActivityType.DEPLOY_FAILED:
                states.deploy_failed.append(service_id)
            elif state == ActivityType.DEPLOY_SUCCEEDED:
                states.succeeded.append(service_id)
        return states

    def verify_final_state(self, states: Optional[FinalStates] = None) -> FinalStates:
        """
        Raises:
            DeploymentError: One line per failed service
        """
        states = states or self.final_states()
        if not states.has_failures:
            return states

        lines = [f'error building service "{s}"' for s in states.build_failed]
        lines += [f'error deploying service "{s}"' for s in states.deploy_failed]
        raise DeploymentError("\n".join(lines))

    def logs_url(self, states: FinalStates) -> str:
        url = (
            f"https://{DASHBOARD_PREFIX}{self.context.infrastructure_domain}"
            f"/projects/{self.project_id}/logs"
        )
        builds, deploys = states.build_failed, states.deploy_failed

        if len(builds) == 1 and not deploys:
            url += f"?label=buildUid&logServiceId={builds[0]}"
        elif not builds and len(deploys) == 1:
            url += f"?logServiceId={deploys[0]}"
        elif not deploys:
            url += "?label=buildUid"
        return url

    def maybe_open_logs(
        self,
        states: FinalStates,
        input_fn: Callable[[], str] = input,
        opener: Callable[[str], int] = click.launch,
    ) -> None:
        if not prompt_yes_no("Open browser to check the logs?", input_fn, self.console):
            return

        url = self.logs_url(states)
        try:
            failed = opener(url) != 0
        except OSError as e:
            debug(str(e))
            failed = True

        if failed:
            self.console.print(f"Open URL: (can't open automatically) {url}", markup=False)
