"""Tests for activity models"""

from wedeploy_cli.models.activity import (
    Activities,
    Activity,
    ActivityFilter,
    ActivityType,
)


def make_activity(index: int, type_: str = "BUILD_STARTED", service: str = "web") -> Activity:
    return Activity.from_dict(
        {
            "id": f"a{index}",
            "createdAt": 1500000000000 + index,
            "type": type_,
            "projectId": "photos",
            "metadata": {"serviceId": service},
        }
    )


class TestActivities:
    def test_reverse_order_and_length(self):
        items = Activities([make_activity(i) for i in range(5)])

        reversed_items = items.reverse()

        assert len(reversed_items) == 5
        assert [a.id for a in reversed_items] == ["a4", "a3", "a2", "a1", "a0"]

    def test_reverse_twice_is_identity(self):
        items = Activities([make_activity(i) for i in range(3)])

        assert items.reverse().reverse() == items

    def test_reverse_does_not_mutate(self):
        items = Activities([make_activity(0), make_activity(1)])
        items.reverse()

        assert [a.id for a in items] == ["a0", "a1"]

    def test_reverse_empty(self):
        assert len(Activities().reverse()) == 0


class TestActivity:
    def test_from_dict(self):
        activity = make_activity(1, "DEPLOY_SUCCEEDED", "api")

        assert activity.type is ActivityType.DEPLOY_SUCCEEDED
        assert activity.service_id == "api"
        assert activity.created_at == 1500000000001

    def test_unknown_type_keeps_raw_name(self):
        activity = make_activity(1, "SOMETHING_NEW")

        assert activity.type is ActivityType.UNKNOWN
        assert activity.message() == "SOMETHING_NEW"
        assert activity.to_dict()["type"] == "SOMETHING_NEW"

    def test_message(self):
        activity = make_activity(1, "DEPLOY_FAILED", "api")

        assert activity.message() == "api deployment failed on project photos"

    def test_build_and_deploy_types(self):
        assert ActivityType.BUILD_FAILED.is_build
        assert not ActivityType.BUILD_FAILED.is_deploy
        assert ActivityType.DEPLOY_STARTED.is_deploy


class TestActivityFilter:
    def test_only_set_fields_become_params(self):
        params = ActivityFilter(group_uid="g1", limit=10).to_params()

        assert params == {"groupUid": "g1", "limit": 10}

    def test_empty(self):
        assert ActivityFilter().to_params() == {}
