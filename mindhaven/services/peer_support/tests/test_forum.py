"""Tests for the peer support forum."""
from datetime import datetime

import pytest

from mindhaven.shared.database import InMemoryKVStore, keys
from mindhaven.shared.errors import NotFoundError, ValidationError
from mindhaven.shared.utils import configure_hash_salt
from mindhaven.services.account_service import AccountManager
from mindhaven.services.analytics_service import RiskAnalyticsAggregator
from mindhaven.services.crisis_engine import CrisisInterventionWorkflow
from mindhaven.services.peer_support import ANONYMOUS_USER_ID, ForumConfig, PeerForum, public_view
from mindhaven.services.peer_support.forum import POST_BLOCKED_ERROR, REPLY_BLOCKED_ERROR, REVISE_SUGGESTION
from mindhaven.services.safety_service import ContentFilter, forum_classifier

NOW = datetime(2026, 10, 18, 10, 0)
TODAY = "2026-10-18"


@pytest.fixture(autouse=True)
def setup_hash_salt():
    configure_hash_salt("test_salt_that_is_at_least_32_characters_long")


@pytest.fixture
def store():
    return InMemoryKVStore()


def _forum(store, config=None):
    accounts = AccountManager(store, now=lambda: NOW)
    return PeerForum(
        store,
        content_filter=ContentFilter(),
        classifier=forum_classifier(),
        risk_analytics=RiskAnalyticsAggregator(store, today=lambda: TODAY),
        crisis_workflow=CrisisInterventionWorkflow(store, activity_recorder=accounts.record_user_activity),
        accounts=accounts,
        config=config,
    )


@pytest.fixture
def forum(store):
    return _forum(store)


def _post(forum, content="Exams this week, anyone else?", user_id="u1", category="academic", **kwargs):
    return forum.create_post(user_id, content, category, **kwargs)


class TestCreatePost:
    def test_stores_low_risk_post(self, forum, store):
        submission = _post(forum)

        assert submission.accepted is True
        post = submission.record
        assert post["riskLevel"] == "low"
        assert post["flagged"] is False
        assert post["isModerated"] is False
        assert post["likes"] == 0
        assert post["replies"] == []
        assert store.get(keys.peer_post(post["id"])) == post

    def test_indexes_post(self, forum, store):
        post = _post(forum).record

        assert store.get(keys.ALL_PEER_POSTS) == [post["id"]]
        assert store.get(keys.posts_by_category("academic")) == [post["id"]]

    def test_counts_risk_and_activity(self, forum, store):
        _post(forum)

        assert store.get(keys.risk_analytics(TODAY))["low"] == 1
        assert store.get(keys.user_stats("u1"))["peerInteractions"] == 1

    def test_blocked_post_persists_nothing(self, forum, store):
        submission = _post(forum, content="this is bullshit")

        assert submission.accepted is False
        assert submission.error == POST_BLOCKED_ERROR
        assert submission.suggestion == REVISE_SUGGESTION
        assert store.keys() == []

    def test_high_risk_post_is_moderated_and_listed(self, forum):
        post = _post(forum, content="nobody cares about me").record

        assert post["riskLevel"] == "high"
        assert post["isModerated"] is True
        assert post["flagged"] is False
        assert [p["id"] for p in forum.list_posts()["posts"]] == [post["id"]]

    def test_crisis_post_is_flagged_and_escalated(self, forum, store):
        submission = _post(forum, content="I have no hope anymore")

        assert submission.record["flagged"] is True
        assert submission.record["isModerated"] is True
        assert submission.intervention is not None
        assert submission.intervention.auto_booking is True
        activities = [entry["activity"] for entry in store.get(keys.activity_log(TODAY))]
        assert "crisis_intervention_triggered" in activities

    def test_global_index_is_bounded(self, store):
        forum = _forum(store, ForumConfig(post_index_limit=2))
        ids = [_post(forum).record["id"] for _ in range(3)]

        assert store.get(keys.ALL_PEER_POSTS) == [ids[2], ids[1]]
        assert store.get(keys.posts_by_category("academic")) == ids

    def test_missing_category(self, forum):
        with pytest.raises(ValidationError):
            forum.create_post("u1", "hello", None)


class TestListPosts:
    def test_newest_first_with_pagination(self, forum):
        ids = [_post(forum, content=f"post {i}").record["id"] for i in range(3)]

        first = forum.list_posts(page=1, limit=2)
        second = forum.list_posts(page=2, limit=2)

        assert [p["id"] for p in first["posts"]] == [ids[2], ids[1]]
        assert first["pagination"] == {"page": 1, "limit": 2, "total": 3, "hasMore": True}
        assert [p["id"] for p in second["posts"]] == [ids[0]]
        assert second["pagination"]["hasMore"] is False

    def test_flagged_posts_never_listed(self, forum):
        _post(forum, content="I want to end it all")
        safe = _post(forum).record

        result = forum.list_posts()

        assert [p["id"] for p in result["posts"]] == [safe["id"]]
        assert result["pagination"]["total"] == 2

    def test_anonymous_author_hidden(self, forum, store):
        post = _post(forum, is_anonymous=True).record

        listed = forum.list_posts()["posts"][0]

        assert listed["userId"] == ANONYMOUS_USER_ID
        assert store.get(keys.peer_post(post["id"]))["userId"] == "u1"

    def test_category_filter(self, forum):
        _post(forum, category="academic")
        social = _post(forum, category="social").record

        posts = forum.list_posts(category="social")["posts"]

        assert [p["id"] for p in posts] == [social["id"]]

    def test_empty_forum(self, forum):
        assert forum.list_posts() == {
            "posts": [],
            "pagination": {"page": 1, "limit": 20, "total": 0, "hasMore": False},
        }

    @pytest.mark.parametrize("page,limit", [(0, 20), (1, 0), (1, 101)])
    def test_invalid_pagination(self, forum, page, limit):
        with pytest.raises(ValidationError) as exc_info:
            forum.list_posts(page=page, limit=limit)
        assert exc_info.value.public_message == "Invalid pagination parameters"


class TestCreateReply:
    def test_reply_attached_to_post(self, forum, store):
        post = _post(forum).record

        submission = forum.create_reply("u2", post["id"], "Same here, good luck!")

        assert submission.accepted is True
        reply = submission.record
        stored_post = store.get(keys.peer_post(post["id"]))
        assert stored_post["replies"] == [reply]
        assert store.get(keys.peer_reply(reply["id"])) == reply
        assert store.get(keys.user_stats("u2"))["peerInteractions"] == 1

    def test_reply_to_missing_post(self, forum):
        with pytest.raises(NotFoundError):
            forum.create_reply("u2", "post_missing", "hello")

    def test_blocked_reply_leaves_post_unchanged(self, forum, store):
        post = _post(forum).record

        submission = forum.create_reply("u2", post["id"], "damn right")

        assert submission.accepted is False
        assert submission.error == REPLY_BLOCKED_ERROR
        assert store.get(keys.peer_post(post["id"]))["replies"] == []

    def test_crisis_reply_hidden_from_listing(self, forum):
        post = _post(forum).record
        forum.create_reply("u2", post["id"], "honestly I want to kill myself")
        kind = forum.create_reply("u3", post["id"], "You've got this").record

        submission_replies = forum.list_posts()["posts"][0]["replies"]

        assert [r["id"] for r in submission_replies] == [kind["id"]]

    def test_crisis_reply_escalates(self, forum):
        post = _post(forum).record

        submission = forum.create_reply("u2", post["id"], "there is no hope")

        assert submission.record["flagged"] is True
        assert submission.intervention is not None

    def test_anonymous_reply_hidden_in_listing(self, forum):
        post = _post(forum).record
        forum.create_reply("u2", post["id"], "hugs", is_anonymous=True)

        reply = forum.list_posts()["posts"][0]["replies"][0]

        assert reply["userId"] == ANONYMOUS_USER_ID


class TestLikePost:
    def test_like_increments(self, forum, store):
        post = _post(forum).record

        assert forum.like_post(post["id"]) == {"postId": post["id"], "likes": 1}
        assert forum.like_post(post["id"], user_id="u2")["likes"] == 2
        assert store.get(keys.peer_post(post["id"]))["likes"] == 2
        assert store.get(keys.user_stats("u2"))["peerInteractions"] == 1

    def test_like_missing_post(self, forum):
        with pytest.raises(NotFoundError):
            forum.like_post("post_missing")

    def test_like_flagged_post(self, forum):
        post = _post(forum, content="I will end it all").record

        with pytest.raises(NotFoundError):
            forum.like_post(post["id"])


class TestPublicView:
    def test_does_not_mutate_stored_post(self):
        post = {
            "id": "p1",
            "userId": "u1",
            "isAnonymous": True,
            "replies": [{"id": "r1", "userId": "u2", "isAnonymous": True, "flagged": False}],
        }

        view = public_view(post)

        assert view["userId"] == ANONYMOUS_USER_ID
        assert view["replies"][0]["userId"] == ANONYMOUS_USER_ID
        assert post["userId"] == "u1"
        assert post["replies"][0]["userId"] == "u2"
