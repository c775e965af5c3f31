"""Peer support forum - posts, replies, listing and likes.

Every submission passes the content filter first; blocked submissions
are returned to the user for revision and nothing is stored. Accepted
submissions are risk-classified before persistence so each stored post
and reply carries its risk level and flagged status.

Listing is an access-control boundary: flagged posts and replies are
never returned, and anonymous authors are shown as "anonymous",
whoever is asking.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from mindhaven.shared.database import KVStore, append_to_index, get_list, keys, prepend_to_index
from mindhaven.shared.errors import NotFoundError, ValidationError
from mindhaven.shared.models import PeerPost, Reply, RiskLevel
from mindhaven.shared.utils import hash_user_id, isoformat_z, timestamp_ms, utc_now
from mindhaven.services.account_service import AccountManager
from mindhaven.services.analytics_service import RiskAnalyticsAggregator
from mindhaven.services.crisis_engine import CrisisInterventionWorkflow, InterventionResult
from mindhaven.services.safety_service import ContentFilter, RiskClassifier

logger = logging.getLogger(__name__)

ANONYMOUS_USER_ID = "anonymous"
REVISE_SUGGESTION = "Please revise your message and try again"
POST_BLOCKED_ERROR = "Content contains inappropriate language and cannot be posted"
REPLY_BLOCKED_ERROR = "Reply contains inappropriate language and cannot be posted"


@dataclass(frozen=True)
class ForumConfig:
    """Index and pagination limits."""
    post_index_limit: int = 1000
    default_page_size: int = 20
    max_page_size: int = 100


@dataclass(frozen=True)
class Submission:
    """Outcome of a post or reply submission.

    accepted is False only for content-filter rejections, which the user
    can fix and resubmit.
    """
    accepted: bool
    record: Optional[Dict[str, Any]] = None
    intervention: Optional[InterventionResult] = None
    error: Optional[str] = None
    suggestion: Optional[str] = None


class PeerForum:
    """Creates and lists peer support content."""

    def __init__(
        self,
        store: KVStore,
        content_filter: ContentFilter,
        classifier: RiskClassifier,
        risk_analytics: RiskAnalyticsAggregator,
        crisis_workflow: CrisisInterventionWorkflow,
        accounts: AccountManager,
        config: Optional[ForumConfig] = None,
        now: Callable = utc_now,
    ):
        self.store = store
        self.content_filter = content_filter
        self.classifier = classifier
        self.risk_analytics = risk_analytics
        self.crisis_workflow = crisis_workflow
        self.accounts = accounts
        self.config = config or ForumConfig()
        self._now = now

    def create_post(
        self,
        user_id: Optional[str],
        content: Optional[str],
        category: Optional[str],
        is_anonymous: bool = False,
    ) -> Submission:
        """Filter, classify and store a new post.

        Raises:
            ValidationError: Missing user id, content or category
        """
        if not user_id or not content or not category:
            raise ValidationError("Missing required fields")

        user_id_hash = hash_user_id(user_id)
        screened = self.content_filter.check(content)
        if screened.blocked:
            logger.info(
                "PEER_POST_BLOCKED",
                extra={"user_id_hash": user_id_hash, "category": category, "reason": screened.reason}
            )
            return Submission(accepted=False, error=POST_BLOCKED_ERROR, suggestion=REVISE_SUGGESTION)

        analysis = self.classifier.analyze_post(content)
        now = self._now()
        post = PeerPost(
            id=_new_id("post", now),
            user_id=user_id,
            content=screened.content,
            category=category,
            is_anonymous=bool(is_anonymous),
            timestamp=isoformat_z(now),
            risk_level=analysis.risk_level,
            is_moderated=analysis.needs_moderation,
            flagged=analysis.flagged,
        )

        self.store.set(keys.peer_post(post.id), post.to_dict())
        append_to_index(self.store, keys.posts_by_category(category), post.id)
        prepend_to_index(self.store, keys.ALL_PEER_POSTS, post.id, limit=self.config.post_index_limit)

        logger.info(
            "PEER_POST_CREATED",
            extra={
                "post_id": post.id,
                "user_id_hash": user_id_hash,
                "category": category,
                "risk_level": post.risk_level.value,
                "flagged": post.flagged,
            }
        )

        self.risk_analytics.record(user_id, post.risk_level)
        intervention = self._escalate(user_id, post.risk_level, "peer_post", {"postId": post.id})

        self.accounts.record_user_activity(
            user_id,
            "peer_post_created",
            {"category": category, "riskLevel": post.risk_level.value},
        )
        return Submission(accepted=True, record=post.to_dict(), intervention=intervention)

    def create_reply(
        self,
        user_id: Optional[str],
        post_id: Optional[str],
        content: Optional[str],
        is_anonymous: bool = False,
    ) -> Submission:
        """Filter, classify and attach a reply to an existing post.

        Raises:
            ValidationError: Missing user id, post id or content
            NotFoundError: Post does not exist
        """
        if not user_id or not post_id or not content:
            raise ValidationError("Missing required fields")

        user_id_hash = hash_user_id(user_id)
        screened = self.content_filter.check(content)
        if screened.blocked:
            logger.info(
                "PEER_REPLY_BLOCKED",
                extra={"user_id_hash": user_id_hash, "post_id": post_id, "reason": screened.reason}
            )
            return Submission(accepted=False, error=REPLY_BLOCKED_ERROR, suggestion=REVISE_SUGGESTION)

        post = self._load_post(post_id)
        analysis = self.classifier.analyze_post(content)
        now = self._now()
        reply = Reply(
            id=_new_id("reply", now),
            user_id=user_id,
            post_id=post_id,
            content=screened.content,
            is_anonymous=bool(is_anonymous),
            timestamp=isoformat_z(now),
            risk_level=analysis.risk_level,
            flagged=analysis.flagged,
        )

        post.replies.append(reply)
        self.store.set(keys.peer_post(post_id), post.to_dict())
        self.store.set(keys.peer_reply(reply.id), reply.to_dict())

        logger.info(
            "PEER_REPLY_CREATED",
            extra={
                "reply_id": reply.id,
                "post_id": post_id,
                "user_id_hash": user_id_hash,
                "risk_level": reply.risk_level.value,
                "flagged": reply.flagged,
            }
        )

        self.risk_analytics.record(user_id, reply.risk_level)
        intervention = self._escalate(
            user_id, reply.risk_level, "peer_reply", {"postId": post_id, "replyId": reply.id}
        )

        self.accounts.record_user_activity(
            user_id,
            "peer_reply_created",
            {"postId": post_id, "riskLevel": reply.risk_level.value},
        )
        return Submission(accepted=True, record=reply.to_dict(), intervention=intervention)

    def list_posts(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        category: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return one page of public posts, newest first for the global index.

        total counts index entries, including ones withheld from the page.

        Raises:
            ValidationError: page < 1 or limit outside 1..max_page_size
        """
        limit = self.config.default_page_size if limit is None else limit
        if page < 1 or limit < 1 or limit > self.config.max_page_size:
            raise ValidationError("Invalid pagination parameters")

        index_key = keys.posts_by_category(category) if category else keys.ALL_PEER_POSTS
        post_ids = get_list(self.store, index_key)

        start = (page - 1) * limit
        posts: List[Dict[str, Any]] = []
        withheld = 0
        for post_id in post_ids[start:start + limit]:
            data = self.store.get(keys.peer_post(post_id))
            if not data:
                continue
            if data.get("flagged"):
                withheld += 1
                continue
            posts.append(public_view(data))

        logger.info(
            "PEER_POSTS_LISTED",
            extra={
                "category": category,
                "page": page,
                "limit": limit,
                "returned": len(posts),
                "withheld": withheld,
            }
        )

        return {
            "posts": posts,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": len(post_ids),
                "hasMore": start + limit < len(post_ids),
            },
        }

    def like_post(self, post_id: Optional[str], user_id: Optional[str] = None) -> Dict[str, Any]:
        """Increment a post's like count.

        Flagged posts are treated as missing.

        Raises:
            ValidationError: Missing post id
            NotFoundError: Post does not exist or is flagged
        """
        if not post_id:
            raise ValidationError("Missing required fields")

        post = self._load_post(post_id)
        if post.flagged:
            raise NotFoundError("Post not found")

        post.likes += 1
        self.store.set(keys.peer_post(post_id), post.to_dict())

        if user_id:
            self.accounts.record_user_activity(user_id, "peer_interaction", {"postId": post_id, "action": "like"})

        return {"postId": post_id, "likes": post.likes}

    def _load_post(self, post_id: str) -> PeerPost:
        data = self.store.get(keys.peer_post(post_id))
        if not data:
            logger.warning("PEER_POST_NOT_FOUND", extra={"post_id": post_id})
            raise NotFoundError("Post not found")
        return PeerPost.from_dict(data)

    def _escalate(
        self,
        user_id: str,
        risk_level: RiskLevel,
        source: str,
        metadata: Dict[str, Any],
    ) -> Optional[InterventionResult]:
        if risk_level != RiskLevel.CRISIS:
            return None
        return self.crisis_workflow.respond(user_id, source=source, metadata=metadata)


def public_view(post: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a stored post safe for listing.

    Drops flagged replies and replaces anonymous author ids.
    """
    view = dict(post)
    if view.get("isAnonymous"):
        view["userId"] = ANONYMOUS_USER_ID

    replies = []
    for reply in post.get("replies", []):
        if reply.get("flagged"):
            continue
        reply_view = dict(reply)
        if reply_view.get("isAnonymous"):
            reply_view["userId"] = ANONYMOUS_USER_ID
        replies.append(reply_view)
    view["replies"] = replies
    return view


def _new_id(prefix: str, now) -> str:
    return f"{prefix}_{timestamp_ms(now)}_{uuid.uuid4().hex[:6]}"
