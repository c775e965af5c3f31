"""MindHaven API - HTTP endpoints for the student support app.

Every endpoint lives under a common prefix (ROUTE_PREFIX, default /api)
and, apart from /health and /ready, requires an Authorization bearer
header.

Endpoints:
- POST /signup - Create account
- GET/PUT /profile/<user_id> - Read or merge-update a profile
- POST /activity - Record a user activity
- POST /ai-chat - Risk-classified chat message
- POST /assessment - Store a self-assessment
- POST /book-session - Book a counselor session
- GET /bookings/<user_id> - List a user's bookings
- GET /analytics - Admin dashboard aggregates
- POST /peer-post, /peer-reply, /peer-like - Forum writes
- GET /peer-posts - Public forum listing
- POST /get-resources - Self-help resource suggestions
"""
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify, request
from flask_cors import CORS

from mindhaven.shared.database import ConnectionManager, DatabaseConfig, InMemoryKVStore, KVStore, PostgresKVStore
from mindhaven.shared.errors import AuthenticationError, ServiceError, ValidationError
from mindhaven.shared.utils import configure_hash_salt, hash_user_id
from mindhaven.services.account_service import (
    AccountManager,
    AuthProvider,
    SupabaseAuthProvider,
    validate_bearer_token,
)
from mindhaven.services.analytics_service import AdminDashboard, RiskAnalyticsAggregator
from mindhaven.services.booking_service import BookingManager
from mindhaven.services.chat_service import ChatSessionHandler
from mindhaven.services.crisis_engine import CrisisInterventionWorkflow, SlotFinder
from mindhaven.services.peer_support import ForumConfig, PeerForum, Submission
from mindhaven.services.resource_service import suggest_resources
from mindhaven.services.safety_service import ContentFilter, KeywordRiskClassifier, SafetyConfig
from .config import AppConfig

logger = logging.getLogger(__name__)

SERVICE_NAME = "mindhaven-api"
PUBLIC_ENDPOINTS = frozenset({"health", "ready", "static"})


@dataclass
class Services:
    """Wired service graph used by the routes."""
    store: KVStore
    accounts: AccountManager
    risk_analytics: RiskAnalyticsAggregator
    crisis_workflow: CrisisInterventionWorkflow
    chat: ChatSessionHandler
    forum: PeerForum
    bookings: BookingManager
    dashboard: AdminDashboard


def build_store(config: AppConfig) -> KVStore:
    if config.kv_backend == "memory":
        return InMemoryKVStore()
    if config.kv_backend == "postgres":
        if config.db_secret_arn:
            db_config = DatabaseConfig.from_secrets_manager(config.db_secret_arn, config.aws_region)
        else:
            db_config = DatabaseConfig.from_env()
        store = PostgresKVStore(ConnectionManager(db_config))
        store.ensure_table()
        return store
    raise ValueError(f"Unknown KV_BACKEND: {config.kv_backend}")


def build_services(
    config: AppConfig,
    store: Optional[KVStore] = None,
    auth_provider: Optional[AuthProvider] = None,
    slot_finder: Optional[SlotFinder] = None,
    safety_config: Optional[SafetyConfig] = None,
) -> Services:
    """Wire every service against one KV store.

    Args:
        config: Application configuration
        store: KV store (built from config when omitted)
        auth_provider: Identity provider (Supabase when credentials are set)
        slot_finder: Scheduling collaborator for crisis bookings
        safety_config: Keyword tiers and profanity list
    """
    store = store or build_store(config)
    safety_config = safety_config or SafetyConfig()

    if auth_provider is None and config.has_auth_credentials:
        auth_provider = SupabaseAuthProvider(
            config.supabase_url,
            config.supabase_service_role_key,
            timeout_seconds=config.auth_timeout_seconds,
        )

    accounts = AccountManager(store, auth_provider=auth_provider)
    risk_analytics = RiskAnalyticsAggregator(store)
    crisis_workflow = CrisisInterventionWorkflow(
        store,
        slot_finder=slot_finder,
        activity_recorder=accounts.record_user_activity,
    )

    services = Services(
        store=store,
        accounts=accounts,
        risk_analytics=risk_analytics,
        crisis_workflow=crisis_workflow,
        chat=ChatSessionHandler(
            store,
            classifier=KeywordRiskClassifier(safety_config.chat_keywords),
            risk_analytics=risk_analytics,
            crisis_workflow=crisis_workflow,
            accounts=accounts,
        ),
        forum=PeerForum(
            store,
            content_filter=ContentFilter(safety_config.profanity_words),
            classifier=KeywordRiskClassifier(safety_config.forum_keywords),
            risk_analytics=risk_analytics,
            crisis_workflow=crisis_workflow,
            accounts=accounts,
            config=ForumConfig(
                post_index_limit=config.post_index_limit,
                default_page_size=config.default_page_size,
                max_page_size=config.max_page_size,
            ),
        ),
        bookings=BookingManager(store, accounts),
        dashboard=AdminDashboard(store, risk_analytics),
    )

    logger.info(
        "SERVICES_INITIALIZED",
        extra={
            "kv_backend": type(store).__name__,
            "auth_provider_configured": auth_provider is not None,
            "pattern_version": safety_config.pattern_version,
        }
    )
    return services


config = AppConfig.from_env()
if os.getenv("SUPABASE_SECRET_ARN"):
    config = config.with_secrets(os.environ["SUPABASE_SECRET_ARN"], config.aws_region)
configure_hash_salt(config.pii_hash_salt)

PREFIX = config.route_prefix

app = Flask(__name__)
CORS(
    app,
    origins=config.cors_origins,
    allow_headers=["Content-Type", "Authorization"],
    methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    expose_headers=["Content-Length"],
    max_age=600,
)

# Global service graph
_services: Optional[Services] = None


def get_services() -> Services:
    """Get or create the global service graph."""
    global _services
    if _services is None:
        _services = build_services(config)
    return _services


def set_services(services: Services) -> None:
    """Set the global service graph (for testing)."""
    global _services
    _services = services


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body required")
    return data


def _service_error(error: ServiceError, event: str) -> Tuple[Any, int]:
    level = logging.ERROR if error.status_code >= 500 else logging.WARNING
    logger.log(
        level,
        event,
        extra={
            "error": str(error),
            "error_type": type(error).__name__,
            "status_code": error.status_code,
            "path": request.path,
        }
    )
    return jsonify({"error": error.public_message}), error.status_code


def _internal_error(error: Exception, event: str) -> Tuple[Any, int]:
    logger.error(
        event,
        extra={
            "error": str(error),
            "error_type": type(error).__name__,
            "path": request.path,
        }
    )
    return jsonify({"error": "Internal server error"}), 500


def _submission_response(submission: Submission, kind: str) -> Tuple[Any, int]:
    if not submission.accepted:
        return jsonify({"error": submission.error, "suggestion": submission.suggestion}), 400

    body: Dict[str, Any] = {"success": True, kind: submission.record}
    if submission.intervention is not None:
        body["crisis"] = True
        body["intervention"] = submission.intervention.to_dict()
    return jsonify(body), 200


@app.before_request
def require_bearer_token():
    """Reject requests without a usable bearer token."""
    if request.method == "OPTIONS" or request.endpoint in PUBLIC_ENDPOINTS:
        return None

    try:
        validate_bearer_token(request.headers.get("Authorization"))
    except AuthenticationError as e:
        logger.warning(
            "REQUEST_UNAUTHORIZED",
            extra={"path": request.path, "reason": str(e)}
        )
        return jsonify({"error": e.public_message}), e.status_code
    return None


@app.route(f"{PREFIX}/health", methods=["GET"])
def health():
    """Health check endpoint."""
    return jsonify({"status": "ok", "service": SERVICE_NAME}), 200


@app.route(f"{PREFIX}/ready", methods=["GET"])
def ready():
    """Readiness check - verifies the KV store is reachable."""
    status = get_services().store.health_check()
    if not status.get("healthy"):
        return jsonify({"status": "not_ready", "store": status}), 503
    return jsonify({"status": "ready", "store": status}), 200


@app.route(f"{PREFIX}/signup", methods=["POST"])
def signup():
    """Create an account.

    Request Body:
        {"email", "password", "name", "role", "studentId"?, "department"?, "year"?}

    Response:
        {"success": true, "user": {"id", "email", "name", "role"}}
    """
    try:
        data = _json_body()
        result = get_services().accounts.create_user_account(
            email=data.get("email"),
            password=data.get("password"),
            name=data.get("name"),
            role=data.get("role"),
            student_id=data.get("studentId"),
            department=data.get("department"),
            year=data.get("year"),
        )
        return jsonify(result), 200
    except ServiceError as e:
        return _service_error(e, "SIGNUP_ERROR")
    except Exception as e:
        return _internal_error(e, "SIGNUP_ERROR")


@app.route(f"{PREFIX}/profile/<user_id>", methods=["GET"])
def get_profile(user_id: str):
    try:
        profile = get_services().accounts.get_user_profile(user_id)
        if not profile:
            logger.info("PROFILE_NOT_FOUND", extra={"user_id_hash": hash_user_id(user_id)})
            return jsonify({"error": "Profile not found"}), 404
        return jsonify(profile), 200
    except ServiceError as e:
        return _service_error(e, "PROFILE_FETCH_ERROR")
    except Exception as e:
        return _internal_error(e, "PROFILE_FETCH_ERROR")


@app.route(f"{PREFIX}/profile/<user_id>", methods=["PUT"])
def update_profile(user_id: str):
    try:
        updates = _json_body()
        profile = get_services().accounts.update_user_profile(user_id, updates)
        return jsonify(profile), 200
    except ServiceError as e:
        return _service_error(e, "PROFILE_UPDATE_ERROR")
    except Exception as e:
        return _internal_error(e, "PROFILE_UPDATE_ERROR")


@app.route(f"{PREFIX}/activity", methods=["POST"])
def record_activity():
    """Record a user activity.

    Request Body:
        {"userId", "activity", "metadata"?}
    """
    try:
        data = _json_body()
        user_id = data.get("userId")
        activity = data.get("activity")
        if not user_id or not activity:
            raise ValidationError("Missing required fields")

        get_services().accounts.record_user_activity(user_id, activity, data.get("metadata"))
        return jsonify({"success": True}), 200
    except ServiceError as e:
        return _service_error(e, "ACTIVITY_TRACKING_ERROR")
    except Exception as e:
        return _internal_error(e, "ACTIVITY_TRACKING_ERROR")


@app.route(f"{PREFIX}/ai-chat", methods=["POST"])
def ai_chat():
    """Classify a chat message and escalate crisis language.

    Request Body:
        {"userId", "message", "sessionId"?}

    Response:
        {"response", "sessionId", "riskLevel"} plus
        {"crisis": true, "intervention": {...}} for crisis messages
    """
    try:
        data = _json_body()
        result = get_services().chat.handle_message(
            user_id=data.get("userId"),
            message=data.get("message"),
            session_id=data.get("sessionId"),
        )
        return jsonify(result), 200
    except ServiceError as e:
        return _service_error(e, "AI_CHAT_ERROR")
    except Exception as e:
        return _internal_error(e, "AI_CHAT_ERROR")


@app.route(f"{PREFIX}/assessment", methods=["POST"])
def store_assessment():
    """Store a completed self-assessment.

    Request Body:
        {"userId", "assessmentType", "responses", "score", "riskLevel"}
    """
    try:
        data = _json_body()
        assessment = get_services().accounts.record_assessment(
            user_id=data.get("userId"),
            assessment_type=data.get("assessmentType"),
            responses=data.get("responses"),
            score=data.get("score"),
            risk_level=data.get("riskLevel"),
        )
        return jsonify({"success": True, "assessmentId": assessment.id}), 200
    except ServiceError as e:
        return _service_error(e, "ASSESSMENT_STORAGE_ERROR")
    except Exception as e:
        return _internal_error(e, "ASSESSMENT_STORAGE_ERROR")


@app.route(f"{PREFIX}/book-session", methods=["POST"])
def book_session():
    """Book a counselor session.

    Request Body:
        {"userId", "counselorId", "date", "time", "sessionType"?, "mode"?, "notes"?}
    """
    try:
        data = _json_body()
        booking = get_services().bookings.book_session(
            user_id=data.get("userId"),
            counselor_id=data.get("counselorId"),
            date=data.get("date"),
            time=data.get("time"),
            session_type=data.get("sessionType"),
            mode=data.get("mode"),
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "booking": booking.to_dict()}), 200
    except ServiceError as e:
        return _service_error(e, "BOOKING_ERROR")
    except Exception as e:
        return _internal_error(e, "BOOKING_ERROR")


@app.route(f"{PREFIX}/bookings/<user_id>", methods=["GET"])
def list_bookings(user_id: str):
    try:
        bookings = get_services().bookings.get_user_bookings(user_id)
        return jsonify({"bookings": bookings, "count": len(bookings)}), 200
    except ServiceError as e:
        return _service_error(e, "BOOKING_LIST_ERROR")
    except Exception as e:
        return _internal_error(e, "BOOKING_LIST_ERROR")


@app.route(f"{PREFIX}/analytics", methods=["GET"])
def analytics():
    """Admin dashboard aggregates."""
    try:
        return jsonify(get_services().dashboard.summary()), 200
    except ServiceError as e:
        return _service_error(e, "ANALYTICS_ERROR")
    except Exception as e:
        return _internal_error(e, "ANALYTICS_ERROR")


@app.route(f"{PREFIX}/peer-post", methods=["POST"])
def peer_post():
    """Create a forum post.

    Request Body:
        {"userId", "content", "category", "isAnonymous"?}

    Response:
        {"success": true, "post": {...}} or 400 {"error", "suggestion"}
        when the content filter rejects the text
    """
    try:
        data = _json_body()
        submission = get_services().forum.create_post(
            user_id=data.get("userId"),
            content=data.get("content"),
            category=data.get("category"),
            is_anonymous=bool(data.get("isAnonymous", False)),
        )
        return _submission_response(submission, "post")
    except ServiceError as e:
        return _service_error(e, "PEER_POST_ERROR")
    except Exception as e:
        return _internal_error(e, "PEER_POST_ERROR")


@app.route(f"{PREFIX}/peer-reply", methods=["POST"])
def peer_reply():
    """Reply to a forum post.

    Request Body:
        {"userId", "postId", "content", "isAnonymous"?}
    """
    try:
        data = _json_body()
        submission = get_services().forum.create_reply(
            user_id=data.get("userId"),
            post_id=data.get("postId"),
            content=data.get("content"),
            is_anonymous=bool(data.get("isAnonymous", False)),
        )
        return _submission_response(submission, "reply")
    except ServiceError as e:
        return _service_error(e, "PEER_REPLY_ERROR")
    except Exception as e:
        return _internal_error(e, "PEER_REPLY_ERROR")


@app.route(f"{PREFIX}/peer-like", methods=["POST"])
def peer_like():
    """Like a forum post.

    Request Body:
        {"postId", "userId"?}
    """
    try:
        data = _json_body()
        result = get_services().forum.like_post(data.get("postId"), user_id=data.get("userId"))
        return jsonify({"success": True, **result}), 200
    except ServiceError as e:
        return _service_error(e, "PEER_LIKE_ERROR")
    except Exception as e:
        return _internal_error(e, "PEER_LIKE_ERROR")


@app.route(f"{PREFIX}/peer-posts", methods=["GET"])
def peer_posts():
    """List public forum posts.

    Query Params:
        page: Page number, 1-based (default 1)
        limit: Page size (default 20)
        category: Restrict to one category (optional)
    """
    try:
        try:
            page = int(request.args.get("page", "1"))
            limit = int(request.args["limit"]) if "limit" in request.args else None
        except ValueError:
            raise ValidationError("Invalid pagination parameters")

        result = get_services().forum.list_posts(
            page=page,
            limit=limit,
            category=request.args.get("category") or None,
        )
        return jsonify(result), 200
    except ServiceError as e:
        return _service_error(e, "PEER_POSTS_LIST_ERROR")
    except Exception as e:
        return _internal_error(e, "PEER_POSTS_LIST_ERROR")


@app.route(f"{PREFIX}/get-resources", methods=["POST"])
def get_resources():
    """Suggest resources.

    Request Body:
        {"problemType", "riskLevel"}
    """
    try:
        data = _json_body()
        resources = suggest_resources(data.get("problemType"), data.get("riskLevel"))
        return jsonify({"resources": resources}), 200
    except ServiceError as e:
        return _service_error(e, "RESOURCE_SUGGESTION_ERROR")
    except Exception as e:
        return _internal_error(e, "RESOURCE_SUGGESTION_ERROR")


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    port = int(os.getenv("PORT", "8000"))
    app.run(host="0.0.0.0", port=port, debug=False)
