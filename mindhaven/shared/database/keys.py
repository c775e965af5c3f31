"""KV key layout.

All services build keys through these helpers so the namespace stays
consistent between writers and readers.
"""

USER_PROFILE_PREFIX = "user_profile:"
ALL_PEER_POSTS = "all_peer_posts"


def user_profile(user_id: str) -> str:
    return f"{USER_PROFILE_PREFIX}{user_id}"


def user_stats(user_id: str) -> str:
    return f"user_stats:{user_id}"


def users_by_role(role: str) -> str:
    return f"users_by_role:{role}"


def users_by_department(department: str) -> str:
    return f"users_by_department:{department}"


def activity_log(day: str) -> str:
    return f"activity_log:{day}"


def chat_log(user_id: str, day: str) -> str:
    return f"chat_log:{user_id}:{day}"


def risk_analytics(day: str) -> str:
    return f"risk_analytics:{day}"


def assessment(user_id: str, assessment_id: str) -> str:
    return f"assessment:{user_id}:{assessment_id}"


def booking(booking_id: str) -> str:
    return f"booking:{booking_id}"


def user_bookings(user_id: str) -> str:
    return f"user_bookings:{user_id}"


def peer_post(post_id: str) -> str:
    return f"peer_post:{post_id}"


def peer_reply(reply_id: str) -> str:
    return f"peer_reply:{reply_id}"


def posts_by_category(category: str) -> str:
    return f"posts_by_category:{category}"
