"""Peer Support: moderated forum posts and replies.

Submissions are profanity-filtered, then risk-classified; crisis-level
content is withheld from listings and triggers crisis intervention.
"""

from .forum import PeerForum, ForumConfig, Submission, public_view, ANONYMOUS_USER_ID

__all__ = [
    "PeerForum",
    "ForumConfig",
    "Submission",
    "public_view",
    "ANONYMOUS_USER_ID",
]
