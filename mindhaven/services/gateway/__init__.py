"""Gateway: the Flask HTTP API in front of every MindHaven service.

- handler.py: routes, bearer-token check and service wiring
- config.py: AppConfig (environment and Secrets Manager)
"""

from .config import AppConfig

__all__ = ["AppConfig"]
