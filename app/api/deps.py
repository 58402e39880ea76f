from typing import Optional

from fastapi import Header, Request


def get_publisher(request: Request):
    """Change publisher attached to the application at startup."""
    return getattr(request.app.state, "publisher", None)


def get_user_id(x_user_id: Optional[int] = Header(None, description="Acting user, recorded as createdBy.")) -> Optional[int]:
    return x_user_id
