from app.models.user import User
from app.models.user_blocking import UserBlocking
from app.models.group import Group
from app.models.group_membership import GroupMembership
from app.models.group_request import GroupRequest
from app.models.post import Post
from app.models.group_post import GroupPost

__all__ = [
    "User",
    "UserBlocking",
    "Group",
    "GroupMembership",
    "GroupRequest",
    "Post",
    "GroupPost",
]
