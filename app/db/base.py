from app.db.base_class import Base

# Import ALL models so SQLAlchemy registers them
from app.models.user import User  # noqa: F401
from app.models.user_blocking import UserBlocking  # noqa: F401
from app.models.group import Group  # noqa: F401
from app.models.group_membership import GroupMembership  # noqa: F401
from app.models.group_request import GroupRequest  # noqa: F401
from app.models.post import Post  # noqa: F401
from app.models.group_post import GroupPost  # noqa: F401
