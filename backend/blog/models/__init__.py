# Models package init
# Both models are imported here so the string references in their
# relationships ("User" <-> "Post") resolve no matter which one is used first.
from blog.models.post import Post
from blog.models.user import User

__all__ = ["Post", "User"]
