from app.models.keyword import Keyword
from app.models.prompt import Prompt
from app.models.result import Result
from app.models.user import User

__all__ = [
    "Keyword",
    "Prompt",
    "Result",
    "User",
]
