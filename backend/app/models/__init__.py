from app.models.enums import TeamRole, Visibility
from app.models.user import User
from app.models.team import Team, TeamMember
from app.models.dataset import Dataset
from app.models.visualization import Visualization
from app.models.comment import Comment

__all__ = [
    "TeamRole",
    "Visibility",
    "User",
    "Team",
    "TeamMember",
    "Dataset",
    "Visualization",
    "Comment",
]
