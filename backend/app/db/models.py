"""
Import all models here so:
- SQLAlchemy registers them on Base.metadata
- Alembic autogenerate can discover tables
"""

from app.models.user import User  # noqa: F401
from app.models.team import Team, TeamMember  # noqa: F401
from app.models.dataset import Dataset  # noqa: F401
from app.models.visualization import Visualization  # noqa: F401
from app.models.comment import Comment  # noqa: F401
