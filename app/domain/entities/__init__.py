"""Domain entities.

Pure domain models; no ORM or persistence concerns.
"""

from app.domain.entities.change_notification import ChangeNotification

__all__ = ["ChangeNotification"]
