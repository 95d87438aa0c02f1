"""
User domain mappers.
Handles transformation between stored user documents and API responses.
"""

from datetime import date, datetime
from typing import Any, Dict, Optional

from domain.mappers.document_mapper import DocumentMapper

PRIVATE_FIELDS = ("password_hash",)


class UserMapper:
    """Mapper for user-related transformations."""

    @staticmethod
    def to_response(user: Dict[str, Any]) -> Dict[str, Any]:
        """
        Convert a user document to the public profile.

        Args:
            user: user document as stored in MongoDB

        Returns:
            Response dict with ``id`` and without credential fields
        """
        public = {k: v for k, v in user.items() if k not in PRIVATE_FIELDS}
        return DocumentMapper.to_response(public)

    @staticmethod
    def to_summary(user: Dict[str, Any]) -> Dict[str, Any]:
        """Small representation used in chats and user search."""
        return {
            "id": str(user["_id"]),
            "email": user.get("email"),
            "first_name": user.get("first_name"),
            "last_name": user.get("last_name"),
        }

    @staticmethod
    def age(user: Dict[str, Any], today: Optional[date] = None) -> Optional[int]:
        """Age in full years from the stored ``YYYY-MM-DD`` birthday, or None."""
        birthday = user.get("birthday")
        if not birthday:
            return None
        if isinstance(birthday, datetime):
            birthday = birthday.date()
        elif isinstance(birthday, str):
            try:
                birthday = date.fromisoformat(birthday[:10])
            except ValueError:
                return None
        today = today or date.today()
        years = today.year - birthday.year
        if (today.month, today.day) < (birthday.month, birthday.day):
            years -= 1
        return years
