"""
Meal Plan Repository - AI or manually created multi-day plans
"""

from typing import List, Optional

from bson import ObjectId

from repositories.base import OwnedRepository, Document


class MealPlanRepository(OwnedRepository):
    """Repository for meal plan documents"""

    collection_name = "meal_plans"

    def list_for_user(self, user_id: ObjectId, active: Optional[bool] = None) -> List[Document]:
        """Plans newest start date first, optionally filtered by ``is_active``."""
        filters = {} if active is None else {"is_active": active}
        return self.list_owned(user_id, filters, sort=[("start_date", -1)])
