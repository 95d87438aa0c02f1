"""
Meal and workout entry repositories - daily logs keyed by user and ``YYYY-MM-DD`` date
"""

from typing import List

from bson import ObjectId

from repositories.base import OwnedRepository, Document


class MealRepository(OwnedRepository):
    """Logged meal entries"""

    collection_name = "meals"

    def list_for_date(self, user_id: ObjectId, day: str) -> List[Document]:
        return self.list_owned(user_id, {"date": day}, sort=[("created_at", 1)])

    def users_active_since(self, day: str) -> List[ObjectId]:
        return self.collection.distinct("user_id", {"date": {"$gte": day}})


class WorkoutEntryRepository(OwnedRepository):
    """Daily workout log entries (exercise lists with burned calories)"""

    collection_name = "workouts"

    def list_for_date(self, user_id: ObjectId, day: str) -> List[Document]:
        return self.list_owned(user_id, {"date": day}, sort=[("created_at", 1)])

    def users_active_since(self, day: str) -> List[ObjectId]:
        return self.collection.distinct("user_id", {"date": {"$gte": day}})
