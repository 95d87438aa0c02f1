"""
Workout repositories - exercise library, saved workout plans and completed sessions
"""

from typing import List, Optional, Tuple

from bson import ObjectId

from repositories.base import OwnedRepository, Document


class ExerciseRepository(OwnedRepository):
    collection_name = "exercises"

    def list_for_user(self, user_id: ObjectId, category: Optional[str] = None) -> List[Document]:
        filters = {"category": category} if category else {}
        return self.list_owned(user_id, filters, sort=[("name", 1)])


class _PaginatedRepository(OwnedRepository):
    def paginate(
        self,
        user_id: ObjectId,
        page: int,
        limit: int,
        sort_field: str,
        direction: int,
    ) -> Tuple[List[Document], int]:
        """Return one page of the user's documents and the total count."""
        total = self.count_owned(user_id)
        items = self.list_owned(
            user_id,
            sort=[(sort_field, direction)],
            skip=(page - 1) * limit,
            limit=limit,
        )
        return items, total


class WorkoutPlanRepository(_PaginatedRepository):
    collection_name = "workout_plans"


class WorkoutSessionRepository(_PaginatedRepository):
    collection_name = "workout_sessions"
