from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import logging

from pymongo.database import Database

from adapters import exercise_api_adapter
from app.exceptions import NotFoundError, ServiceValidationError
from domain.mappers import DocumentMapper
from domain.schemas.meal_schemas import WorkoutEntryCreate
from domain.schemas.workout_schemas import (
    ExerciseCreate,
    ExerciseUpdate,
    WorkoutPlanCreate,
    WorkoutPlanUpdate,
    WorkoutSessionCreate,
    WorkoutSessionUpdate,
)
from repositories import (
    ExerciseRepository,
    WorkoutEntryRepository,
    WorkoutPlanRepository,
    WorkoutSessionRepository,
)
from services.dates import parse_day, today_str

logger = logging.getLogger("lifetrack.services.workouts")

MAX_SESSION_PAGE_SIZE = 200
MAX_PLAN_PAGE_SIZE = 100
PLAN_SORT_FIELDS = ("saved_at", "name", "total_exercises", "last_modified")
SESSION_REQUIRED_FIELDS = (
    "workout_plan_name",
    "exercises",
    "start_time",
    "end_time",
    "duration_seconds",
    "total_sets",
    "completed_sets",
)


def _page_params(page: int, limit: int, max_limit: int) -> Tuple[int, int]:
    return max(page, 1), min(max(limit, 1), max_limit)


class WorkoutEntryService:
    """Daily workout log used by the calorie summary."""

    @staticmethod
    def list_for_date(db: Database, user: Dict[str, Any], day: Optional[str]) -> List[Dict[str, Any]]:
        day = parse_day(day).isoformat()
        return WorkoutEntryRepository(db).list_for_date(user["_id"], day)

    @staticmethod
    def create(db: Database, user: Dict[str, Any], data: WorkoutEntryCreate) -> Dict[str, Any]:
        exercises = [e.model_dump() for e in data.exercises]
        document = {
            "user_id": user["_id"],
            "date": data.date.isoformat() if data.date else today_str(),
            "exercises": exercises,
            "total_calories": sum(e["calories_burned"] or 0 for e in exercises),
            "notes": data.notes,
        }
        entry = WorkoutEntryRepository(db).create(document)
        logger.info("Logged workout %s (%s kcal) for user %s", entry["_id"], document["total_calories"], user["_id"])
        return entry

    @staticmethod
    def delete(db: Database, user: Dict[str, Any], entry_id: str) -> None:
        if not WorkoutEntryRepository(db).delete_owned(entry_id, user["_id"]):
            raise NotFoundError("Workout not found")


class ExerciseService:
    @staticmethod
    def list(db: Database, user: Dict[str, Any], category: Optional[str] = None) -> List[Dict[str, Any]]:
        return ExerciseRepository(db).list_for_user(user["_id"], category)

    @staticmethod
    def get(db: Database, user: Dict[str, Any], exercise_id: str) -> Dict[str, Any]:
        exercise = ExerciseRepository(db).get_owned(exercise_id, user["_id"])
        if not exercise:
            raise NotFoundError("Exercise not found")
        return exercise

    @staticmethod
    def create(db: Database, user: Dict[str, Any], data: ExerciseCreate) -> Dict[str, Any]:
        document = DocumentMapper.to_storage(data.model_dump())
        document["user_id"] = user["_id"]
        return ExerciseRepository(db).create(document)

    @staticmethod
    def update(db: Database, user: Dict[str, Any], exercise_id: str, data: ExerciseUpdate) -> Dict[str, Any]:
        fields = DocumentMapper.to_storage(data.model_dump(exclude_unset=True, exclude_none=True))
        repo = ExerciseRepository(db)
        exercise = repo.update_owned(exercise_id, user["_id"], fields) if fields else repo.get_owned(exercise_id, user["_id"])
        if not exercise:
            raise NotFoundError("Exercise not found")
        return exercise

    @staticmethod
    def delete(db: Database, user: Dict[str, Any], exercise_id: str) -> None:
        if not ExerciseRepository(db).delete_owned(exercise_id, user["_id"]):
            raise NotFoundError("Exercise not found")

    @staticmethod
    def catalog(muscle: str, limit: int = 10) -> List[Dict[str, Any]]:
        """Exercises for a muscle from the external catalog."""
        muscle = (muscle or "").strip().lower()
        if not muscle:
            raise ServiceValidationError("Muscle is required")
        return exercise_api_adapter.exercises_by_muscle(muscle, limit=min(max(limit, 1), 50))


class WorkoutPlanService:
    @staticmethod
    def list(
        db: Database,
        user: Dict[str, Any],
        page: int = 1,
        limit: int = 10,
        sort_by: str = "saved_at",
        order: str = "desc",
    ) -> Tuple[List[Dict[str, Any]], int, int, int]:
        """
        One page of saved plans.

        Returns:
            (plans, total, page, limit) with page and limit clamped
        """
        page, limit = _page_params(page, limit, MAX_PLAN_PAGE_SIZE)
        if sort_by not in PLAN_SORT_FIELDS:
            sort_by = "saved_at"
        direction = 1 if order == "asc" else -1
        plans, total = WorkoutPlanRepository(db).paginate(user["_id"], page, limit, sort_by, direction)
        return plans, total, page, limit

    @staticmethod
    def get(db: Database, user: Dict[str, Any], plan_id: str) -> Dict[str, Any]:
        plan = WorkoutPlanRepository(db).get_owned(plan_id, user["_id"])
        if not plan:
            raise NotFoundError("Workout plan not found")
        return plan

    @staticmethod
    def create(db: Database, user: Dict[str, Any], data: WorkoutPlanCreate) -> Dict[str, Any]:
        now = datetime.utcnow()
        document = DocumentMapper.to_storage(data.model_dump())
        document.update({
            "user_id": user["_id"],
            "total_exercises": len(document["exercises"]),
            "saved_at": now,
            "last_modified": now,
        })
        plan = WorkoutPlanRepository(db).create(document)
        logger.info("Saved workout plan %s with %d exercises", plan["_id"], plan["total_exercises"])
        return plan

    @staticmethod
    def update(db: Database, user: Dict[str, Any], plan_id: str, data: WorkoutPlanUpdate) -> Dict[str, Any]:
        fields = DocumentMapper.to_storage(data.model_dump(exclude_unset=True, exclude_none=True))
        if "exercises" in fields:
            fields["total_exercises"] = len(fields["exercises"])
        fields["last_modified"] = datetime.utcnow()
        plan = WorkoutPlanRepository(db).update_owned(plan_id, user["_id"], fields)
        if not plan:
            raise NotFoundError("Workout plan not found")
        return plan

    @staticmethod
    def delete(db: Database, user: Dict[str, Any], plan_id: str) -> None:
        if not WorkoutPlanRepository(db).delete_owned(plan_id, user["_id"]):
            raise NotFoundError("Workout plan not found")


class WorkoutSessionService:
    @staticmethod
    def list(
        db: Database, user: Dict[str, Any], page: int = 1, limit: int = 20
    ) -> Tuple[List[Dict[str, Any]], int, int, int]:
        """Completed sessions, newest ``start_time`` first; ``limit`` is capped at 200."""
        page, limit = _page_params(page, limit, MAX_SESSION_PAGE_SIZE)
        sessions, total = WorkoutSessionRepository(db).paginate(user["_id"], page, limit, "start_time", -1)
        return sessions, total, page, limit

    @staticmethod
    def get(db: Database, user: Dict[str, Any], session_id: str) -> Dict[str, Any]:
        session = WorkoutSessionRepository(db).get_owned(session_id, user["_id"])
        if not session:
            raise NotFoundError("Workout session not found")
        return session

    @staticmethod
    def create(db: Database, user: Dict[str, Any], data: WorkoutSessionCreate) -> Dict[str, Any]:
        """
        Store a finished workout.

        Raises:
            ServiceValidationError: "Missing field: <name>" or end before start
        """
        for field in SESSION_REQUIRED_FIELDS:
            value = getattr(data, field)
            if value is None or (field == "workout_plan_name" and not value.strip()):
                raise ServiceValidationError(f"Missing field: {field}")
        WorkoutSessionService._check_times(data.start_time, data.end_time)

        document = DocumentMapper.to_storage(data.model_dump())
        document.update({
            "user_id": user["_id"],
            "calories_burned": data.calories_burned or 0,
            "status": "completed",
        })
        session = WorkoutSessionRepository(db).create(document)
        logger.info(
            "Stored workout session %s (%d/%d sets) for user %s",
            session["_id"], data.completed_sets, data.total_sets, user["_id"],
        )
        return session

    @staticmethod
    def update(db: Database, user: Dict[str, Any], session_id: str, data: WorkoutSessionUpdate) -> Dict[str, Any]:
        repo = WorkoutSessionRepository(db)
        session = repo.get_owned(session_id, user["_id"])
        if not session:
            raise NotFoundError("Workout session not found")
        if data.end_time is not None:
            WorkoutSessionService._check_times(session.get("start_time"), data.end_time)
        fields = DocumentMapper.to_storage(data.model_dump(exclude_unset=True, exclude_none=True))
        if not fields:
            return session
        return repo.update_owned(session_id, user["_id"], fields)

    @staticmethod
    def delete(db: Database, user: Dict[str, Any], session_id: str) -> None:
        if not WorkoutSessionRepository(db).delete_owned(session_id, user["_id"]):
            raise NotFoundError("Workout session not found")

    @staticmethod
    def _check_times(start: Optional[datetime], end: Optional[datetime]) -> None:
        if start is None or end is None:
            return
        if start.tzinfo is not None:
            start = start.replace(tzinfo=None) - start.utcoffset()
        if end.tzinfo is not None:
            end = end.replace(tzinfo=None) - end.utcoffset()
        if end < start:
            raise ServiceValidationError("End time must be after start time")
