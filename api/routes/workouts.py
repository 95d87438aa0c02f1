"""Workout log, exercise library, workout plan and workout session routes"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from pymongo.database import Database
import logging

from api.dependencies import get_current_user, get_db
from api.responses import paginated_response
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
from services.workout_service import (
    ExerciseService,
    WorkoutEntryService,
    WorkoutPlanService,
    WorkoutSessionService,
)

router = APIRouter(tags=["Workouts"])
logger = logging.getLogger("lifetrack.api.workouts")


# ---------------------------------------------------------------------------
# Daily workout entries
# ---------------------------------------------------------------------------


@router.get("/workouts")
def list_workouts(
    date: Optional[str] = Query(None, description="Day as YYYY-MM-DD"),
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    workouts = WorkoutEntryService.list_for_date(db, user, date)
    return {"workouts": [DocumentMapper.to_response(w) for w in workouts]}


@router.post("/workouts", status_code=status.HTTP_201_CREATED)
def create_workout(
    payload: WorkoutEntryCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Log a workout; ``total_calories`` is the sum over its exercises"""
    return DocumentMapper.to_response(WorkoutEntryService.create(db, user, payload))


@router.delete("/workouts/{workout_id}")
def delete_workout(
    workout_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    WorkoutEntryService.delete(db, user, workout_id)
    return {"message": "Workout deleted successfully"}


# ---------------------------------------------------------------------------
# Exercise library and catalog
# ---------------------------------------------------------------------------


@router.get("/exercises")
def list_exercises(
    category: Optional[str] = Query(None),
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    exercises = ExerciseService.list(db, user, category)
    return {"exercises": [DocumentMapper.to_response(e) for e in exercises]}


@router.get("/exercises/{exercise_id}")
def get_exercise(
    exercise_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return DocumentMapper.to_response(ExerciseService.get(db, user, exercise_id))


@router.post("/exercises", status_code=status.HTTP_201_CREATED)
def create_exercise(
    payload: ExerciseCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return DocumentMapper.to_response(ExerciseService.create(db, user, payload))


@router.put("/exercises/{exercise_id}")
def update_exercise(
    exercise_id: str,
    payload: ExerciseUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return DocumentMapper.to_response(ExerciseService.update(db, user, exercise_id, payload))


@router.delete("/exercises/{exercise_id}")
def delete_exercise(
    exercise_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    ExerciseService.delete(db, user, exercise_id)
    return {"message": "Exercise deleted successfully"}


@router.get("/exercise-catalog")
def exercise_catalog(
    muscle: str = Query(..., description="Target muscle, e.g. biceps"),
    limit: int = Query(10),
    user: Dict[str, Any] = Depends(get_current_user),
):
    """Exercises for one muscle from the external catalog"""
    return {"exercises": ExerciseService.catalog(muscle, limit)}


# ---------------------------------------------------------------------------
# Workout plans
# ---------------------------------------------------------------------------


@router.get("/workout-plans")
def list_workout_plans(
    page: int = Query(1),
    limit: int = Query(10),
    sort_by: str = Query("saved_at"),
    order: str = Query("desc"),
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Saved workout plans, paginated"""
    plans, total, page, limit = WorkoutPlanService.list(db, user, page, limit, sort_by, order)
    return paginated_response([DocumentMapper.to_response(p) for p in plans], total, page, limit)


@router.post("/workout-plans", status_code=status.HTTP_201_CREATED)
def create_workout_plan(
    payload: WorkoutPlanCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return DocumentMapper.to_response(WorkoutPlanService.create(db, user, payload))


@router.get("/workout-plans/{plan_id}")
def get_workout_plan(
    plan_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return DocumentMapper.to_response(WorkoutPlanService.get(db, user, plan_id))


@router.put("/workout-plans/{plan_id}")
def update_workout_plan(
    plan_id: str,
    payload: WorkoutPlanUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Update a plan; ``total_exercises`` and ``last_modified`` are recomputed"""
    return DocumentMapper.to_response(WorkoutPlanService.update(db, user, plan_id, payload))


@router.delete("/workout-plans/{plan_id}")
def delete_workout_plan(
    plan_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    WorkoutPlanService.delete(db, user, plan_id)
    return {"message": "Workout plan deleted successfully"}


# ---------------------------------------------------------------------------
# Workout sessions
# ---------------------------------------------------------------------------


@router.get("/workout-sessions")
def list_workout_sessions(
    page: int = Query(1),
    limit: int = Query(20),
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    sessions, total, page, limit = WorkoutSessionService.list(db, user, page, limit)
    return paginated_response([DocumentMapper.to_response(s) for s in sessions], total, page, limit)


@router.post("/workout-sessions", status_code=status.HTTP_201_CREATED)
def create_workout_session(
    payload: WorkoutSessionCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Store a finished workout session"""
    return DocumentMapper.to_response(WorkoutSessionService.create(db, user, payload))


@router.get("/workout-sessions/{session_id}")
def get_workout_session(
    session_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return DocumentMapper.to_response(WorkoutSessionService.get(db, user, session_id))


@router.put("/workout-sessions/{session_id}")
def update_workout_session(
    session_id: str,
    payload: WorkoutSessionUpdate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    return DocumentMapper.to_response(WorkoutSessionService.update(db, user, session_id, payload))


@router.delete("/workout-sessions/{session_id}")
def delete_workout_session(
    session_id: str,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    WorkoutSessionService.delete(db, user, session_id)
    return {"message": "Workout session deleted successfully"}
