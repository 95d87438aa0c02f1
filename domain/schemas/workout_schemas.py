from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from domain.enums import ExerciseCategory, MuscleGroup, Difficulty


# Exercise library

class ExerciseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    category: ExerciseCategory = ExerciseCategory.STRENGTH
    muscle_groups: List[MuscleGroup] = Field(default_factory=list)
    difficulty: Difficulty = Difficulty.BEGINNER
    description: Optional[str] = Field(None, max_length=2000)
    reps: int = Field(10, ge=0)
    sets: int = Field(3, ge=0)
    weight: float = Field(0, ge=0)
    rest: int = Field(60, ge=0)
    image: Optional[str] = None

    @field_validator("name")
    def strip_name(cls, v):
        return v.strip()


class ExerciseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[ExerciseCategory] = None
    muscle_groups: Optional[List[MuscleGroup]] = None
    difficulty: Optional[Difficulty] = None
    description: Optional[str] = Field(None, max_length=2000)
    reps: Optional[int] = Field(None, ge=0)
    sets: Optional[int] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)
    rest: Optional[int] = Field(None, ge=0)
    image: Optional[str] = None


# Workout plans

class PlanSet(BaseModel):
    set_number: int = Field(..., ge=1)
    weight: float = Field(10, ge=0)
    reps: int = Field(0, ge=0)
    rest_seconds: int = Field(60, ge=0)
    is_completed: bool = False


class PlanExercise(BaseModel):
    exercise_id: str
    name: str
    gif_url: Optional[str] = None
    target_muscles: List[str] = Field(default_factory=list)
    body_parts: List[str] = Field(default_factory=list)
    equipments: List[str] = Field(default_factory=list)
    secondary_muscles: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    sets: List[PlanSet] = Field(default_factory=list)


class PlanMuscleGroup(BaseModel):
    muscle_name: str
    body_part: str
    exercise_count: int = Field(..., ge=1)


class WorkoutPlanCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    muscle_groups: List[PlanMuscleGroup] = Field(..., min_length=1)
    exercises: List[PlanExercise] = Field(..., min_length=1)
    is_custom: bool = False
    notes: Optional[str] = Field(None, max_length=2000)


class WorkoutPlanUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    muscle_groups: Optional[List[PlanMuscleGroup]] = Field(None, min_length=1)
    exercises: Optional[List[PlanExercise]] = Field(None, min_length=1)
    is_custom: Optional[bool] = None
    notes: Optional[str] = Field(None, max_length=2000)


# Workout sessions

class WorkoutSessionCreate(BaseModel):
    """
    Completed session payload. Required fields are checked by the service so
    the client receives a ``Missing field: <name>`` message.
    """

    plan_id: Optional[str] = None
    workout_plan_name: Optional[str] = None
    exercises: Optional[List[PlanExercise]] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_seconds: Optional[int] = Field(None, ge=0)
    total_sets: Optional[int] = Field(None, ge=0)
    completed_sets: Optional[int] = Field(None, ge=0)
    calories_burned: Optional[float] = Field(None, ge=0)
    body_weight: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=2000)


class WorkoutSessionUpdate(BaseModel):
    workout_plan_name: Optional[str] = None
    exercises: Optional[List[PlanExercise]] = None
    end_time: Optional[datetime] = None
    duration_seconds: Optional[int] = Field(None, ge=0)
    total_sets: Optional[int] = Field(None, ge=0)
    completed_sets: Optional[int] = Field(None, ge=0)
    calories_burned: Optional[float] = Field(None, ge=0)
    body_weight: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=2000)
