"""
FitPro fitness assistant.

Every message is routed by intent. Training requests walk through two
questions (muscle groups, then exercise count) and end with a workout plan
built from the exercise catalog; everything else gets a coach answer.

The conversation state lives in the history the client sends back: assistant
messages of the training flow carry ``stage`` and ``data``.
"""

import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from adapters import exercise_api_adapter, openai_adapter
from domain.enums import ChatCategory, ChatStage
from domain.mappers import UserMapper
from domain.schemas.ai_schemas import ChatHistoryMessage, FitnessChatRequest

logger = logging.getLogger("lifetrack.services.fitness_chat")

HISTORY_LIMIT = 20
MIN_EXERCISES = 1
MAX_EXERCISES = 12
DEFAULT_SETS = 3
DEFAULT_REPS = 10
DEFAULT_WEIGHT = 10
DEFAULT_REST_SECONDS = 60
CHAT_TIMEOUT_SEC = 30

# keyword pattern -> (catalog muscle, body part, label)
MUSCLE_GROUPS: List[Tuple[str, Tuple[str, str, str]]] = [
    (r"chest|pecs?|pectorals?", ("pectorals", "chest", "Chest")),
    (r"back|lats?", ("lats", "back", "Back")),
    (r"shoulders?|delts?|deltoids?", ("delts", "shoulders", "Shoulders")),
    (r"biceps?", ("biceps", "upper arms", "Biceps")),
    (r"triceps?", ("triceps", "upper arms", "Triceps")),
    (r"legs?|quads?|quadriceps|thighs?", ("quads", "upper legs", "Legs")),
    (r"hamstrings?", ("hamstrings", "upper legs", "Hamstrings")),
    (r"glutes?|butt", ("glutes", "upper legs", "Glutes")),
    (r"calf|calves", ("calves", "lower legs", "Calves")),
    (r"abs|core|abdominals?|stomach", ("abs", "waist", "Abs")),
]
CATALOG_MUSCLES = {muscle: (body_part, label) for _, (muscle, body_part, label) in MUSCLE_GROUPS}

ASK_MUSCLE_GROUPS_TEXT = (
    "Great, let's build a workout! Which muscle groups do you want to train? "
    "For example: chest, back, shoulders, biceps, triceps, legs, hamstrings, glutes, calves or abs."
)
ASK_MUSCLE_GROUPS_AGAIN_TEXT = (
    "Sorry, I didn't recognise any muscle group. Please pick from: chest, back, shoulders, "
    "biceps, triceps, legs, hamstrings, glutes, calves or abs."
)
ASK_COUNT_AGAIN_TEXT = (
    f"How many exercises would you like in total? Please answer with a number between "
    f"{MIN_EXERCISES} and {MAX_EXERCISES}."
)

CLASSIFY_PROMPT = """Classify the user's message for a fitness assistant into exactly one category:
- training: the user wants a workout, training plan or exercises to do
- nutrition: food, diet, calories, supplements, hydration
- recovery: rest, sleep, soreness, injuries, stretching, stress
- general: anything else
Answer with JSON only: {"category": "training|nutrition|recovery|general"}"""

FITPRO_PROMPT = """You are FitPro, an expert fitness and nutrition coach with over 15 years of experience.
Give personalised, evidence-based and safe advice on workouts, nutrition, recovery and motivation.
Be friendly and supportive, use simple language and give specific, actionable steps.
Recommend consulting a healthcare professional for medical concerns.
Keep answers concise (2-4 short paragraphs), use bullet points for lists and end with an
encouraging note or a question."""


def sanitize_history(history: List[ChatHistoryMessage]) -> List[Dict[str, Any]]:
    """Keep the last 20 user/assistant messages that have string content."""
    cleaned = []
    for msg in history[-HISTORY_LIMIT:]:
        if msg.role not in ("user", "assistant") or not isinstance(msg.content, str):
            continue
        entry: Dict[str, Any] = {"role": msg.role, "content": msg.content}
        if msg.role == "assistant" and msg.stage:
            entry["stage"] = msg.stage
            entry["data"] = msg.data or {}
        cleaned.append(entry)
    return cleaned


def parse_muscle_groups(text: str) -> List[Dict[str, str]]:
    """Muscle groups mentioned in ``text``, in order of first mention, without duplicates."""
    found = []
    lowered = text.lower()
    for pattern, (muscle, body_part, label) in MUSCLE_GROUPS:
        match = re.search(rf"\b(?:{pattern})\b", lowered)
        if match:
            found.append((match.start(), {"muscle_name": muscle, "body_part": body_part, "label": label}))
    found.sort(key=lambda item: item[0])

    groups, seen = [], set()
    for _, group in found:
        if group["muscle_name"] not in seen:
            seen.add(group["muscle_name"])
            groups.append(group)
    return groups


def known_muscle_groups(raw: Any) -> List[Dict[str, str]]:
    """
    Muscle groups echoed back by the client, reduced to known catalog muscles.

    Entries that are not dicts or name an unknown muscle are dropped; body part
    and label always come from the table, never from the client.
    """
    if not isinstance(raw, list):
        return []
    groups, seen = [], set()
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        muscle = entry.get("muscle_name")
        if not isinstance(muscle, str) or muscle not in CATALOG_MUSCLES or muscle in seen:
            continue
        seen.add(muscle)
        body_part, label = CATALOG_MUSCLES[muscle]
        groups.append({"muscle_name": muscle, "body_part": body_part, "label": label})
    return groups


def parse_exercise_count(text: str) -> Optional[int]:
    """First integer in ``text`` clamped to 1..12, or None."""
    match = re.search(r"\d+", text)
    if not match:
        return None
    return min(max(int(match.group(0)), MIN_EXERCISES), MAX_EXERCISES)


def distribute_exercises(count: int, group_count: int) -> List[int]:
    """Even split of ``count`` over groups; the remainder goes to the first groups."""
    if group_count <= 0:
        return []
    base, remainder = divmod(count, group_count)
    return [base + (1 if i < remainder else 0) for i in range(group_count)]


def _default_sets() -> List[Dict[str, Any]]:
    return [
        {
            "set_number": i + 1,
            "weight": DEFAULT_WEIGHT,
            "reps": DEFAULT_REPS,
            "rest_seconds": DEFAULT_REST_SECONDS,
            "is_completed": False,
        }
        for i in range(DEFAULT_SETS)
    ]


def build_workout_plan(groups: List[Dict[str, str]], count: int) -> Dict[str, Any]:
    """Fetch catalog exercises per muscle group and assemble a plan in the workout-plan create shape."""
    plan_groups = []
    exercises = []
    for group, wanted in zip(groups, distribute_exercises(count, len(groups))):
        if wanted == 0:
            continue
        fetched = exercise_api_adapter.exercises_by_muscle(group["muscle_name"], limit=wanted)
        if not fetched:
            logger.warning("Exercise catalog had no exercises for %s", group["muscle_name"])
            continue
        plan_groups.append({
            "muscle_name": group["muscle_name"],
            "body_part": group["body_part"],
            "exercise_count": len(fetched),
        })
        for exercise in fetched:
            exercise = dict(exercise)
            exercise["exercise_id"] = str(exercise.get("exercise_id") or "")
            exercise["notes"] = None
            exercise["sets"] = _default_sets()
            exercises.append(exercise)

    labels = [g.get("label") or g["muscle_name"].title() for g in groups]
    return {
        "name": f"{' & '.join(labels)} workout",
        "muscle_groups": plan_groups,
        "exercises": exercises,
        "is_custom": False,
        "notes": None,
    }


def _user_context(user: Dict[str, Any]) -> str:
    weight = user.get("weight") or {}
    height = user.get("height") or {}
    target = ((user.get("goal") or {}).get("plan") or {}).get("target_weight_kg")
    lines = [
        "\n\nUser profile (use it to personalise advice, do not repeat it back):",
        f"- Name: {user.get('first_name') or 'Unknown'}",
        f"- Age: {UserMapper.age(user) or 'Unknown'}",
        f"- Gender: {user.get('gender') or 'Not specified'}",
        f"- Weight: {weight.get('value') or 'Unknown'} {weight.get('unit') or 'kg'}",
        f"- Height: {height.get('value') or 'Unknown'} {height.get('unit') or 'cm'}",
        f"- Daily calorie goal: {user.get('daily_calorie_goal') or 'Not set'}",
    ]
    if target:
        lines.append(f"- Target weight: {target} kg")
    return "\n".join(lines)


class FitnessChatService:
    @staticmethod
    def classify(message: str) -> ChatCategory:
        result = openai_adapter.chat_json(
            CLASSIFY_PROMPT, message, temperature=0, max_tokens=20, timeout=CHAT_TIMEOUT_SEC
        )
        try:
            return ChatCategory(str(result.get("category", "")).strip().lower())
        except ValueError:
            return ChatCategory.GENERAL

    @staticmethod
    def answer(user: Dict[str, Any], history: List[Dict[str, Any]], message: str) -> str:
        messages = [{"role": "system", "content": FITPRO_PROMPT + _user_context(user)}]
        messages += [{"role": m["role"], "content": m["content"]} for m in history]
        messages.append({"role": "user", "content": message})
        return openai_adapter.chat_text(
            messages, temperature=0.7, max_tokens=800, timeout=CHAT_TIMEOUT_SEC
        )

    @staticmethod
    def chat(user: Dict[str, Any], data: FitnessChatRequest) -> Dict[str, Any]:
        """
        Handle one chat turn.

        Raises:
            ServiceUnavailableError: AI not configured (classification or answer needed)
            UpstreamTimeoutError / RateLimitedError: AI failures
        """
        history = sanitize_history(data.conversation_history)
        message = data.message
        last_assistant = next((m for m in reversed(history) if m["role"] == "assistant"), None)
        last_stage = last_assistant.get("stage") if last_assistant else None

        category = ChatCategory.TRAINING
        stage_data: Dict[str, Any] = {}

        if last_stage == ChatStage.ASK_MUSCLE_GROUPS.value:
            groups = parse_muscle_groups(message)
            if groups:
                names = ", ".join(g["label"].lower() for g in groups)
                stage = ChatStage.ASK_EXERCISE_COUNT
                stage_data = {"muscle_groups": groups}
                reply = (
                    f"Nice choice: {names}. How many exercises would you like in total "
                    f"({MIN_EXERCISES}-{MAX_EXERCISES})?"
                )
            else:
                stage, reply = ChatStage.ASK_MUSCLE_GROUPS, ASK_MUSCLE_GROUPS_AGAIN_TEXT

        elif last_stage == ChatStage.ASK_EXERCISE_COUNT.value:
            groups = known_muscle_groups((last_assistant.get("data") or {}).get("muscle_groups"))
            count = parse_exercise_count(message)
            if not groups:
                stage, reply = ChatStage.ASK_MUSCLE_GROUPS, ASK_MUSCLE_GROUPS_TEXT
            elif count is None:
                stage, reply = ChatStage.ASK_EXERCISE_COUNT, ASK_COUNT_AGAIN_TEXT
                stage_data = {"muscle_groups": groups}
            else:
                plan = build_workout_plan(groups, count)
                if plan["exercises"]:
                    stage = ChatStage.WORKOUT_READY
                    stage_data = {"workout_plan": plan}
                    reply = (
                        f"Your workout is ready: {len(plan['exercises'])} exercises, "
                        f"{DEFAULT_SETS} sets of {DEFAULT_REPS} reps each with {DEFAULT_REST_SECONDS}s rest. "
                        "Save it to start training!"
                    )
                else:
                    stage = ChatStage.ASK_MUSCLE_GROUPS
                    reply = "I couldn't find exercises for those muscle groups. Which other muscles would you like to train?"

        else:
            category = FitnessChatService.classify(message)
            if category == ChatCategory.TRAINING:
                stage, reply = ChatStage.ASK_MUSCLE_GROUPS, ASK_MUSCLE_GROUPS_TEXT
            else:
                stage = ChatStage.ANSWER
                reply = FitnessChatService.answer(user, history, message)

        logger.info("Fitness chat turn for user %s: category=%s stage=%s", user["_id"], category.value, stage.value)

        timestamp = datetime.utcnow().isoformat()
        updated_history = history + [
            {"role": "user", "content": message, "timestamp": timestamp},
            {
                "role": "assistant",
                "content": reply,
                "timestamp": timestamp,
                "stage": stage.value,
                "data": stage_data,
            },
        ]
        return {
            "success": True,
            "response": reply,
            "category": category.value,
            "stage": stage.value,
            "data": stage_data,
            "conversation_history": updated_history,
            "timestamp": timestamp,
            "message_count": len(updated_history),
        }
