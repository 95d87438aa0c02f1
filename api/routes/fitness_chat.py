"""FitPro fitness assistant route"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
import logging

from api.dependencies import get_current_user
from domain.schemas.ai_schemas import FitnessChatRequest
from services.fitness_chat_service import FitnessChatService

router = APIRouter(prefix="/fitness", tags=["Fitness Chat"])
logger = logging.getLogger("lifetrack.api.fitness_chat")


@router.post("/chat")
def fitness_chat(payload: FitnessChatRequest, user: Dict[str, Any] = Depends(get_current_user)):
    """
    One turn of the fitness assistant. The client sends back the returned
    ``conversation_history`` with the next message.
    """
    return FitnessChatService.chat(user, payload)
