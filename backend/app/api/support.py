from fastapi import APIRouter
from pydantic import BaseModel, field_validator

from ..services.support_bot import GREETING, reply_to
from ..utils.validation import validate_string_field

router = APIRouter(prefix="/api/support", tags=["Support"])


class ChatRequest(BaseModel):
    message: str

    @field_validator("message")
    @classmethod
    def _check_message(cls, v: str) -> str:
        return validate_string_field(v, "Message", min_length=1, max_length=1000)


@router.get("/chat")
def chat_greeting():
    return {"reply": GREETING}


@router.post("/chat")
def chat(payload: ChatRequest):
    return {"reply": reply_to(payload.message)}
