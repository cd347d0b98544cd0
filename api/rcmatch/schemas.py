from pydantic import BaseModel


class LoginRequest(BaseModel):
    username: str
    password: str | None = None


class SwipeRequest(BaseModel):
    target_id: str
    action: str


class SendMessageRequest(BaseModel):
    content: str = ""
