from pydantic import BaseModel


class ChatRequest(BaseModel):
    message: str


class ChatResponse(BaseModel):
    response: str
    timestamp: str
    processed: bool = True


class ErrorResponse(BaseModel):
    error: str
    timestamp: str
