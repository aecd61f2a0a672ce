from typing import Literal

from pydantic import BaseModel


class Notification(BaseModel):
    id: str
    text: str
    time: str
    read: bool = False
    type: Literal["success", "error", "info"] = "info"
