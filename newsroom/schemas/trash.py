import uuid
from typing import Literal

from pydantic import BaseModel


class TrashItemRequest(BaseModel):
    type: Literal["bulletin", "row"]
    id: uuid.UUID
