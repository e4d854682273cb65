from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Plain confirmation body, e.g. after a delete"""

    message: str
