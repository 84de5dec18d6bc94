from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

ACCEPTED = "Accepted"


class WebhookRequest(BaseModel):
    to: str
    content: str


class WebhookAck(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: str
    message_id: str = Field(alias="messageId")

    @property
    def accepted(self) -> bool:
        return self.message == ACCEPTED and bool(self.message_id)
