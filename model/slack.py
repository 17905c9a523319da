from typing import Optional
from pydantic import BaseModel, ConfigDict


class SlackMessage(BaseModel):
    """
    Subset of a Slack `message` / `app_mention` event we act on.
    """

    model_config = ConfigDict(extra="ignore")

    type: str = "message"
    channel: str = ""
    ts: str = ""
    text: Optional[str] = None
    user: Optional[str] = None
    thread_ts: Optional[str] = None
    subtype: Optional[str] = None
    bot_id: Optional[str] = None

    @property
    def reply_thread(self) -> str:
        return self.thread_ts or self.ts
