from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

class MailMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: str
    from_: str = Field(alias="from")
    subject: str
    html: str

class SendResult(BaseModel):
    status: Literal["sent", "skipped"]

class VerificationStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    status: Literal["pending", "approved", "denied"]
    decided_at: Optional[datetime] = Field(default=None, alias="decidedAt")

def callable_data(body: Any) -> Dict[str, Any]:
    """`data` of a callable request body; anything malformed reads as {}."""
    if not isinstance(body, dict):
        return {}
    data = body.get("data")
    return data if isinstance(data, dict) else {}
