from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class ConversationsQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # missing clientId is reported as MISSING_PARAM by the handler
    client_id: Optional[str] = Field(default=None, alias="clientId")
    date_from: Optional[str] = Field(default=None, alias="from")
    date_to: Optional[str] = Field(default=None, alias="to")
    assistant_ids: Optional[List[str]] = Field(default=None, alias="assistantIds")
