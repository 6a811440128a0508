from typing import List, Optional

from pydantic import BaseModel


class CreateApiKeyPayload(BaseModel):
    name: Optional[str] = None
    permissions: Optional[List[str]] = None
