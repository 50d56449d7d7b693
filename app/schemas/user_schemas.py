from pydantic import BaseModel, Field
from typing import Optional


class CallerIdentity(BaseModel):
    id: str = Field(..., description="Account identifier resolved from the bearer token")
    email: Optional[str] = Field(None, description="Email address on the account, when the provider returns one")
    role: Optional[str] = Field(None, description="Role claim carried by the token")
