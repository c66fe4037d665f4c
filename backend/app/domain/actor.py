"""
Actor Domain Model

The authenticated account placing a request. Identity comes from the
auth framework; this service trusts it as given.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class Actor(BaseModel):
    id: str = Field(..., description="Account ID")
    email: str = Field(..., description="Account email")
    name: Optional[str] = Field(None, description="Display name")
    is_active: bool = Field(True, description="False when the account is suspended")

    model_config = ConfigDict(from_attributes=True)
