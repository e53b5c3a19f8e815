"""
Generation module data models.
"""

from pydantic import BaseModel, Field


class Prompt(BaseModel):
    """A structured prompt for one generation call."""

    model_config = {"frozen": True}

    system: str = Field(default="", description="Instruction block (persona, role)")
    user: str = Field(..., description="The task for this call")
