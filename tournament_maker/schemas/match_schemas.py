from pydantic import BaseModel, Field

class MatchScoreUpdate(BaseModel):
    score1: int = Field(ge=0)
    score2: int = Field(ge=0)
    complete: bool = False # False only saves progress
