from typing import List
from pydantic import BaseModel, Field
from diagtree.models.tree import START_STEP_ID

class WalkSession(BaseModel):
    id: str
    tree_id: str
    history: List[str] = Field(default_factory=lambda: [START_STEP_ID])
