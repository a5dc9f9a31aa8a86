"""
Request bodies for the JSON API.
Domain checks (department, type, format, month range) are done in the route handlers.
"""
from datetime import date
from typing import List, Optional, Union

from pydantic import BaseModel, Field


class ObjectiveCreate(BaseModel):
    department: str
    objective_name: Optional[str] = None
    objective_smart: str = Field(..., min_length=1)
    type_objective: str
    target_numeric: float
    number_format: str = "number"
    start_date: date
    end_date: date
    order_index: int = 0
    reverse_logic: bool = False


class ObjectiveUpdate(BaseModel):
    objective_name: Optional[str] = None
    objective_smart: Optional[str] = None
    type_objective: Optional[str] = None
    target_numeric: Optional[float] = None
    number_format: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    order_index: Optional[int] = None
    reverse_logic: Optional[bool] = None


class BulkObjectiveCreate(BaseModel):
    objectives: List[ObjectiveCreate] = Field(..., min_length=1)


class ValueUpdate(BaseModel):
    month: int
    year: int
    # Strings are parsed with the objective's number format (pasted cells)
    value: Union[float, str]


class BulkValueUpdate(BaseModel):
    values: List[ValueUpdate] = Field(..., min_length=1)


class BulkDelete(BaseModel):
    objective_ids: List[int]


class ReorderRequest(BaseModel):
    department: str
    ordered_ids: List[int]


class ChatMessage(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    messages: List[ChatMessage]
    department: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
