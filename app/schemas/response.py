from pydantic import BaseModel
from typing import Dict, Union


class ErrorResponse(BaseModel):
    """
    Standard error response structure.
    """
    error: str


class OkResponse(BaseModel):
    ok: bool = True


class HealthResponse(BaseModel):
    """
    Credential presence and store reachability.
    """
    env: Dict[str, Union[bool, str]]
    gist_ok: bool = False
