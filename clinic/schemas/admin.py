from pydantic import BaseModel, Field, StringConstraints
from typing import Annotated, Optional

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class AdminLogin(BaseModel):
    email: RequiredText
    password: RequiredText


class DoctorUpsert(BaseModel):
    name: RequiredText
    email: RequiredText
    department: RequiredText
    phone: Optional[str] = None
    password: Optional[str] = Field(default=None, max_length=200)
