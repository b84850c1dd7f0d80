from pydantic import BaseModel, EmailStr, Field
from typing_extensions import Annotated


class LoginRequest(BaseModel):
    email: EmailStr
    password: Annotated[str, Field(min_length=1, max_length=256)]
