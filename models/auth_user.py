from dataclasses import dataclass
from typing import Optional


@dataclass
class AuthUser:
    id: str
    name: str
    picture: Optional[str] = None
    phone_number: Optional[str] = None
    exp: Optional[int] = None
