"""Registry schemas."""
from pydantic import BaseModel


class RegistryCount(BaseModel):
    count: int
