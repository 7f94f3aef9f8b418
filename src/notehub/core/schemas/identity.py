"""Identity of the caller, as supplied by the identity provider."""

import uuid

from pydantic import BaseModel, ConfigDict


class Viewer(BaseModel):
    """Authenticated user making the current request."""

    id: uuid.UUID
    username: str = ""

    model_config = ConfigDict(frozen=True)
