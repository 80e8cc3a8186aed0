from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class EngineModel(BaseModel):
    """Request body base: accepts snake_case fields or camelCase collaborator payloads."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
