"""Base model for configuration and wire-facing data."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts camelCase JSON configuration and snake_case keyword arguments.

    Persona and company records arrive as camelCase documents from the
    host's store, so every model exposes camelCase aliases while code
    works with snake_case attributes.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )
