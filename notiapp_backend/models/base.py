"""
Base model configuration
Request bodies arrive from the JavaScript presentation layer in camelCase
"""

from pydantic import BaseModel as PydanticBaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseModel(PydanticBaseModel):
    """Base model with camelCase conversion for JavaScript compatibility.

    - Accepts camelCase arguments for snake_case python fields
    - Forbids unknown fields
    """

    model_config = ConfigDict(
        # See: <https://docs.pydantic.dev/2.10/concepts/alias/#using-an-aliasgenerator>
        alias_generator=to_camel,
        # snake_case in Python code, camelCase from JS
        populate_by_name=True,
        # See: <https://docs.pydantic.dev/2.10/concepts/models/#extra-data>
        extra="forbid",
    )

    def model_dump(self, **kwargs):
        """Always dump with aliases (camelCase) unless told otherwise"""
        kwargs.setdefault("by_alias", True)
        return super().model_dump(**kwargs)
