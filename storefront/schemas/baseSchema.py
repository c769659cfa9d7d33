from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """API payloads use camelCase keys; snake_case is accepted on input too"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,  # accept field names as well as aliases
        from_attributes=True,  # build straight from Beanie documents
    )
