"""
base.py — Shared pydantic base for domain records

Records use snake_case attributes in Python and the camelCase field names of
the JSON contract on the wire (`propertyName`, `keyStatus`, ...).
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
