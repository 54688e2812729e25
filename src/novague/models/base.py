"""Shared base model for design artifacts."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ArtifactModel(BaseModel):
    """Base for every artifact model.

    Fields are snake_case in Python and accept camelCase aliases on input,
    which is the shape generation backends are asked to produce.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
