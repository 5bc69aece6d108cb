from pydantic import BaseModel, field_validator


class BlankAsNullModel(BaseModel):
    """Request body where an empty string means the same as null."""

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and v.strip() == "":
            return None
        return v
