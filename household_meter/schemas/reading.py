"""Reading schemas. Wire names follow the legacy camelCase JSON shape."""

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, computed_field


class ReadingCreate(BaseModel):
    """Schema for submitting a new cumulative meter value."""

    model_config = ConfigDict(populate_by_name=True)

    current_kwh: StrictFloat | None = Field(default=None, alias="currentKWh")
    notes: str | None = ""
    for_username: str | None = Field(default=None, alias="forUsername")


class ReadingResponse(BaseModel):
    """Schema for a persisted reading."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    created_by: str | None = Field(serialization_alias="createdBy")
    owner_username: str | None = Field(serialization_alias="ownerUsername")
    on_behalf: bool = Field(serialization_alias="onBehalf")
    username: str | None
    start_kwh: float = Field(serialization_alias="startKWh")
    end_kwh: float = Field(serialization_alias="endKWh")
    delta_kwh: float = Field(serialization_alias="deltaKWh")
    notes: str | None
    timestamp: int
    global_pk: str = Field(serialization_alias="GlobalPK")

    @computed_field(alias="washId")  # type: ignore[prop-decorator]
    @property
    def wash_id(self) -> str:
        """Legacy name of the primary key."""
        return self.id


class ReadingCreated(BaseModel):
    """Envelope returned by POST /readings."""

    reading: ReadingResponse


class LatestKWhResponse(BaseModel):
    latest_end_kwh: float = Field(serialization_alias="latestEndKWh")
