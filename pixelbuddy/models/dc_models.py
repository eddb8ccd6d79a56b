from pydantic import BaseModel, Field, StrictFloat


class ActionModel(BaseModel):
    # Checked against the action table in the domain layer so unknown names
    # come back as a ValidationError rather than a schema error.
    action: str


class RenameModel(BaseModel):
    name: str


class SyncModel(BaseModel):
    hunger: StrictFloat
    happiness: StrictFloat
    energy: StrictFloat
    hygiene: StrictFloat


class WorldToggleModel(BaseModel):
    open: bool


class TalkModel(BaseModel):
    message: str


class TalkResponseModel(BaseModel):
    response: str
    fallback: bool = False


class SyncResponseModel(BaseModel):
    success: bool


class ErrorModel(BaseModel):
    error: str
    message: str


class HealthModel(BaseModel):
    status: str
    database: str
    timestamp: str | None = None
    error: str | None = None
    uptime: float | None = Field(default=None, description="Seconds since the app started")
