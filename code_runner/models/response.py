from pydantic import BaseModel, ConfigDict, Field


class RunProgramResponse(BaseModel):
    """Response envelope; the only contract clients rely on."""

    model_config = ConfigDict(populate_by_name=True)

    response_code: int = Field(..., alias="responseCode")
    output: str = ""
    error_message: str = Field("", alias="errorMessage")
