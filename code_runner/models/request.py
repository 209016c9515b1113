from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class RunProgramRequest(BaseModel):
    """Request model for program execution."""

    model_config = ConfigDict(frozen=True)

    code: Optional[str] = Field(
        None,
        description="Source code to compile and run"
    )
    language: Optional[str] = Field(
        None,
        description="One of java, python, javascript, c, cpp, csharp (case-insensitive)"
    )
    input: Optional[List[str]] = Field(
        None,
        description="Lines fed to the program's standard input"
    )

    def joined_input(self) -> str:
        """Standard input content as written to the input file."""
        return "\n".join(self.input or [])
