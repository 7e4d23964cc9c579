"""Error model for failed queries and updates."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class ErrorCode(StrEnum):
    """Why a query or update failed."""

    PREPARE_FAILED = "prepare_failed"
    BIND_FAILED = "bind_failed"
    # An update failed because its underlying query could not be prepared or bound
    EXECUTE_QUERY_FAILED = "execute_query_failed"
    STEP_FAILED = "step_failed"


class Error(BaseModel):
    """A typed failure with the engine's message and result code at the time."""

    model_config = ConfigDict(frozen=True)

    code: ErrorCode
    message: str
    engine_code: int | None = None

    def __str__(self) -> str:
        if self.engine_code is None:
            return f"{self.code}: {self.message}"
        return f"{self.code}: {self.message} (engine code {self.engine_code})"
