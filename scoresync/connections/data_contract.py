from pydantic import BaseModel, ConfigDict


class HttpResponse(BaseModel):
    """Status and body text of a single attempt; nothing else survives the attempt."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    body: str = ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300
