"""
Audit record of one request/response exchange.

A Payload is built when a call completes or fails and travels with the
result: success calls return it, failures carry it on the raised error.
It is diagnostic only and never drives control flow.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class Payload(BaseModel):
    """Immutable snapshot of one exchange with a provider."""
    model_config = ConfigDict(frozen=True)

    url: str
    model: Optional[str] = None
    request: str = ""
    response: Optional[str] = None
    token_count: int = 0
    error_message: Optional[str] = None

    def with_error(self, message: str) -> "Payload":
        """Return a copy of this payload with ``error_message`` set."""
        return self.model_copy(update={"error_message": message})

    def report(self) -> str:
        """Render the payload as a human readable report."""
        lines = [
            "=== RELAY API REPORT ===",
            f"URL:      {self.url}",
            f"Model:    {self.model}",
            f"Tokens:   {self.token_count}",
        ]
        if self.error_message:
            lines.append(f"Error:    {self.error_message}")
        lines += [
            "",
            "--- REQUEST PAYLOAD ---",
            self.request or "EMPTY",
            "",
            "--- RESPONSE PAYLOAD ---",
            self.response or "EMPTY",
            "========================",
        ]
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.report()
