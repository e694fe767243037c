"""
Request descriptor model: one deferred HTTP request plus the outcome of its
dispatch attempt.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from ..errors import DispatchError, OutcomeAlreadyRecordedError


class Disposition(str, Enum):
    """Final classification of a dispatch attempt."""

    ACCEPTED = 'accepted'
    DROPPED = 'dropped'
    RETRY_ELIGIBLE = 'retry_eligible'

    @property
    def acknowledge(self) -> bool:
        """True when the queue message should be removed rather than requeued."""
        return self is not Disposition.RETRY_ELIGIBLE


class MessageFields(BaseModel):
    """JSON payload carried in the message body."""

    url: str = Field(default='', description='Target URL for the POST (REQUIRED)')
    headers: list[dict[str, str]] = Field(
        default_factory=list,
        description='Ordered single-key header maps; later keys overwrite earlier ones',
    )
    body: str = Field(default='', description='Request body, sent verbatim')

    @model_validator(mode='before')
    @classmethod
    def match_keys_case_insensitively(cls, data: Any) -> Any:
        """Accept 'URL', 'Headers', ... as the field names; an exact-case key wins."""
        if not isinstance(data, dict):
            return data
        matched = dict(data)
        for key, value in data.items():
            name = key.lower() if isinstance(key, str) else key
            if name in cls.model_fields and name != key:
                matched.setdefault(name, value)
        return matched

    @field_validator('headers', mode='before')
    @classmethod
    def null_headers_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def flat_headers(self) -> dict[str, str]:
        """Flatten the header sequence into one mapping, last occurrence wins."""
        flattened: dict[str, str] = {}
        for header in self.headers:
            flattened.update(header)
        return flattened


@dataclass
class RequestDescriptor:
    """
    Validated, typed representation of one queue message.

    Created once by the parser. The outcome fields are written exactly once by
    a dispatch attempt through ``record_outcome``.
    """

    # Identity
    message_id: str

    # Http request fields
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ''

    # Provenance (unix seconds, 0 when unknown)
    created_at: int = 0
    expires_at: int = 0

    # Redelivery history (both 0 on the first attempt)
    retry_count: int = 0
    first_rejected_at: int = 0

    # Outcome
    status_text: str = ''
    response_body: str = ''
    dispatch_error: DispatchError | None = None
    disposition: Disposition | None = None

    @property
    def dispatched(self) -> bool:
        return self.disposition is not None

    def record_outcome(
        self,
        disposition: Disposition,
        *,
        status_text: str = '',
        response_body: str = '',
        error: DispatchError | None = None,
    ) -> None:
        """Attach the result of the dispatch attempt. May only be called once."""
        if self.dispatched:
            raise OutcomeAlreadyRecordedError(
                "Outcome already recorded for message",
                context={
                    'message_id': self.message_id,
                    'disposition': self.disposition.value,
                },
            )
        self.disposition = disposition
        self.status_text = status_text
        self.response_body = response_body
        self.dispatch_error = error

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging."""
        return {
            'message_id': self.message_id,
            'url': self.url,
            'headers': self.headers,
            'body_length': len(self.body),
            'created_at': self.created_at,
            'expires_at': self.expires_at,
            'retry_count': self.retry_count,
            'first_rejected_at': self.first_rejected_at,
            'disposition': self.disposition.value if self.disposition else None,
            'status_text': self.status_text,
            'error': str(self.dispatch_error) if self.dispatch_error else None,
        }
