"""
Construction results.

Validators return Ok(value) or Err(reason) instead of raising, so a form
handler can branch on `is_ok` without try/except. `unwrap()` is there for
callers that prefer the exception.
"""

from typing import Generic, Optional, TypeVar, Union

from pydantic import BaseModel, Field

from condo_ledger.exceptions import ValidationError


EntityT = TypeVar("EntityT")


class Ok(BaseModel, Generic[EntityT]):
    """A successfully built, not yet persisted entity."""

    value: EntityT

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> EntityT:
        return self.value


class Err(BaseModel):
    """Why an entity could not be built."""

    reason: str = Field(
        ...,
        description="Human-readable message, safe to show verbatim"
    )
    field: Optional[str] = Field(
        default=None,
        description="Input that failed, if a single one did"
    )

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self):
        raise ValidationError(self.reason, field=self.field)


# Ok[T] is Ok itself at runtime, so this alias is not subscriptable.
# Annotate builders as Union[Ok[Entity], Err] instead.
ConstructionResult = Union[Ok, Err]
