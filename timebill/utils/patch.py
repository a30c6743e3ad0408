from typing import Iterable

from pydantic import BaseModel

from timebill.core.exceptions import ValidationException


def reject_null_fields(patch: BaseModel, fields: Iterable[str]) -> None:
    """
    Refuse an explicit ``null`` for columns that must always hold a value.

    Fields left out of the patch are fine; only those the caller set to
    None are rejected.
    """
    sent = patch.model_dump(exclude_unset=True)
    nulled = sorted(field for field in fields if field in sent and sent[field] is None)
    if nulled:
        raise ValidationException(
            f"Fields cannot be null: {', '.join(nulled)}",
            details={field: "cannot be null" for field in nulled},
        )
