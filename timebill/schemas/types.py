from decimal import Decimal
from typing import Annotated

from pydantic import PlainSerializer

from timebill.utils.money import round_money

# Decimal in Python, exact two-place string such as "1500.00" on the wire
Money = Annotated[
    Decimal,
    PlainSerializer(lambda value: str(round_money(value)), return_type=str, when_used="json"),
]
