from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Money:
    amount: Decimal
    currency: str

    def __post_init__(self):
        if self.amount is None:
            raise ValueError('Amount cannot be null')
        if self.currency is None:
            raise ValueError('Currency cannot be null')
        object.__setattr__(self, 'currency', self.currency.strip())

    def __str__(self) -> str:
        return f'{self.amount} {self.currency}'
