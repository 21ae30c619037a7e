# matchpass/domain/pricing.py

from dataclasses import dataclass


@dataclass(frozen=True)
class Charges:
    base_amount: int
    gst: int
    service_fee: int
    total_amount: int


@dataclass(frozen=True)
class FeePolicy:
    """
    Flat per-unit pricing plus fixed-rate GST and service fee.
    All amounts are integers in the smallest currency unit.
    """

    gst_rate_percent: int = 18
    service_fee_percent: int = 2

    def __post_init__(self) -> None:
        if self.gst_rate_percent < 0 or self.service_fee_percent < 0:
            raise ValueError("Fee rates cannot be negative")

    def charges_for(self, unit_price: int, quantity: int) -> Charges:
        if unit_price < 0:
            raise ValueError("unit_price cannot be negative")
        if quantity <= 0:
            raise ValueError("quantity must be positive")

        base_amount = unit_price * quantity
        gst = _percent_of(base_amount, self.gst_rate_percent)
        service_fee = _percent_of(base_amount, self.service_fee_percent)

        return Charges(
            base_amount=base_amount,
            gst=gst,
            service_fee=service_fee,
            total_amount=base_amount + gst + service_fee,
        )


def _percent_of(amount: int, percent: int) -> int:
    # Integer half-up rounding; amounts are never negative here.
    return (amount * percent + 50) // 100
