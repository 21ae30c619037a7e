import logging
from typing import Any, Mapping

from matchpass.domain.exceptions import InvalidInputError, NotFoundError
from matchpass.domain.limits import DISPLAY_NAME_MAX_LENGTH, UPI_ID_MAX_LENGTH, ensure_fits
from matchpass.domain.models import (
    PAYMENT_CHANNEL_PATCH_FIELDS,
    NewPaymentChannel,
    PaymentChannel,
)
from matchpass.infrastructure.repositories.interfaces import Store

logger = logging.getLogger(__name__)


class PaymentChannelRegistry:
    """
    Keeps at most one UPI payment channel active.
    Deactivation and the write that activates a channel share one unit of work.
    """

    def __init__(self, store: Store):
        self.store = store

    def create(self, channel: NewPaymentChannel) -> PaymentChannel:
        upi_id = (channel.upi_id or "").strip()
        if not upi_id:
            raise InvalidInputError("upi_id is required")
        ensure_fits(upi_id, UPI_ID_MAX_LENGTH, "upi_id")
        ensure_fits(channel.display_name, DISPLAY_NAME_MAX_LENGTH, "display_name")

        with self.store.unit_of_work() as uow:
            if channel.is_active:
                deactivated = uow.payment_channels.deactivate_all()
                if deactivated:
                    logger.info("Deactivated %s payment channel(s).", deactivated)
            created = uow.payment_channels.add(
                NewPaymentChannel(
                    upi_id=upi_id,
                    qr_code=channel.qr_code,
                    display_name=channel.display_name,
                    is_active=channel.is_active,
                )
            )

        logger.info(
            "Payment channel created. id=%s upi_id=%s active=%s",
            created.id,
            created.upi_id,
            created.is_active,
        )
        return created

    def update(self, channel_id: int, patch: Mapping[str, Any]) -> PaymentChannel:
        changes = _clean_patch(patch)

        with self.store.unit_of_work() as uow:
            if uow.payment_channels.get(channel_id) is None:
                raise NotFoundError("Payment channel", channel_id)
            if changes.get("is_active"):
                uow.payment_channels.deactivate_all(except_id=channel_id)
            updated = uow.payment_channels.update(channel_id, changes)

        if changes.get("is_active"):
            logger.info("Payment channel activated. id=%s", channel_id)
        return updated

    def get_active(self) -> PaymentChannel | None:
        with self.store.unit_of_work() as uow:
            return uow.payment_channels.get_active()

    def list_channels(self) -> list[PaymentChannel]:
        with self.store.unit_of_work() as uow:
            return uow.payment_channels.list_all()


def _clean_patch(patch: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(patch) - PAYMENT_CHANNEL_PATCH_FIELDS
    if unknown:
        raise InvalidInputError(f"Unknown payment channel fields: {', '.join(sorted(unknown))}")

    changes = dict(patch)
    if "upi_id" in changes:
        upi_id = (changes["upi_id"] or "").strip()
        if not upi_id:
            raise InvalidInputError("upi_id cannot be blank")
        changes["upi_id"] = upi_id
    ensure_fits(changes.get("upi_id"), UPI_ID_MAX_LENGTH, "upi_id")
    ensure_fits(changes.get("display_name"), DISPLAY_NAME_MAX_LENGTH, "display_name")
    if "is_active" in changes and not isinstance(changes["is_active"], bool):
        raise InvalidInputError("is_active must be a boolean")
    return changes
