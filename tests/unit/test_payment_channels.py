# tests/unit/test_payment_channels.py

import pytest

from matchpass.domain.exceptions import InvalidInputError, NotFoundError
from matchpass.domain.limits import DISPLAY_NAME_MAX_LENGTH, UPI_ID_MAX_LENGTH
from matchpass.domain.models import NewPaymentChannel


def _active_ids(services):
    return [c.id for c in services.payment_channels.list_channels() if c.is_active]


def test_no_channel_means_no_active_channel(services):
    assert services.payment_channels.get_active() is None


def test_creating_an_active_channel_deactivates_the_previous_one(services):
    first = services.payment_channels.create(NewPaymentChannel(upi_id="first@ybl"))
    second = services.payment_channels.create(NewPaymentChannel(upi_id="second@ybl"))

    assert services.payment_channels.get_active().id == second.id
    assert _active_ids(services) == [second.id]
    assert first.id != second.id


def test_inactive_channel_leaves_the_active_one_alone(services):
    active = services.payment_channels.create(NewPaymentChannel(upi_id="main@ybl"))
    services.payment_channels.create(NewPaymentChannel(upi_id="spare@ybl", is_active=False))

    assert services.payment_channels.get_active().id == active.id


def test_activating_by_update_switches_the_active_channel(services):
    first = services.payment_channels.create(NewPaymentChannel(upi_id="first@ybl"))
    spare = services.payment_channels.create(
        NewPaymentChannel(upi_id="spare@ybl", is_active=False)
    )

    updated = services.payment_channels.update(spare.id, {"is_active": True})

    assert updated.is_active
    assert _active_ids(services) == [spare.id]
    assert services.payment_channels.get_active().upi_id == "spare@ybl"
    assert first.id not in _active_ids(services)


def test_deactivating_the_only_channel_leaves_none_active(services):
    channel = services.payment_channels.create(NewPaymentChannel(upi_id="only@ybl"))

    services.payment_channels.update(channel.id, {"is_active": False})

    assert services.payment_channels.get_active() is None


def test_update_other_fields(services):
    channel = services.payment_channels.create(NewPaymentChannel(upi_id="old@ybl"))

    updated = services.payment_channels.update(
        channel.id,
        {"upi_id": " new@ybl ", "display_name": "IPL Tickets"},
    )

    assert updated.upi_id == "new@ybl"
    assert updated.display_name == "IPL Tickets"
    assert updated.is_active


def test_blank_upi_id_is_rejected(services):
    with pytest.raises(InvalidInputError):
        services.payment_channels.create(NewPaymentChannel(upi_id="  "))

    channel = services.payment_channels.create(NewPaymentChannel(upi_id="ok@ybl"))
    with pytest.raises(InvalidInputError):
        services.payment_channels.update(channel.id, {"upi_id": ""})


def test_unknown_patch_fields_are_rejected(services):
    channel = services.payment_channels.create(NewPaymentChannel(upi_id="ok@ybl"))

    with pytest.raises(InvalidInputError):
        services.payment_channels.update(channel.id, {"created_at": None})


def test_update_unknown_channel(services):
    with pytest.raises(NotFoundError):
        services.payment_channels.update(999, {"is_active": True})


def test_overlong_upi_id_is_rejected(services):
    with pytest.raises(InvalidInputError):
        services.payment_channels.create(
            NewPaymentChannel(upi_id="u" * (UPI_ID_MAX_LENGTH + 1))
        )
    assert services.payment_channels.list_channels() == []

    channel = services.payment_channels.create(NewPaymentChannel(upi_id="ok@ybl"))
    with pytest.raises(InvalidInputError):
        services.payment_channels.update(
            channel.id, {"display_name": "d" * (DISPLAY_NAME_MAX_LENGTH + 1)}
        )
    assert services.payment_channels.get_active().display_name == channel.display_name
