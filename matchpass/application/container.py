from dataclasses import dataclass

from sqlalchemy.engine import Engine

from matchpass.application.booking_service import BookingService
from matchpass.application.catalog_service import CatalogService
from matchpass.application.credential_service import CredentialVerifier
from matchpass.application.inventory_service import InventoryReservationEngine
from matchpass.application.payment_channel_service import PaymentChannelRegistry
from matchpass.config import Settings
from matchpass.domain.pricing import FeePolicy
from matchpass.domain.references import BookingReferenceGenerator
from matchpass.infrastructure.db.session import build_engine, build_session_factory
from matchpass.infrastructure.repositories.interfaces import Store
from matchpass.infrastructure.repositories.memory import InMemoryStore
from matchpass.infrastructure.repositories.sql import SqlAlchemyStore


@dataclass
class Services:
    """Everything a request handler needs, wired around one store."""

    store: Store
    catalog: CatalogService
    inventory: InventoryReservationEngine
    bookings: BookingService
    payment_channels: PaymentChannelRegistry
    credentials: CredentialVerifier
    engine: Engine | None = None


def build_services(store: Store, settings: Settings, engine: Engine | None = None) -> Services:
    inventory = InventoryReservationEngine(store)
    return Services(
        store=store,
        catalog=CatalogService(store),
        inventory=inventory,
        bookings=BookingService(
            store,
            inventory,
            fee_policy=FeePolicy(
                gst_rate_percent=settings.gst_rate_percent,
                service_fee_percent=settings.service_fee_percent,
            ),
            reference_generator=BookingReferenceGenerator(
                prefix=settings.booking_reference_prefix,
            ),
        ),
        payment_channels=PaymentChannelRegistry(store),
        credentials=CredentialVerifier(store, rounds=settings.bcrypt_rounds),
        engine=engine,
    )


def build_store(settings: Settings) -> tuple[Store, Engine | None]:
    if settings.storage_backend == "memory":
        return InMemoryStore(), None

    engine = build_engine(settings.database_url)
    return SqlAlchemyStore(build_session_factory(engine)), engine
