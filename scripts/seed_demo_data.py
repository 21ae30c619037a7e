import logging
import os

from matchpass.application.container import Services, build_services, build_store
from matchpass.config import load_settings
from matchpass.domain.models import NewMatch, NewPaymentChannel, NewTicketType
from matchpass.infrastructure.db.models import Base

logger = logging.getLogger(__name__)

LOGO_BASE = "https://bcciplayerimages.s3.ap-south-1.amazonaws.com/ipl"

# Prices in paise.
GENERAL = ("General Stand", "Affordable seating, usually in the upper stands.", 99_900)
PREMIUM = ("Premium Stand", "Better view and closer to the action.", 199_000)
PAVILION = ("Pavilion Stand", "Premium seating with excellent view.", 299_900)
VIP = ("VIP Stand", "Exclusive seating with food and drinks.", 500_000)

MATCH_DEFS = [
    {
        "match": NewMatch(
            team1="Royal Challengers Bengaluru",
            team2="Delhi Capitals",
            team1_logo=f"{LOGO_BASE}/RCB/Logos/Roundbig/RCBroundbig.png",
            team2_logo=f"{LOGO_BASE}/DC/Logos/Roundbig/DCroundbig.png",
            venue="M. Chinnaswamy Stadium, Bengaluru, Karnataka",
            stadium="M. Chinnaswamy Stadium",
            date="10 April 2025",
            time="7:30 PM IST",
        ),
        "tickets": [(GENERAL, 1000), (PREMIUM, 500), (PAVILION, 300), (VIP, 100)],
    },
    {
        "match": NewMatch(
            team1="Chennai Super Kings",
            team2="Kolkata Knight Riders",
            team1_logo=f"{LOGO_BASE}/CSK/logos/Roundbig/CSKroundbig.png",
            team2_logo=f"{LOGO_BASE}/KKR/Logos/Roundbig/KKRroundbig.png",
            venue="M.A. Chidambaram Stadium, Chennai, Tamil Nadu",
            stadium="M.A. Chidambaram Stadium",
            date="11 April 2025",
            time="7:30 PM IST",
        ),
        "tickets": [(GENERAL, 1000), (PREMIUM, 500)],
    },
    {
        "match": NewMatch(
            team1="Lucknow Super Giants",
            team2="Gujarat Titans",
            team1_logo=f"{LOGO_BASE}/LSG/Logos/Roundbig/LSGroundbig.png",
            team2_logo=f"{LOGO_BASE}/GT/Logos/Roundbig/GTroundbig.png",
            venue="BRSABV Ekana Cricket Stadium, Lucknow",
            stadium="BRSABV Ekana Cricket Stadium",
            date="12 April 2025",
            time="3:30 PM IST",
        ),
        "tickets": [(GENERAL, 1000)],
    },
]


def seed_admin(services: Services) -> None:
    username = os.getenv("ADMIN_USERNAME", "admin")
    password = os.getenv("ADMIN_PASSWORD")
    if not password:
        logger.warning("ADMIN_PASSWORD not set; skipping admin provisioning.")
        return

    with services.store.unit_of_work() as uow:
        exists = uow.admins.get_by_username(username) is not None
    if exists:
        return
    services.credentials.provision(username, password, os.getenv("ADMIN_NAME", "Admin User"))


def seed_payment_channel(services: Services) -> None:
    if services.payment_channels.get_active() is not None:
        return
    services.payment_channels.create(
        NewPaymentChannel(
            upi_id=os.getenv("SEED_UPI_ID", "ipltickets@ybl"),
            display_name="IPL Tickets",
            is_active=True,
        )
    )


def seed_matches(services: Services) -> None:
    existing = {(m.team1, m.team2, m.date) for m in services.catalog.list_matches()}

    for item in MATCH_DEFS:
        match_def = item["match"]
        if (match_def.team1, match_def.team2, match_def.date) in existing:
            continue

        match = services.catalog.create_match(match_def)
        for (name, description, price), total_seats in item["tickets"]:
            services.catalog.create_ticket_type(
                NewTicketType(
                    match_id=match.id,
                    name=name,
                    description=description,
                    price=price,
                    total_seats=total_seats,
                )
            )


def main() -> None:
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)

    store, engine = build_store(settings)
    if engine is not None:
        Base.metadata.create_all(bind=engine)
    services = build_services(store, settings, engine=engine)

    seed_admin(services)
    seed_payment_channel(services)
    seed_matches(services)
    print("Seed complete: admin user, UPI channel, three IPL matches with ticket types added.")


if __name__ == "__main__":
    main()
