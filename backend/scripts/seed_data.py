"""Seed the database with a small demo marketplace: hosts, guests, villas, bookings, reviews.

Bookings are created through the booking service so that the availability
ledger matches their statuses exactly.

Run from the backend directory:
    python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete, or_, select

from villamarket.auth.passwords import hash_password
from villamarket.database import async_session_factory
from villamarket.models.availability import AvailabilityDay
from villamarket.models.booking import Booking
from villamarket.models.review import Review
from villamarket.models.user import User
from villamarket.models.villa import Amenity, Villa
from villamarket.services import availability, villa_service
from villamarket.services.booking_service import create_booking, transition_booking
from villamarket.services.review_service import submit_review

DEMO_DOMAIN = "villamarket.demo"
DEMO_PASSWORD = "demo1234"

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

HOSTS = [
    {"key": "maria", "name": "Maria Costa", "phone_number": "+15550100101"},
    {"key": "tom", "name": "Tom Fletcher", "phone_number": "+15550100102"},
]

GUESTS = [
    {"key": "emma", "name": "Emma Thompson", "phone_number": "+61412345678"},
    {"key": "james", "name": "James Wilson", "phone_number": "+447911123456"},
    {"key": "yuki", "name": "Yuki Tanaka", "phone_number": "+819012345678"},
]

AMENITIES = [
    ("private_pool", "waves"),
    ("wifi", "wifi"),
    ("ac", "snowflake"),
    ("kitchen", "utensils"),
    ("parking", "car"),
    ("garden_view", "trees"),
]

VILLAS = [
    {
        "host": "maria",
        "amenities": ["private_pool", "wifi", "ac", "kitchen", "parking"],
        "data": {
            "title": "Harbour View Villa",
            "description": "Two-bedroom villa with a private pool above the harbour.",
            "property_type": "villa",
            "num_guests": 4,
            "num_bedrooms": 2,
            "num_beds": 2,
            "num_bathrooms": 3,
            "price_per_night": Decimal("129.00"),
            "cleaning_fee": Decimal("25.00"),
            "minimum_nights": 2,
            "house_rules": "No parties. Quiet hours after 22:00.",
            "exact_address": "21 Quay Street, Port Ellis",
            "directions_landmarks": "Opposite the lighthouse",
        },
    },
    {
        "host": "maria",
        "amenities": ["wifi", "garden_view"],
        "data": {
            "title": "Meadow Cottage",
            "description": "Countryside cottage at the edge of the village green.",
            "property_type": "cottage",
            "num_guests": 2,
            "num_bedrooms": 1,
            "num_beds": 1,
            "num_bathrooms": 1,
            "price_per_night": Decimal("86.00"),
            "minimum_nights": 1,
            "exact_address": "Green Lane, Little Hadley",
            "directions_landmarks": "Ten minutes from the village station",
        },
    },
    {
        "host": "tom",
        "amenities": ["private_pool", "wifi", "ac", "kitchen"],
        "data": {
            "title": "Cliffside Retreat",
            "description": "Three-bedroom villa with an infinity pool over the cove.",
            "property_type": "villa",
            "num_guests": 6,
            "num_bedrooms": 3,
            "num_beds": 3,
            "num_bathrooms": 3,
            "price_per_night": Decimal("163.00"),
            "cleaning_fee": Decimal("40.00"),
            "minimum_nights": 3,
            "preferred_payment_method": "bank_transfer",
            "exact_address": "5 Cliff Road, Penrose Cove",
            "directions_landmarks": "Above the cove steps",
        },
    },
]


async def _clear_demo_data(session) -> None:
    """Remove every row owned by a demo account so the seed can be re-run."""
    demo_users = select(User.id).where(User.email.like(f"%@{DEMO_DOMAIN}"))
    demo_villas = select(Villa.id).where(Villa.host_id.in_(demo_users))
    demo_bookings = select(Booking.id).where(
        or_(Booking.villa_id.in_(demo_villas), Booking.guest_id.in_(demo_users))
    )

    await session.execute(delete(Review).where(Review.booking_id.in_(demo_bookings)))
    await session.execute(delete(AvailabilityDay).where(AvailabilityDay.villa_id.in_(demo_villas)))
    await session.execute(delete(Booking).where(Booking.id.in_(demo_bookings)))
    for villa in (await session.execute(select(Villa).where(Villa.id.in_(demo_villas)))).scalars().all():
        await session.delete(villa)
    await session.flush()
    await session.execute(delete(User).where(User.email.like(f"%@{DEMO_DOMAIN}")))
    await session.flush()


async def _get_or_create_amenities(session) -> dict[str, Amenity]:
    existing = {a.name: a for a in (await session.execute(select(Amenity))).scalars().all()}
    for name, icon in AMENITIES:
        if name not in existing:
            amenity = Amenity(name=name, icon_name=icon)
            session.add(amenity)
            existing[name] = amenity
    await session.flush()
    return existing


async def seed() -> None:
    """Populate the database with demo marketplace data.

    Idempotent: demo accounts (``*@villamarket.demo``) and everything they
    own are deleted and re-created.
    """
    async with async_session_factory() as session:
        await _clear_demo_data(session)

        # ------------------------------------------------------------------
        # 1. Accounts
        # ------------------------------------------------------------------
        users: dict[str, User] = {}
        for account_type, people in (("host", HOSTS), ("guest", GUESTS)):
            for person in people:
                user = User(
                    email=f"{person['key']}@{DEMO_DOMAIN}",
                    hashed_password=hash_password(DEMO_PASSWORD),
                    name=person["name"],
                    phone_number=person["phone_number"],
                    account_type=account_type,
                    is_active=True,
                )
                session.add(user)
                users[person["key"]] = user
        await session.flush()
        print(f"✅ Created {len(HOSTS)} hosts and {len(GUESTS)} guests")

        # ------------------------------------------------------------------
        # 2. Amenities and villas
        # ------------------------------------------------------------------
        amenities = await _get_or_create_amenities(session)
        villas: list[Villa] = []
        for listing in VILLAS:
            host = users[listing["host"]]
            villa = await villa_service.create_villa(session, host, listing["data"])
            for name in listing["amenities"]:
                await villa_service.add_villa_amenity(session, villa.id, host.id, amenities[name].id)
            villa = await villa_service.update_villa(session, villa.id, host.id, {"status": "listed"})
            villas.append(villa)
            print(f"   🏠 {villa.title} (${villa.price_per_night}/night, min {villa.minimum_nights} nights)")

        harbour, meadow, cliff = villas
        maria, tom = users["maria"], users["tom"]
        emma, james, yuki = users["emma"], users["james"], users["yuki"]
        today = date.today()

        # ------------------------------------------------------------------
        # 3. Host-blocked days
        # ------------------------------------------------------------------
        await availability.update_calendar(
            session,
            cliff.id,
            tom.id,
            [(today + timedelta(days=d), "blocked") for d in (20, 21)],
        )

        # ------------------------------------------------------------------
        # 4. Bookings in every status
        # ------------------------------------------------------------------
        async def request(villa: Villa, guest: User, start: int, nights: int, guests: int = 2) -> Booking:
            return await create_booking(
                session,
                villa_id=villa.id,
                guest_id=guest.id,
                check_in=today + timedelta(days=start),
                check_out=today + timedelta(days=start + nights),
                num_guests=guests,
                guest_message=f"Hi {villa.host.name}, we'd love to stay!",
            )

        # Past stay, completed and reviewed by both parties
        past = await request(harbour, emma, -20, 4)
        await transition_booking(session, past.id, maria.id, "confirmed")
        await transition_booking(session, past.id, maria.id, "completed", today=today)
        await submit_review(session, past.id, emma.id, maria.id, 5, "Beautiful pool, very helpful host.", "Towels were thin.")
        await submit_review(session, past.id, maria.id, emma.id, 5, "Lovely guest, left the villa spotless.", None)

        # Past stay, completed, only the guest has reviewed so far
        quiet = await request(meadow, james, -10, 3)
        await transition_booking(session, quiet.id, maria.id, "confirmed")
        await transition_booking(session, quiet.id, maria.id, "completed", today=today)
        await submit_review(session, quiet.id, james.id, maria.id, 4, "Peaceful, a bit remote.", None)

        # Upcoming confirmed stay with check-in instructions
        upcoming = await request(cliff, yuki, 10, 4)
        await transition_booking(
            session,
            upcoming.id,
            tom.id,
            "confirmed",
            check_in_instructions="Ask for Sam at the gate; the key box code is sent on arrival day.",
        )

        # Pending request waiting for the host
        await request(harbour, james, 30, 3)

        # Cancelled by the guest after confirmation
        cancelled = await request(meadow, emma, 15, 2)
        await transition_booking(session, cancelled.id, maria.id, "confirmed")
        await transition_booking(
            session,
            cancelled.id,
            emma.id,
            "cancelled",
            cancellation_reason="change_of_plans",
            cancellation_message="Flights moved, sorry!",
        )

        await session.commit()

        print("✅ Created 5 bookings (completed x2, confirmed, pending, cancelled) and 3 reviews")
        print()
        print("=" * 60)
        print("📊 Seed Summary")
        print("=" * 60)
        host_logins = ", ".join(f"{h['key']}@{DEMO_DOMAIN}" for h in HOSTS)
        guest_logins = ", ".join(f"{g['key']}@{DEMO_DOMAIN}" for g in GUESTS)
        print(f"   Hosts:     {host_logins}")
        print(f"   Guests:    {guest_logins}")
        print(f"   Password:  {DEMO_PASSWORD}")
        print(f"   Villas:    {len(villas)}")
        print("=" * 60)
        print("🎉 Done! You can now log in at /api/v1/auth/login")


if __name__ == "__main__":
    asyncio.run(seed())
