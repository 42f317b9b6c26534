from datetime import UTC, datetime, timedelta
from typing import Any

from faker import Faker
from sqlalchemy.ext.asyncio import AsyncSession

from taekwondo_api.auth.models.user import User
from taekwondo_api.events.models.event import Event
from taekwondo_api.gallery.models.gallery_item import GalleryItem

fake = Faker()


async def create_user_factory(
    db_session: AsyncSession,
    email: str | None = None,
    password: str | None = "testpass123",
    name: str | None = None,
    role: str = "user",
    **fields: Any,
) -> User:
    """
    Factory function to create test users.

    Args:
        db_session: Database session
        email: User email (generates random if None)
        password: Plain text password, hashed on flush. None creates a
            Google-only account.
        name: User name (generates random if None)
        role: "user", "instructor" or "admin"

    Returns:
        Created User instance
    """
    user = User(
        email=email or fake.email(),
        password=password,
        name=name or fake.name()[:50],
        role=role,
        **fields,
    )

    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)

    return user


def event_payload(**overrides: Any) -> dict[str, Any]:
    """JSON body for creating an event that starts next week."""
    start = datetime.now(UTC) + timedelta(days=7)
    payload: dict[str, Any] = {
        "title": "State Championship",
        "description": fake.paragraph(),
        "event_type": "tournament",
        "city": "Pune",
        "state": "Maharashtra",
        "country": "India",
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(days=1)).isoformat(),
        "belt_ranks": ["all"],
        "age_groups": ["kids", "adults"],
        "fee_amount": 500,
    }
    payload.update(overrides)
    return payload


async def create_event_factory(
    db_session: AsyncSession,
    created_by: User,
    start_date: datetime | None = None,
    **fields: Any,
) -> Event:
    start = start_date or datetime.now(UTC) + timedelta(days=7)
    event = Event(
        title=fields.pop("title", "District Belt Test"),
        description=fields.pop("description", fake.paragraph()),
        event_type=fields.pop("event_type", "belt-test"),
        city=fields.pop("city", "Mumbai"),
        state=fields.pop("state", "Maharashtra"),
        country=fields.pop("country", "India"),
        start_date=start,
        end_date=fields.pop("end_date", start + timedelta(hours=4)),
        created_by=created_by.id,
        **fields,
    )

    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)

    return event


async def create_gallery_item_factory(
    db_session: AsyncSession,
    uploaded_by: User,
    is_public: bool = True,
    **fields: Any,
) -> GalleryItem:
    item = GalleryItem(
        title=fields.pop("title", fake.sentence(nb_words=3)[:100]),
        media_type=fields.pop("media_type", "image"),
        media_url=fields.pop("media_url", fake.image_url()),
        category=fields.pop("category", "training"),
        is_public=is_public,
        uploaded_by=uploaded_by.id,
        **fields,
    )

    db_session.add(item)
    await db_session.commit()
    await db_session.refresh(item)

    return item


def enrollment_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "full_name": fake.name()[:100],
        "email": fake.email(),
        "phone": "9876543210",
        "date_of_birth": "2012-05-14",
        "gender": "female",
        "address": fake.street_address(),
        "city": "Nagpur",
        "pincode": "440001",
        "emergency_contact": fake.name()[:100],
        "emergency_phone": "9123456780",
        "program": "childrens",
        "experience": "none",
        "how_did_you_hear": "friend",
    }
    payload.update(overrides)
    return payload


def contact_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": "Asha Patil",
        "email": "asha@example.com",
        "subject": "Classes for my son",
        "message": "Do you run weekend classes for beginners?",
        "enquiry_type": "training",
    }
    payload.update(overrides)
    return payload
