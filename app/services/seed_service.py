# app/services/seed_service.py
"""
Demo fixtures for an empty Assistix deployment.

Seeding runs at most once per process (in-memory flag) and is skipped
when current-generation demo requests already exist. Before checking,
demo requests left over from the first product iteration (no city, or a
retired category) are removed together with their pitches.
"""
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.catalog import RETIRED_CATEGORIES
from app.core.events import REQUESTS, feed
from app.models.request import HelpRequest
from app.models.user import User
from app.repositories.pitch_repo import PitchRepository
from app.repositories.request_repo import RequestRepository
from app.repositories.user_repo import UserRepository
from app.services.request_service import RequestService

logger = logging.getLogger(__name__)

DEMO_USERS = [
    {
        "uid": "demo-user-1",
        "name": "Sarah Chen",
        "email": "sarah.chen@demo.com",
        "photo_url": "https://images.unsplash.com/photo-1494790108377-be9c29b29330?w=100&h=100&fit=crop&crop=face",
        "skills": ["Cooking", "Tutoring", "Gardening"],
        "helps_given": 15,
        "active_city": "bilaspur_cg",
    },
    {
        "uid": "demo-user-2",
        "name": "Marcus Johnson",
        "email": "marcus.j@demo.com",
        "photo_url": "https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?w=100&h=100&fit=crop&crop=face",
        "skills": ["Computer Repair", "Wi-Fi Setup", "Python"],
        "helps_given": 23,
        "active_city": "bilaspur_cg",
    },
    {
        "uid": "demo-user-3",
        "name": "Emily Rodriguez",
        "email": "emily.r@demo.com",
        "photo_url": "https://images.unsplash.com/photo-1438761681033-6461ffad8d80?w=100&h=100&fit=crop&crop=face",
        "skills": ["Pet Sitting", "Dog Walking"],
        "helps_given": 31,
        "active_city": "koni_bilaspur",
    },
    {
        "uid": "demo-user-4",
        "name": "David Kim",
        "email": "david.kim@demo.com",
        "photo_url": "https://images.unsplash.com/photo-1500648767791-00dcc994a43e?w=100&h=100&fit=crop&crop=face",
        "skills": ["Carpentry", "Plumbing", "Painting"],
        "helps_given": 18,
        "active_city": "koni_bilaspur",
    },
    {
        "uid": "demo-user-5",
        "name": "Priya Patel",
        "email": "priya.p@demo.com",
        "photo_url": "https://images.unsplash.com/photo-1534528741775-53994a69daeb?w=100&h=100&fit=crop&crop=face",
        "skills": ["Maths Tutoring", "Accounting"],
        "helps_given": 12,
        "active_city": "bilaspur_cg",
    },
]

DEMO_REQUESTS = [
    {
        "title": "Need help carrying furniture to the 3rd floor",
        "description": "Moving a sofa and two cupboards into my new flat this Sunday morning. No lift in the building, two extra hands needed for about an hour.",
        "category": "Moving",
        "payment": 500,
        "created_by": "demo-user-1",
        "status": "open",
        "city": "bilaspur_cg",
        "area": "Vyapar Vihar",
    },
    {
        "title": "Wi-Fi router keeps dropping connection",
        "description": "Home router disconnects every few minutes. Looking for someone who can check the setup and configure it properly.",
        "category": "Tech Help",
        "payment": 300,
        "created_by": "demo-user-5",
        "status": "open",
        "city": "bilaspur_cg",
        "area": "Sarkanda",
    },
    {
        "title": "Maths tuition for class 8 student",
        "description": "Need a tutor for algebra and geometry, three evenings a week for the next month before exams.",
        "category": "Tutoring",
        "payment": 2000,
        "created_by": "demo-user-2",
        "status": "in_review",
        "city": "bilaspur_cg",
        "area": "Torwa",
    },
    {
        "title": "Pick up medicines from the pharmacy",
        "description": "My mother needs her monthly medicines picked up from the pharmacy near the bus stand. Prescription will be shared.",
        "category": "Errands",
        "payment": 150,
        "created_by": "demo-user-4",
        "status": "open",
        "city": "koni_bilaspur",
        "society": "Green Valley Society",
    },
    {
        "title": "Walk my dog while I am travelling",
        "description": "Need someone to walk my Labrador twice a day for four days next week. He is friendly and well trained.",
        "category": "Pet Care",
        "payment": 800,
        "created_by": "demo-user-4",
        "status": "open",
        "city": "koni_bilaspur",
        "area": "Koni",
    },
    {
        "title": "Fix a leaking kitchen tap",
        "description": "The kitchen tap has been leaking since last week. Parts are available, just need someone handy to replace the washer.",
        "category": "Repairs",
        "payment": 250,
        "created_by": "demo-user-3",
        "status": "assigned",
        "city": "koni_bilaspur",
        "society": "Shanti Nagar",
    },
    {
        "title": "Help cleaning up before Diwali",
        "description": "Looking for help with deep cleaning a 2BHK flat, mainly windows, fans and kitchen shelves.",
        "category": "Household",
        "payment": 600,
        "created_by": "demo-user-1",
        "status": "open",
        "city": "bilaspur_cg",
        "society": "Mangla Apartments",
    },
    {
        "title": "Set up video calling for my parents",
        "description": "Parents got a new smartphone and need someone patient to set up video calling and show them how it works.",
        "category": "Tech Help",
        "payment": 200,
        "created_by": "demo-user-2",
        "status": "open",
        "city": "bilaspur_cg",
        "area": "Seepat Road",
    },
]

DEMO_UIDS = [u["uid"] for u in DEMO_USERS]

_seeded = False


def _cleanup_previous_generation(session: Session, requests: RequestService) -> int:
    """
    Remove demo requests from the first product iteration.

    Recognised by convention: they have no city, or use a category that
    no longer exists.
    """
    removed = 0
    for request in requests.request_repo.list_for_owners(session, DEMO_UIDS):
        if request.city is None or request.category in RETIRED_CATEGORIES:
            requests.cascade_delete(session, request)
            removed += 1
    if removed:
        logger.info("Removed %d outdated demo request(s)", removed)
    return removed


def _upsert_demo_user(session: Session, users: UserRepository, data: dict) -> User:
    user = users.get_by_id(session, data["uid"])
    if user is None:
        return users.create(session, User(**data))
    for key, value in data.items():
        setattr(user, key, value)
    return users.update(session, user)


def seed_demo_data(session: Session) -> bool:
    """
    Populate demo users and requests.

    Returns:
        True if data was written, False if it was skipped or failed.
    """
    global _seeded
    if _seeded:
        return False

    user_repo = UserRepository()
    requests = RequestService(RequestRepository(), PitchRepository(), user_repo)

    try:
        _cleanup_previous_generation(session, requests)

        if requests.request_repo.list_for_owners(session, DEMO_UIDS):
            logger.info("Demo data already exists")
            _seeded = True
            return False

        for data in DEMO_USERS:
            _upsert_demo_user(session, user_repo, data)

        # Spread creation times so the feed has a stable newest-first order
        now = datetime.now(timezone.utc)
        for i, data in enumerate(DEMO_REQUESTS):
            requests.request_repo.create(
                session,
                HelpRequest(**data, created_at=now - timedelta(hours=i)),
            )
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Error seeding demo data")
        return False

    feed.publish(REQUESTS)
    _seeded = True
    logger.info("Demo data seeded successfully")
    return True


def reset_seed_flag() -> None:
    """Forget that seeding ran in this process."""
    global _seeded
    _seeded = False
