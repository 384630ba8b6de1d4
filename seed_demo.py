# seed_demo.py

from sqlmodel import Session

from app.database import create_db_and_tables, engine
from app.models import user as _user_models  # noqa: F401
from app.models import request as _request_models  # noqa: F401
from app.models import pitch as _pitch_models  # noqa: F401
from app.services.seed_service import seed_demo_data


def main():
    print("Seeding demo data...")

    create_db_and_tables()
    with Session(engine) as session:
        seeded = seed_demo_data(session)

    if seeded:
        print("Demo users and requests created.")
    else:
        print("Nothing seeded (data already present or an error was logged).")


if __name__ == "__main__":
    main()
