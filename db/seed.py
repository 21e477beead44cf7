# Add Manager Emails To The Roster
import argparse
from typing import Iterable, List

from sqlmodel import Session, SQLModel

from core.access import normalize_email
from db.session import engine
from models.manager import Manager


def seed_managers(session: Session, emails: Iterable[str]) -> List[str]:
    """Insert any emails not already on the roster; returns the ones added."""
    added = []
    for raw_email in emails:
        email = normalize_email(raw_email)
        if not email:
            continue
        if session.get(Manager, email):
            print(f"{email} is already a manager")
            continue
        session.add(Manager(email=email))
        added.append(email)
        print(f"Added manager {email}")
    session.commit()
    return added


def main(argv=None):
    parser = argparse.ArgumentParser(description="Add emails to the manager roster.")
    parser.add_argument("emails", nargs="+", help="Manager email address(es)")
    args = parser.parse_args(argv)

    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        seed_managers(session, args.emails)


if __name__ == "__main__":
    main()
