"""
Demo Data Loader

Seeds students and peer tutors for demos and local testing.
Usage: python -m app.scripts.load_demo --students 20 --peers 12 --clear
"""
import asyncio
import argparse
import random
from typing import List

from faker import Faker
from sqlalchemy import delete

from app.database import AsyncSessionLocal, Base, engine
from app.models import Peer, Student, TutoringSession

# Subjects shared by students and peers so domain matches are likely
SUBJECTS = [
    "Math",
    "Physics",
    "Chemistry",
    "Biology",
    "Computer Science",
    "English",
    "Economics",
]


def build_students(fake: Faker, count: int) -> List[Student]:
    """Students with budgets between 1000 and 5000"""
    return [
        Student(
            name=fake.name(),
            subject=random.choice(SUBJECTS),
            range_budget=float(random.randrange(1000, 5001, 250)),
            rating=round(random.uniform(1, 5), 1),
            experience=float(random.randint(0, 4)),
        )
        for _ in range(count)
    ]


def build_peers(fake: Faker, count: int) -> List[Peer]:
    """Peers with charges between 800 and 6000"""
    return [
        Peer(
            name=fake.name(),
            domain=random.choice(SUBJECTS),
            experience=float(random.randint(0, 10)),
            rating=round(random.uniform(2.5, 5), 1),
            charges=float(random.randrange(800, 6001, 200)),
        )
        for _ in range(count)
    ]


async def clear_data():
    """Clear all existing data"""
    async with AsyncSessionLocal() as session:
        for model in (TutoringSession, Student, Peer):
            await session.execute(delete(model))
        await session.commit()
    print("✓ Cleared existing data")


async def load_demo(students: int, peers: int, clear: bool, seed: int):
    random.seed(seed)
    fake = Faker()
    Faker.seed(seed)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if clear:
        await clear_data()

    async with AsyncSessionLocal() as session:
        session.add_all(build_students(fake, students))
        session.add_all(build_peers(fake, peers))
        await session.commit()

    await engine.dispose()
    print(f"✓ Created {students} students and {peers} peers across {len(SUBJECTS)} subjects")


def main():
    parser = argparse.ArgumentParser(description="Load demo students and peers")
    parser.add_argument("--students", type=int, default=20, help="Number of students to create")
    parser.add_argument("--peers", type=int, default=12, help="Number of peers to create")
    parser.add_argument("--clear", action="store_true", help="Delete existing sessions, students and peers first")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducible data")
    args = parser.parse_args()

    asyncio.run(load_demo(args.students, args.peers, args.clear, args.seed))


if __name__ == "__main__":
    main()
