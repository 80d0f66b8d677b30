"""Load reference courses (and optionally a demo user) into the database.
    pip install -e .
    python3 data/seed_courses.py data/sample_courses.json
    python3 data/seed_courses.py data/sample_courses.json "Taro Yamada" "taro@example.com"

Courses without hole data get a standard 18-hole layout matching their par.
Existing courses (same name) are skipped, so the script can be re-run.
"""

import asyncio
import json
import logging
import sys
from typing import Dict, List, Optional

from config import configure_logging, get_config
from database.connection import DatabasePool
from database.db_manager import DatabaseManager
from models import Course, CourseHole, User
from models.course import DEFAULT_HOLE_PAR

logger = logging.getLogger("seed_courses")

# Typical yardage by tee for a par 3/4/5
TEE_YARDAGE = {
    "Ladies": {3: 135, 4: 300, 5: 400},
    "Regular": {3: 165, 4: 370, 5: 500},
    "Back": {3: 185, 4: 420, 5: 560},
    "Champion": {3: 205, 4: 460, 5: 620},
}


def layout_pars(par_total: Optional[int]) -> List[int]:
    """
    Par 4-heavy layout with par 3s and 5s spread over both nines. The
    18th hole absorbs the difference to `par_total` (clamped to 3..5).
    """
    pars = []
    for number in range(1, 19):
        if 7 <= number <= 12:
            par = 4
        elif number <= 6:
            par = {1: 4, 2: 3, 0: 5}[number % 3]
        else:
            par = {1: 5, 2: 3, 0: 4}[number % 3]
        pars.append(par)
    if par_total:
        pars[-1] = max(3, min(5, pars[-1] + par_total - sum(pars)))
    return pars


def default_holes(course: Course) -> List[CourseHole]:
    tee_names = [t.name for t in course.tees]
    holes = []
    for number, par in enumerate(layout_pars(course.par_total), start=1):
        yardage = {
            name: TEE_YARDAGE[name][par] + number * 3
            for name in tee_names
            if name in TEE_YARDAGE
        }
        holes.append(
            CourseHole(
                number=number,
                par=par,
                handicap=number,
                yardage=yardage,
                description=f"Hole {number}",
            )
        )
    return holes


def build_course(data: Dict) -> Course:
    course = Course(**data)
    if not course.holes:
        course.holes = default_holes(course)
    if course.par_total is None:
        course.par_total = sum(h.par or DEFAULT_HOLE_PAR for h in course.holes)
    return course


async def seed(courses_path: str, user_name: str = None, user_email: str = None) -> None:
    with open(courses_path, encoding="utf-8") as f:
        courses_data = json.load(f)
    logger.info("Loaded %d courses from %s", len(courses_data), courses_path)

    cfg = get_config()
    pool = DatabasePool()
    await pool.initialize(**pool.kwargs_from_config(cfg))
    db = DatabaseManager(pool.pool)

    try:
        await pool.initialize_schema()

        created = 0
        for c_data in courses_data:
            name = c_data["name"]
            existing = await db.courses.find_course_by_name(name)
            if existing:
                logger.info("Course exists: %s (%s)", name, existing.id)
                continue
            course = await db.courses.create_course(build_course(c_data))
            logger.info("Created course: %s (%s), par %s", name, course.id, course.par_total)
            created += 1

        if user_email:
            user = await db.users.get_user_by_email(user_email)
            if user:
                logger.info("Found existing user: %s (%s)", user.name, user.id)
            else:
                user = await db.users.create_user(User(name=user_name, email=user_email))
                logger.info("Created user: %s (%s)", user.name, user.id)

        logger.info("Done: %d courses created, %d skipped", created, len(courses_data) - created)
    finally:
        await pool.close()


def main():
    if len(sys.argv) not in (2, 4):
        print("Usage: python data/seed_courses.py <courses.json> [<name> <email>]")
        print('Example: python data/seed_courses.py data/sample_courses.json "Taro Yamada" "taro@example.com"')
        sys.exit(1)

    configure_logging(get_config().LOG_LEVEL)
    user_name, user_email = (sys.argv[2], sys.argv[3]) if len(sys.argv) == 4 else (None, None)
    asyncio.run(seed(sys.argv[1], user_name, user_email))


if __name__ == "__main__":
    main()
