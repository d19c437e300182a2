import argparse
import asyncio
import logging
import sys

from portal.core.app import PortalApp
from portal.core.errors import PortalError
from portal.plugins.auth.schemas import SsoProfile
from portal.plugins.events.fixtures import seed_events
from portal.plugins.rewards.fixtures import seed_catalog

DEMO_PROFILE = SsoProfile(
    student_id="STU2024001",
    email="john.doe@aivancity.edu",
    first_name="John",
    last_name="Doe",
)


def setup_basic_logging():
    """Setup basic stdout logging before config is loaded"""
    root_logger = logging.getLogger()
    if not root_logger.handlers:  # Only add handler if none exists
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
        ))
        root_logger.addHandler(handler)
        root_logger.setLevel(logging.DEBUG)
        logging.debug("Basic logging initialized")


async def run_demo(app: PortalApp) -> None:
    """Sign in the demo student and walk through every service once."""
    log = logging.getLogger("demo")

    signed_in = await app.auth.sign_in(DEMO_PROFILE)
    user = signed_in.user
    identity = await app.tokens.verify_access(signed_in.tokens.access_token)
    log.info(f"Signed in {identity.student_id} as user {user.id}")

    profile = await app.intranet.get_student_profile(user.student_id)
    log.info(f"Profile: {profile.full_name}, {profile.program}, GPA {profile.gpa}")

    week = await app.schedule.get_weekly_schedule(user.student_id)
    for day, entries in week.items():
        log.info(f"Day {day}: " + ", ".join(f"{e.start_time} {e.course_code}" for e in entries))
    today = await app.schedule.get_today_schedule(user.student_id)
    log.info(f"Classes today: {len(today)}")

    attendance = await app.intranet.get_student_attendance(user.student_id)
    log.info(f"Attendance records: {len(attendance)}")

    courses = await app.lms.get_user_courses(user.student_id)
    log.info(f"Enrolled in {len(courses)} courses")
    if courses:
        grades = await app.lms.get_user_grades(courses[0].id, user.student_id)
        log.info(f"{courses[0].course_code} overall: {grades.overall_percentage}%")
        assignments = await app.lms.get_course_assignments(courses[0].id)
        log.info(f"{courses[0].course_code} assignments: {[a.name for a in assignments]}")

    created = await app.chat.create_session(user.id, "campus")
    log.info(f"Bot: {created.welcome_message.content}")
    reply = await app.chat.chat(created.session.id, "Where is the library?")
    log.info(f"Bot: {reply.content}")

    with app.db.session_scope() as session:
        seed_catalog(session)
    activities = await app.rewards.list_activities()
    if activities:
        try:
            await app.rewards.register_for_activity(user.id, activities[0].id)
        except PortalError as e:
            log.info(f"Registration skipped: {e.message}")
    points = await app.rewards.get_user_points(user.id)
    log.info(f"AI points: {points.total_points}, registrations: {len(points.registrations)}")

    with app.db.session_scope() as session:
        seed_events(session)
    events = await app.events.get_all_events()
    if events:
        try:
            await app.events.register_for_event(events[0].id, user.id)
        except PortalError as e:
            log.info(f"Event registration skipped: {e.message}")
    registrations = await app.events.get_user_registrations(user.id)
    log.info(f"Registered events: {[r.event.name for r in registrations]}")

    job = await app.tools.submit_print_job(user.id, "notes.pdf", "Library - Floor 1", copies=2, pages=5, duplex=True)
    log.info(f"Print job {job.job_id} costs {job.cost:.2f}")

    pair = await app.tokens.refresh(signed_in.tokens.refresh_token)
    log.info(f"Refreshed tokens, access valid for {pair.expires_in}s")
    await app.auth.sign_out(user.id)


def main(argv=None) -> int:
    setup_basic_logging()

    parser = argparse.ArgumentParser(description='Student Portal')
    parser.add_argument('--config',
                        help='Path to config file (default: ./config.yaml)')
    args = parser.parse_args(argv)

    app = PortalApp(config_path=args.config)
    try:
        asyncio.run(run_demo(app))
    except PortalError as e:
        logging.error(f"Demo failed ({e.kind}): {e.message}")
        return 1
    finally:
        app.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
