"""
Database seeding for LegalFlow.
Creates the fixed sections, the default kanban stages and the demo admin
account if the database is empty.
"""

import logging
from auth import safe_generate_password_hash
from database.connection import get_db_session
from database.models import Section, Stage, User

logger = logging.getLogger(__name__)

REQUIRED_SECTIONS = [
    {'id': 'legal', 'name': 'Legal Fights', 'slug': 'legal', 'icon': 'scale', 'color': '#dc2626'},
    {'id': 'deals', 'name': 'Business Deals', 'slug': 'deals', 'icon': 'handshake', 'color': '#059669'},
    {'id': 'real-estate', 'name': 'Real Estate', 'slug': 'real-estate', 'icon': 'building', 'color': '#2563eb'},
    {'id': 'others', 'name': 'Others', 'slug': 'others', 'icon': 'folder', 'color': '#7c3aed'},
]

DEFAULT_STAGES = ['Planning', 'Work in Progress', 'Pending Review', 'Completed']

DEFAULT_NOTIFICATION_PREFS = {
    'email': True,
    'in_app': True,
    'mentions': True,
    'assignments': True
}


def ensure_sections_exist(session):
    """Insert any of the four required sections that are missing."""
    existing_ids = {row[0] for row in session.query(Section.id).all()}
    missing = [s for s in REQUIRED_SECTIONS if s['id'] not in existing_ids]

    if not missing:
        return []

    for section in missing:
        session.add(Section(**section))
    session.flush()
    logger.info(f"Created missing sections: {[s['id'] for s in missing]}")
    return missing


def seed_default_stages(session):
    """Create the global kanban stages if no stage exists yet."""
    if session.query(Stage).first():
        return

    for order, name in enumerate(DEFAULT_STAGES):
        session.add(Stage(name=name, order=order, is_global=True))
    session.flush()
    logger.info(f"Created default stages: {DEFAULT_STAGES}")


def seed_default_admin(session, config):
    """Create the demo admin user if no admin exists."""
    admin = session.query(User).filter_by(role='admin').first()
    if admin:
        logger.info(f"Admin user already exists: {admin.email}")
        return admin

    admin = User(
        id=config['DEMO_ADMIN_ID'],
        name=config['DEMO_ADMIN_NAME'],
        email=config['DEMO_ADMIN_EMAIL'],
        password_hash=safe_generate_password_hash(config['DEMO_ADMIN_PASSWORD']),
        role='admin',
        active=True,
        notification_prefs=dict(DEFAULT_NOTIFICATION_PREFS),
        force_password_change=False,
        timezone=config.get('DEFAULT_TIMEZONE', 'America/New_York')
    )
    session.add(admin)
    session.flush()
    logger.info(f"Created default admin user: {admin.email}")
    return admin


def seed_database(config):
    """
    Seed the database with default data if empty.
    Call this at application startup.
    """
    try:
        with get_db_session() as session:
            ensure_sections_exist(session)
            seed_default_stages(session)
            seed_default_admin(session, config)
        logger.info("Database seeding completed successfully")
        return True
    except Exception as e:
        logger.error(f"Database seeding failed: {e}")
        raise


if __name__ == '__main__':
    from config import get_config
    from database.connection import init_engine, init_db

    logging.basicConfig(level=logging.INFO)
    cfg = get_config()
    init_engine(cfg.DATABASE_URL)
    init_db()
    seed_database({k: getattr(cfg, k) for k in dir(cfg) if k.isupper()})
