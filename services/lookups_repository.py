"""
Lookup Repositories - Sections, tags and kanban stages.
"""

import logging
from typing import List, Dict, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database.models import Section, Item, Tag, Stage
from database.seed import ensure_sections_exist, DEFAULT_STAGES
from validators import sanitize_string

logger = logging.getLogger(__name__)

DEFAULT_TAG_COLOR = '#6b7280'
FALLBACK_STAGE = DEFAULT_STAGES[0]


class SectionRepository:
    """Repository for the four fixed sections."""

    def __init__(self, session: Session):
        self.session = session

    def list_sections(self) -> List[Dict]:
        """Ensure the sections exist, then list them ordered by id."""
        ensure_sections_exist(self.session)
        sections = self.session.query(Section).order_by(Section.id).all()
        return [s.to_dict() for s in sections]

    def section_for_item(self, item_id: str) -> Optional[str]:
        """Section id of an item, or None when the item does not exist."""
        row = self.session.query(Item.section_id).filter(Item.id == item_id).first()
        return row[0] if row else None


class TagRepository:
    """Repository for tag database operations."""

    def __init__(self, session: Session):
        self.session = session

    def list_tags(self) -> List[Dict]:
        tags = self.session.query(Tag).order_by(Tag.name).all()
        return [t.to_dict() for t in tags]

    def create_tag(self, data: Dict) -> Dict:
        tag = Tag(
            name=sanitize_string(data['name'], max_length=100),
            color=data.get('color') or DEFAULT_TAG_COLOR
        )
        self.session.add(tag)
        self.session.flush()
        logger.info(f"Created tag: {tag.name}")
        return tag.to_dict()


class StageRepository:
    """Repository for kanban stages."""

    def __init__(self, session: Session):
        self.session = session

    def list_stages(self, section_id: str = None) -> List[Dict]:
        """
        List stages ordered by their position.

        With a section, only global stages and that section's own stages
        are returned.
        """
        query = self.session.query(Stage)
        if section_id:
            query = query.filter(or_(
                Stage.is_global.is_(True),
                Stage.section_id == section_id
            ))
        stages = query.order_by(Stage.order, Stage.name).all()
        return [s.to_dict() for s in stages]

    def default_stage_name(self) -> str:
        """Name of the first stage, or the fallback when none exist."""
        first = self.session.query(Stage).order_by(Stage.order, Stage.name).first()
        return first.name if first else FALLBACK_STAGE
