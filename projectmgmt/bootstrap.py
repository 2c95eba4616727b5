# projectmgmt/bootstrap.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from projectmgmt.config import Settings, settings as default_settings
from projectmgmt.models.users import RoleType, User
from projectmgmt.utils.hashing import get_password_hash

logger = logging.getLogger(__name__)

# Create the default manager account when no users exist yet
def seed_default_manager(db: Session, settings: Optional[Settings] = None) -> Optional[User]:
    settings = settings or default_settings
    if db.query(User).count() > 0:
        return None

    admin = User(
        username=settings.BOOTSTRAP_ADMIN_USERNAME,
        email=settings.BOOTSTRAP_ADMIN_EMAIL,
        password_hash=get_password_hash(settings.BOOTSTRAP_ADMIN_PASSWORD),
        first_name="Admin",
        last_name="User",
        role=RoleType.MANAGER,
        enabled=True,
    )
    admin.stamp_created()
    db.add(admin)
    db.commit()
    db.refresh(admin)

    logger.info("Created default manager account with username: %s", admin.username)
    return admin
