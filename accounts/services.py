import logging
from django.db import IntegrityError, transaction
from django.utils import timezone
from .models import SiteBootstrap, User

logger = logging.getLogger(__name__)


class AdminAlreadyExists(Exception):
    pass


def bootstrap_initial_admin(email, password, display_name=""):
    """Create the first admin account and mark bootstrap complete.

    Both happen in one transaction; the singleton primary key makes a second
    concurrent bootstrap fail with AdminAlreadyExists.
    """
    if SiteBootstrap.is_complete():
        raise AdminAlreadyExists("An admin account already exists")
    try:
        with transaction.atomic():
            admin = User.objects.create_user(
                email=email,
                password=password,
                role=User.ROLE_ADMIN,
                display_name=display_name,
                is_staff=True,
            )
            SiteBootstrap.objects.create(
                pk=SiteBootstrap.SINGLETON_ID,
                completed_at=timezone.now(),
                initial_admin=admin,
            )
    except IntegrityError as e:
        # either the marker row or the email already exists
        raise AdminAlreadyExists(str(e)) from e
    logger.info("Initial admin %s created; bootstrap complete", admin.pk)
    return admin
