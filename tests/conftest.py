from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from django.test import Client
from django.utils import timezone

from accounts.models import SiteBootstrap, User
from fees.models import FeeDefinition

MODEL_BACKEND = "django.contrib.auth.backends.ModelBackend"


@pytest.fixture(autouse=True)
def payment_settings(settings):
    settings.PAYSTACK_PUBLIC_KEY = "pk_test_public"
    settings.PAYSTACK_SECRET_KEY = "sk_test_secret"
    settings.PAYSTACK_BASE_URL = "https://api.paystack.test"
    settings.PAYSTACK_TIMEOUT_SECONDS = 15.0
    settings.PAYMENT_CURRENCY = "NGN"
    settings.PAYMENT_REFERENCE_PREFIX = "FEE"
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
    settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
    settings.AXES_ENABLED = False
    settings.ADMINS = []
    return settings


@pytest.fixture(autouse=True)
def queued():
    """Stand-in for the job queue; records what would have been enqueued."""
    mock_enqueue = MagicMock(return_value=True)
    with patch("payments.settlement.enqueue", mock_enqueue), \
            patch("payments.services.enqueue", mock_enqueue), \
            patch("payments.webhooks.enqueue", mock_enqueue):
        yield mock_enqueue


@pytest.fixture
def bootstrapped(db):
    return SiteBootstrap.objects.create(pk=SiteBootstrap.SINGLETON_ID, completed_at=timezone.now())


@pytest.fixture
def student(db):
    return User.objects.create_user(
        email="ada.obi@example.com",
        password="not-used-123",
        first_name="Ada",
        last_name="Obi",
        role=User.ROLE_STUDENT,
    )


@pytest.fixture
def other_student(db):
    return User.objects.create_user(
        email="tunde.bello@example.com",
        password="not-used-123",
        first_name="Tunde",
        last_name="Bello",
        role=User.ROLE_STUDENT,
    )


@pytest.fixture
def school_admin(db):
    return User.objects.create_user(
        email="bursar@example.com",
        password="not-used-123",
        role=User.ROLE_ADMIN,
        is_staff=True,
    )


@pytest.fixture
def fee(db):
    return FeeDefinition.objects.create(
        name="Term 1 Tuition",
        amount=Decimal("50000"),
        category="tuition",
        due_date=date(2026, 1, 15),
    )


@pytest.fixture
def student_client(bootstrapped, student):
    c = Client()
    c.force_login(student, backend=MODEL_BACKEND)
    return c


@pytest.fixture
def admin_web(bootstrapped, school_admin):
    c = Client()
    c.force_login(school_admin, backend=MODEL_BACKEND)
    return c


@pytest.fixture
def paystack_get():
    with patch("payments.verification.paystack_get") as mock_get:
        yield mock_get


@pytest.fixture
def mock_response():
    def make(json_body, status_code=200):
        r = MagicMock()
        r.status_code = status_code
        r.json.return_value = json_body
        r.raise_for_status.return_value = None
        return r
    return make
