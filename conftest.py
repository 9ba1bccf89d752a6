import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def clear_cache():
    # Throttle counters and geocoding results live in the cache.
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def _django_native_simple_testcase_db_guard(request, django_db_blocker):
    # pytest-django's blocker rejects ensure_connection() even on an already
    # open connection, which channels' sync consumers hit through
    # close_old_connections() inside SimpleTestCase tests. Django's own
    # SimpleTestCase guard (connect/cursor failures) still applies.
    from django.test import SimpleTestCase, TransactionTestCase
    cls = getattr(request, 'cls', None)
    if cls and issubclass(cls, SimpleTestCase) and not issubclass(cls, TransactionTestCase):
        with django_db_blocker.unblock():
            yield
    else:
        yield
