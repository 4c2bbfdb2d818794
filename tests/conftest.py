#
# Pytest Fixtures
#

# Standard library -----------------------------------------------------------------------------------------------------
import io

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from deepspew.options import reset_options


# Fixtures -------------------------------------------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def default_options():
    """Every test starts and ends with the shared default configuration."""
    reset_options()
    yield
    reset_options()


@pytest.fixture
def sink() -> io.StringIO:
    """Text sink collecting rendered output."""
    return io.StringIO()
