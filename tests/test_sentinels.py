#
# Deepspew - Sentinels Tests
#

# Standard library -----------------------------------------------------------------------------------------------------
import copy
import pickle

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from deepspew.sentinels import DANGLING, INVALID, DanglingType, InvalidType


# Tests ----------------------------------------------------------------------------------------------------------------

class TestSentinels:
    def test_singleton_identity(self):
        """Ensure each sentinel is a singleton object."""
        assert INVALID is InvalidType()
        assert DANGLING is DanglingType()

    @pytest.mark.parametrize(
        ("sentinel", "expected"),
        [
            pytest.param(INVALID, "<INVALID>", id="invalid"),
            pytest.param(DANGLING, "<DANGLING>", id="dangling"),
        ],
    )
    def test_repr_clean(self, sentinel, expected):
        assert repr(sentinel) == expected

    def test_identity_equality(self):
        assert INVALID == INVALID
        assert INVALID != DANGLING
        assert INVALID != None  # noqa: E711

    @pytest.mark.parametrize("sentinel", [INVALID, DANGLING], ids=["invalid", "dangling"])
    def test_falsy(self, sentinel):
        assert not sentinel

    @pytest.mark.parametrize("sentinel", [INVALID, DANGLING], ids=["invalid", "dangling"])
    def test_hashable(self, sentinel):
        assert {sentinel: 1}[sentinel] == 1

    @pytest.mark.parametrize("sentinel", [INVALID, DANGLING], ids=["invalid", "dangling"])
    def test_pickle_and_copy_keep_identity(self, sentinel):
        assert pickle.loads(pickle.dumps(sentinel)) is sentinel
        assert copy.copy(sentinel) is sentinel
        assert copy.deepcopy(sentinel) is sentinel
