"""
Unit tests for the status registry.
"""

import pytest

from minihttp.errors import UnknownStatusError
from minihttp.http.status_codes import HTTPStatus, lookup, status_for, status_string


REGISTERED = [200, 400, 401, 404, 501]


class TestLookup:
    """Tests for lookup() and status_for()."""

    @pytest.mark.parametrize("code", REGISTERED)
    def test_lookup_returns_same_code(self, code: int):
        """Every registered code looks up to itself."""
        assert lookup(code).value == code

    @pytest.mark.parametrize("code", [100, 201, 403, 500, 504])
    def test_unregistered_codes(self, code: int):
        """Codes outside the closed set are not found."""
        assert lookup(code) is None

    def test_status_for_unknown_is_fatal(self):
        """status_for() treats an unknown code as a programming error."""
        with pytest.raises(UnknownStatusError):
            status_for(504)

    def test_status_for_known(self):
        assert status_for(404) is HTTPStatus.NOT_FOUND


class TestPhrases:
    """Tests for reason phrases and status strings."""

    def test_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.BAD_REQUEST.phrase == "Bad Request"
        assert HTTPStatus.UNAUTHORIZED.phrase == "Unauthorized"
        assert HTTPStatus.NOT_FOUND.phrase == "Not found"
        assert HTTPStatus.NOT_IMPLEMENTED.phrase == "Not Implemented"

    def test_status_string(self):
        assert HTTPStatus.NOT_FOUND.status_string == "404 Not found"
        assert HTTPStatus.NOT_IMPLEMENTED.status_string == "501 Not Implemented"
        assert status_string(504, "Unauthorized") == "504 Unauthorized"

    def test_int_compatible(self):
        assert HTTPStatus.OK == 200
