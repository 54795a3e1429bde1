"""
Unit tests for HTTP status codes.
"""

from httpclient.http import HTTPStatus, ResponseDecoder
from httpclient.http.status_codes import standard_phrase


class TestHTTPStatus:
    """Tests for HTTPStatus."""

    def test_phrase(self):
        """Test reason phrases."""
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.NOT_ACCEPTABLE.phrase == "Not Acceptable"

    def test_int_comparison(self):
        """Test members compare as ints."""
        assert HTTPStatus.NOT_FOUND == 404

    def test_standard_phrase(self):
        """Test phrase lookup by number."""
        assert standard_phrase(404) == "Not Found"
        assert standard_phrase(599) == ""

    def test_unlisted_code_in_response(self):
        """Test responses classify codes the enum does not list."""
        response = ResponseDecoder().decode(b"", "HTTP/1.1 599 Network Timeout\r\n")
        assert response.status is None
        assert response.has_errors()
        assert response.reason == "Network Timeout"
