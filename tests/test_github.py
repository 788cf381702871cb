"""Unit tests for GitHub URL rewriting."""

import pytest

from cqd.config import load_settings
from cqd.utils.github import to_raw_url

HOSTS = {"github.com", "raw.githubusercontent.com"}


def test_blob_url_rewritten():
    """Host is swapped and the blob segment dropped."""
    url = "https://github.com/GoogleCloudPlatform/golang-samples/blob/main/run/helloworld/main.go"
    assert to_raw_url(url, HOSTS) == (
        "https://raw.githubusercontent.com/GoogleCloudPlatform/golang-samples/main/run/helloworld/main.go"
    )


def test_line_anchor_and_query_dropped():
    """Fragments and query strings on browse URLs are not forwarded."""
    url = "https://github.com/o/r/blob/main/a.py?plain=1#L10-L20"
    assert to_raw_url(url, HOSTS) == "https://raw.githubusercontent.com/o/r/main/a.py"


def test_only_first_blob_segment_dropped():
    """A directory literally named blob later in the path is kept."""
    url = "https://github.com/o/r/blob/main/blob/a.py"
    assert to_raw_url(url, HOSTS) == "https://raw.githubusercontent.com/o/r/main/blob/a.py"


def test_raw_url_passes_through():
    """URLs already on the raw host are unchanged."""
    url = "https://raw.githubusercontent.com/o/r/main/a.py"
    assert to_raw_url(url, HOSTS) == url


@pytest.mark.parametrize(
    "url",
    ["file:///etc/passwd", "https://example.com/o/r/blob/main/a.py", "not a url"],
)
def test_rejected_urls(url):
    """Non-http URLs and hosts outside the allow-list raise ValueError."""
    with pytest.raises(ValueError):
        to_raw_url(url, HOSTS)


def test_www_host_rewritten_with_default_allow_list():
    """www.github.com links are accepted by default and rewritten like github.com."""
    hosts = load_settings(_env_file=None).allowed_code_hosts
    url = "https://www.github.com/o/r/blob/main/a.py"
    assert to_raw_url(url, hosts) == "https://raw.githubusercontent.com/o/r/main/a.py"
