import pytest

from clonetime.errors import InvalidRequest, InvalidURL
from clonetime.ingestion.canonicalize import (
    ensure_scheme,
    generate_fingerprint,
    normalize_url,
    validate_url,
)


class TestNormalizeUrl:
    def test_adds_https_when_scheme_missing(self):
        assert normalize_url("example.com") == "https://example.com"

    def test_case_slash_and_scheme_variants_collapse(self):
        assert normalize_url("HTTP://Example.com/Path/") == normalize_url("example.com/path")

    def test_query_fragment_and_port_dropped(self):
        assert normalize_url("https://Example.com:8443/Pricing?utm_source=x#plans") == "https://example.com/pricing"

    @pytest.mark.parametrize(
        "url",
        ["example.com", "https://www.Example.com/a/b/", "http://example.com//", "notion.so/product?x=1"],
    )
    def test_idempotent(self, url):
        once = normalize_url(url)
        assert normalize_url(once) == once

    def test_keeps_path_segments(self):
        assert normalize_url("https://example.com/docs/getting-started") == "https://example.com/docs/getting-started"

    @pytest.mark.parametrize("url", ["", "   ", "https://", "foo bar.com", "http://[::1", "https://example.com:notaport/"])
    def test_invalid_urls_raise(self, url):
        with pytest.raises(InvalidURL):
            normalize_url(url)
        assert validate_url(url) is False

    def test_invalid_url_is_a_client_error(self):
        assert issubclass(InvalidURL, InvalidRequest)

    def test_validate_accepts_bare_host(self):
        assert validate_url("example.com") is True

    @pytest.mark.parametrize("url", ["münchen.de", "https://bücher.de/shop", "http://пример.рф/"])
    def test_accepts_internationalized_hosts(self, url):
        assert validate_url(url) is True

    def test_internationalized_host_is_punycoded(self):
        assert normalize_url("münchen.de") == "https://xn--mnchen-3ya.de"
        assert normalize_url("HTTPS://München.de/Shop/") == "https://xn--mnchen-3ya.de/shop"
        assert normalize_url("https://bücher.de/shop") == normalize_url("xn--bcher-kva.de/shop")

    @pytest.mark.parametrize("url", ["münchen.de", "https://bücher.de/shop"])
    def test_internationalized_idempotent(self, url):
        once = normalize_url(url)
        assert normalize_url(once) == once

    @pytest.mark.parametrize("url", ["a" * 64 + ".com", "example..com"])
    def test_bad_host_labels_raise(self, url):
        with pytest.raises(InvalidURL):
            normalize_url(url)
        assert validate_url(url) is False

    def test_ensure_scheme_keeps_existing(self):
        assert ensure_scheme("http://example.com/Path") == "http://example.com/Path"
        assert ensure_scheme(" example.com ") == "https://example.com"


class TestFingerprint:
    def test_deterministic(self):
        canonical = normalize_url("example.com")
        assert generate_fingerprint(canonical, "mvp") == generate_fingerprint(canonical, "mvp")

    def test_is_sha256_hex(self):
        fp = generate_fingerprint("https://example.com", "mvp")
        assert len(fp) == 64
        int(fp, 16)

    def test_known_value(self):
        import hashlib

        expected = hashlib.sha256(b"https://example.com:speedrun").hexdigest()
        assert generate_fingerprint("https://example.com", "speedrun") == expected

    def test_changes_with_tier_or_url(self):
        base = generate_fingerprint("https://example.com", "mvp")
        assert generate_fingerprint("https://example.com", "prod-lite") != base
        assert generate_fingerprint("https://example.org", "mvp") != base

    def test_no_collisions_across_corpus(self):
        urls = [f"https://site{i}.com/page{j}" for i in range(20) for j in range(5)]
        fps = {generate_fingerprint(u, t) for u in urls for t in ("speedrun", "mvp", "prod-lite")}
        assert len(fps) == len(urls) * 3
