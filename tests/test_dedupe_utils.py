import hashlib

from src.utils.dedupe import generate_article_id, sha256_hex


def test_guid_is_used_verbatim_after_trimming():
    assert generate_article_id("  tag:example.com,2025:1  ", "https://x") == (
        "tag:example.com,2025:1"
    )


def test_missing_guid_falls_back_to_link_digest():
    link = "https://example.com/story"
    expected = hashlib.sha256(link.encode("utf-8")).hexdigest()
    assert generate_article_id(None, link) == expected
    assert generate_article_id("   ", link) == expected


def test_missing_guid_and_link_hashes_empty_string():
    assert generate_article_id(None, None) == hashlib.sha256(b"").hexdigest()


def test_sha256_hex_deterministic():
    value = "https://example.com/a"
    assert sha256_hex(value) == sha256_hex(value)
    assert len(sha256_hex(value)) == 64
