from geocontacts.services.image_normalizer import (
    normalize_contact,
    resolve_photo_url,
    resolve_twitter_handle,
)

BASE_URL = "https://developer.microsoft.com/en-us/advocates/"


def test_relative_image_gets_base_url(make_contact):
    contact = make_contact("jane@example.com", src="foo.png")

    normalize_contact(contact, base_url=BASE_URL)

    assert contact.photo_url == BASE_URL + "foo.png"


def test_absolute_image_kept_verbatim(make_contact):
    contact = make_contact("jane@example.com", src="https://x/y.png")

    normalize_contact(contact, base_url=BASE_URL)

    assert contact.photo_url == "https://x/y.png"


def test_http_scheme_match_is_case_insensitive():
    assert resolve_photo_url("HTTP://cdn/a.png", BASE_URL) == "HTTP://cdn/a.png"


def test_missing_image_source_leaves_photo_unset(make_contact):
    contact = make_contact("jane@example.com", src=None)

    normalize_contact(contact, base_url=BASE_URL)

    assert contact.photo_url is None


def test_twitter_handle_from_url_and_bare_name():
    assert resolve_twitter_handle("https://twitter.com/jane") == "@jane"
    assert resolve_twitter_handle("jane") == "@jane"


def test_empty_twitter_does_not_raise(make_contact):
    contact = make_contact("jane@example.com", twitter="")

    normalize_contact(contact, base_url=BASE_URL)

    assert contact.twitter_handle is None


def test_trailing_slash_yields_no_handle():
    assert resolve_twitter_handle("https://twitter.com/") is None


def test_normalize_is_idempotent(make_contact):
    contact = make_contact("jane@example.com", src="foo.png")

    normalize_contact(contact, base_url=BASE_URL)
    first = (contact.photo_url, contact.twitter_handle)
    normalize_contact(contact, base_url=BASE_URL)

    assert (contact.photo_url, contact.twitter_handle) == first
