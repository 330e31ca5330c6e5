"""Album cover lookup and cache tests."""

from shelf import acl, i18n
from shelf.config import settings
from shelf.services.cover_cache import CoverCache, cover_cache

API = "/api/v1/albums"


def test_cover_served_and_cached(client, member, recorder, make_album, make_photo, unique):
    first = make_photo("cover/first.jpg", content=b"first")
    second = make_photo("cover/second.jpg", content=b"second")
    album = make_album(unique(), photos=[first.uid, second.uid])

    r = client.get(f"{API}/{album.uid}/cover", headers=member)
    assert r.status_code == 200
    assert r.content == b"first"
    assert cover_cache.get(album.uid) == settings.originals_dir / "cover" / "first.jpg"

    client.request("DELETE", f"{API}/{album.uid}/photos", json={"photos": [first.uid]}, headers=member)
    assert cover_cache.get(album.uid) is None

    r = client.get(f"{API}/{album.uid}/cover", headers=member)
    assert r.content == b"second"


def test_cover_skips_sidecars(client, member, make_album, make_photo, unique):
    sidecar = make_photo("cover/meta.xmp", sidecar=True)
    image = make_photo("cover/image.jpg", content=b"image")
    album = make_album(unique(), photos=[sidecar.uid, image.uid])

    assert client.get(f"{API}/{album.uid}/cover", headers=member).content == b"image"


def test_cover_of_empty_album(client, member, make_album, unique):
    album = make_album(unique())
    r = client.get(f"{API}/{album.uid}/cover", headers=member)
    assert r.status_code == 404
    assert r.json()["error"] == "Entity not found"


def test_cover_cache_evicts_oldest(tmp_path):
    cache = CoverCache(max_size=2)
    cache.put("as_1", tmp_path / "1.jpg")
    cache.put("as_2", tmp_path / "2.jpg")
    cache.get("as_1")
    cache.put("as_3", tmp_path / "3.jpg")

    assert cache.get("as_2") is None
    assert cache.get("as_1") == tmp_path / "1.jpg"
    assert cache.size == 2

    cache.invalidate("as_1")
    cache.invalidate("as_unknown")
    assert cache.size == 1


def test_acl_rules():
    assert acl.allow("admin", acl.Resource.ALBUMS, acl.Action.DELETE)
    assert acl.allow("member", acl.Resource.ALBUMS, acl.Action.LIKE)
    assert not acl.allow("guest", acl.Resource.ALBUMS, acl.Action.UPDATE)
    assert not acl.allow("nobody", acl.Resource.ALBUMS, acl.Action.READ)


def test_messages(monkeypatch):
    assert i18n.msg("msg_entries_added_to", 3, "'Rome'") == "3 entries added to 'Rome'"
    assert i18n.msg("no_such_key") == "no_such_key"

    monkeypatch.setattr(settings, "default_locale", "de")
    assert i18n.msg("err_album_not_found") == "Album nicht gefunden"

    monkeypatch.setattr(settings, "default_locale", "xx")
    assert i18n.msg("err_album_not_found") == "Album not found"
