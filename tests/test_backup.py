"""Album YAML backup tests."""

from shelf.config import settings
from shelf.models.album import Album, AlbumType
from shelf.services.backup_service import load_yaml, save_album_as_yaml

API = "/api/v1/albums"


def test_create_writes_yaml(client, member, recorder, unique):
    title = unique("Backed Up")
    data = client.post(API, json={"title": title, "favorite": True}, headers=member).json()

    path = settings.albums_dir / "default" / f"{data['uid']}.yml"
    assert path.is_file()
    saved = load_yaml(path)
    assert saved["UID"] == data["uid"]
    assert saved["Title"] == title
    assert saved["Type"] == "default"
    assert saved["Favorite"] is True
    assert saved["Photos"] == []
    assert "DeletedAt" not in saved


def test_yaml_tracks_membership_and_delete(client, member, recorder, make_album, make_photo, unique):
    photo = make_photo("backup/member.jpg")
    album = make_album(unique())
    path = album.yaml_file_name(settings.albums_dir)

    client.post(f"{API}/{album.uid}/photos", json={"photos": [photo.uid]}, headers=member)
    assert [p["UID"] for p in load_yaml(path)["Photos"]] == [photo.uid]

    client.delete(f"{API}/{album.uid}", headers=member)
    assert load_yaml(path)["DeletedAt"]


def test_yaml_for_auto_album(client, member, recorder, make_album, unique):
    album = make_album(unique(), album_type=AlbumType.AUTO)
    client.post(f"{API}/{album.uid}/like", headers=member)
    assert (settings.albums_dir / "auto" / f"{album.uid}.yml").is_file()


def test_backups_disabled(client, member, recorder, unique, monkeypatch):
    monkeypatch.setattr(settings, "disable_backups", True)
    data = client.post(API, json={"title": unique()}, headers=member).json()
    assert not (settings.albums_dir / "default" / f"{data['uid']}.yml").exists()


def test_backup_failure_does_not_fail_request(client, member, recorder, unique, monkeypatch, tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file where a directory should be")
    monkeypatch.setattr(settings, "albums_dir", blocker)

    r = client.post(API, json={"title": unique()}, headers=member)
    assert r.status_code == 200
    assert recorder.kinds(r.json()["uid"]) == ["created"]


def test_save_album_as_yaml_returns_path(session, unique):
    album = Album.new(unique("Direct"), AlbumType.DEFAULT)
    session.add(album)
    session.commit()
    session.refresh(album)

    path = save_album_as_yaml(album, session)
    assert path == settings.albums_dir / "default" / f"{album.uid}.yml"
    assert load_yaml(path)["Slug"] == album.slug
