"""Event hub, notifier and websocket channel tests."""

import pytest
from starlette.websockets import WebSocketDisconnect

from shelf.services.events import ActorContext, EntityEvent, EventHub, HubNotifier
from shelf.utils.security import create_access_token

API = "/api/v1/albums"


def test_hub_fans_out_to_subscribers():
    hub = EventHub()
    seen_a, seen_b = [], []
    hub.subscribe(lambda topic, data: seen_a.append(topic))
    hub.subscribe(lambda topic, data: seen_b.append(data))

    hub.publish("albums.updated", {"uid": "as_1"})
    assert seen_a == ["albums.updated"]
    assert seen_b == [{"uid": "as_1"}]


def test_failing_subscriber_does_not_block_others():
    hub = EventHub()
    seen = []

    def broken(topic, data):
        raise RuntimeError("subscriber gone")

    hub.subscribe(broken)
    hub.subscribe(lambda topic, data: seen.append(topic))
    hub.publish("albums.created", {})
    assert seen == ["albums.created"]


def test_unsubscribe():
    hub = EventHub()
    seen = []
    callback = lambda topic, data: seen.append(topic)  # noqa: E731
    hub.subscribe(callback)
    hub.unsubscribe(callback)
    hub.publish("albums.deleted", {})
    assert seen == []
    assert hub.subscriber_count == 0


def test_hub_notifier_topics():
    hub = EventHub()
    seen = []
    hub.subscribe(lambda topic, data: seen.append((topic, data)))
    notifier = HubNotifier(hub)
    actor = ActorContext(user_id="usr_1", role="admin")

    notifier.publish(EntityEvent.DELETED, "as_1", actor)
    notifier.success("Album created")
    notifier.client_config({"albums": 3, "favorites": 1})

    assert seen == [
        ("albums.deleted", {"entities": [{"uid": "as_1"}], "uid": "as_1", "actor": "usr_1"}),
        ("notify.success", {"message": "Album created"}),
        ("config.updated", {"count": {"albums": 3, "favorites": 1}}),
    ]


def test_hub_notifier_never_raises():
    class BrokenHub(EventHub):
        def publish(self, topic, data):
            raise ConnectionError("bus down")

    notifier = HubNotifier(BrokenHub())
    notifier.publish(EntityEvent.UPDATED, "as_1", None)
    notifier.success("ok")


def test_websocket_requires_token(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()


def test_websocket_receives_album_events(client, member, unique):
    token = create_access_token("usr_ws", "member")
    with client.websocket_connect(f"/ws?token={token}") as ws:
        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}

        title = unique("Live")
        uid = client.post(API, json={"title": title}, headers=member).json()["uid"]

        topics = []
        while True:
            message = ws.receive_json()
            topics.append(message["event"])
            if message["event"] == "albums.created":
                break

        assert message["data"]["uid"] == uid
        assert message["data"]["entities"][0]["title"] == title
        assert message["data"]["actor"] == "usr_member"
        assert topics == ["notify.success", "config.updated", "albums.created"]


def test_websocket_survives_non_object_messages(client):
    token = create_access_token("usr_ws", "member")
    with client.websocket_connect(f"/ws?token={token}") as ws:
        ws.send_json([1, 2])
        assert ws.receive_json() == {"type": "error", "message": "Expected an object"}
        ws.send_text("1")
        assert ws.receive_json() == {"type": "error", "message": "Expected an object"}
        ws.send_text("{not json")
        assert ws.receive_json() == {"type": "error", "message": "Invalid JSON"}

        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}
