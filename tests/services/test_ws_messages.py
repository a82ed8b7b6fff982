"""Tests for WebSocket message factories."""

from __future__ import annotations

from feedcast.services import ws_messages


def test_new_post_wraps_payload_unchanged():
    post = {"id": "abc", "message": "hi", "extra": [1, 2]}
    assert ws_messages.new_post(post=post) == {"type": "new_post", "post": post}


def test_new_post_accepts_any_json_value():
    assert ws_messages.new_post(post="plain") == {"type": "new_post", "post": "plain"}


def test_broadcast_result_shape():
    assert ws_messages.broadcast_result(delivered=3) == {"success": True, "broadcastCount": 3}
