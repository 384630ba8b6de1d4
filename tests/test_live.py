import asyncio
import threading
import unittest

from starlette.websockets import WebSocketDisconnect

from app.core.events import ChangeFeed, REQUESTS, PITCHES
from support import ApiTestCase, make_token


class LiveFeedTests(ApiTestCase):
    def test_request_feed_pushes_new_requests(self):
        a = self.onboard("user-a")
        b = self.onboard("user-b")
        existing = self.post_request(a, title="Existing")

        with self.client.websocket_connect(f"/api/v1/ws/requests?token={b}") as ws:
            first = ws.receive_json()
            self.assertEqual(first["type"], "snapshot")
            self.assertEqual([r["id"] for r in first["items"]], [existing["id"]])

            created = self.post_request(a, title="Fresh")
            second = ws.receive_json()
            self.assertEqual(
                [r["id"] for r in second["items"]],
                [created["id"], existing["id"]],
            )
            self.assertEqual(second["items"][0]["creator_name"], "User-A")

    def test_request_feed_refilters_on_client_message(self):
        a = self.onboard("user-a")
        self.post_request(a, title="Walk my dog", category="Pet Care")
        self.post_request(a, title="Fix tap", category="Repairs")

        with self.client.websocket_connect(f"/api/v1/ws/requests?token={a}") as ws:
            self.assertEqual(len(ws.receive_json()["items"]), 2)

            ws.send_json({"q": "tap"})
            self.assertEqual([r["title"] for r in ws.receive_json()["items"]], ["Fix tap"])

            ws.send_json({"q": "", "category": "Pet Care"})
            self.assertEqual([r["title"] for r in ws.receive_json()["items"]], ["Walk my dog"])

    def test_request_feed_is_city_scoped(self):
        a = self.onboard("user-a", city="bilaspur_cg")
        k = self.onboard("user-k", city="koni_bilaspur")
        self.post_request(a, title="Bilaspur only")

        with self.client.websocket_connect(f"/api/v1/ws/requests?token={k}") as ws:
            self.assertEqual(ws.receive_json()["items"], [])

    def test_feed_rejects_bad_token(self):
        with self.assertRaises(WebSocketDisconnect):
            with self.client.websocket_connect("/api/v1/ws/requests?token=garbage") as ws:
                ws.receive_json()

    def test_pitch_feed_is_owner_only(self):
        a = self.onboard("user-a")
        b = self.onboard("user-b")
        request = self.post_request(a)

        with self.assertRaises(WebSocketDisconnect):
            with self.client.websocket_connect(
                f"/api/v1/ws/requests/{request['id']}/pitches?token={b}"
            ) as ws:
                ws.receive_json()

    def test_pitch_feed_pushes_new_pitches(self):
        a = self.onboard("user-a")
        b = self.onboard("user-b", name="Bharat")
        request = self.post_request(a)

        with self.client.websocket_connect(
            f"/api/v1/ws/requests/{request['id']}/pitches?token={a}"
        ) as ws:
            self.assertEqual(ws.receive_json()["items"], [])
            self.assertEqual(self.pitch(b, request["id"]).status_code, 201)
            items = ws.receive_json()["items"]
            self.assertEqual(len(items), 1)
            self.assertEqual(items[0]["helper_name"], "Bharat")

    def test_my_requests_feed_follows_deletes(self):
        a = self.onboard("user-a")
        request = self.post_request(a)

        with self.client.websocket_connect(f"/api/v1/ws/me/requests?token={a}") as ws:
            self.assertEqual(len(ws.receive_json()["items"]), 1)
            self.client.delete(f"/api/v1/requests/{request['id']}", headers=self.auth(a))
            self.assertEqual(ws.receive_json()["items"], [])

    def test_my_pitches_feed_initial_snapshot(self):
        token = make_token("user-new")
        with self.client.websocket_connect(f"/api/v1/ws/me/pitches?token={token}") as ws:
            self.assertEqual(ws.receive_json(), {"type": "snapshot", "items": []})


class ChangeFeedTests(unittest.TestCase):
    def test_publish_from_worker_thread_reaches_subscriber(self):
        feed = ChangeFeed()

        async def scenario():
            queue = feed.subscribe(REQUESTS)
            other = feed.subscribe(PITCHES)
            worker = threading.Thread(target=feed.publish, args=(REQUESTS,))
            worker.start()
            received = await asyncio.wait_for(queue.get(), timeout=2)
            worker.join()
            await asyncio.sleep(0)
            self.assertTrue(other.empty())
            feed.unsubscribe(queue)
            feed.unsubscribe(other)
            return received

        self.assertEqual(asyncio.run(scenario()), REQUESTS)
        self.assertEqual(feed.subscriber_count(), 0)


if __name__ == "__main__":
    unittest.main()
