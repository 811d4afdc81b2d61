"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Race for the last seats
  locust -f locustfile.py --tags duplicate    # Same roll number, many slots
  locust -f locustfile.py --tags throughput   # Listing cache
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests
"""

import random
import string
import uuid
from locust import HttpUser, task, between, tag, events

# Shared state
EVENT_IDS = []
RUSH_EVENT_ID = "LOAD-RUSH"
RUSH_SLOTS = ["s1", "s2", "s3"]
RUSH_CAPACITY = 10


def random_roll_number():
    return f"{random.randint(18, 25)}LD" + "".join(random.choices(string.digits, k=6))


def booking_payload(event_id, slot_id, roll_number=None, payment_ref=None, **participant):
    body = {
        "eventId": event_id,
        "slotId": slot_id,
        "participant": {
            "name": "Load Tester",
            "email": f"load_{random.randint(10000, 99999)}@test.com",
            "phone": "9" + "".join(random.choices(string.digits, k=9)),
            "rollNumber": roll_number or random_roll_number(),
        },
        "paymentRef": payment_ref or f"pay_{uuid.uuid4().hex}",
    }
    body["participant"].update(participant)
    return body


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Setup: seed an event whose slots have 10 seats each."""
    print("\n" + "="*60)
    print("SETUP: Seeding rush event...")
    print("="*60)
    if environment.host:
        import httpx

        resp = httpx.post(
            f"{environment.host}/api/v1/admin/events",
            json={
                "id": RUSH_EVENT_ID,
                "name": "Rush Workshop",
                "price": 100,
                "slots": [
                    {"slotId": s, "timeLabel": f"{9 + i}:00 AM", "maxCapacity": RUSH_CAPACITY}
                    for i, s in enumerate(RUSH_SLOTS)
                ],
            },
        )
        print(f"\nSeed {RUSH_EVENT_ID}: {resp.status_code}\n")


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - 100 users → 3 slots x 10 seats

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify:
      GET /api/v1/admin/events/LOAD-RUSH/occupancy
    Every slot should report currentBookings <= 10 and consistent = true
    """
    wait_time = between(0, 0.1)

    @tag("concurrency")
    @task
    def book_limited_seats(self):
        """All users fight for the same 30 seats."""
        with self.client.post("/api/v1/bookings/",
            json=booking_payload(RUSH_EVENT_ID, random.choice(RUSH_SLOTS)),
            name="/api/v1/bookings/ [rush]",
            catch_response=True
        ) as resp:
            if resp.status_code == 201:
                resp.success()
            elif resp.status_code == 409:
                resp.success()  # Expected: SlotFull
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class DuplicateUser(HttpUser):
    """
    TEST 2: One participant submitting for every slot at once.

    Run: locust -f locustfile.py --tags duplicate -u 30 -r 30 --run-time 20s

    Each user keeps one roll number; at most one of its requests may succeed.
    """
    wait_time = between(0, 0.05)

    def on_start(self):
        self.roll_number = random_roll_number()
        self.successes = 0

    @tag("duplicate")
    @task
    def book_any_slot(self):
        with self.client.post("/api/v1/bookings/",
            json=booking_payload(RUSH_EVENT_ID, random.choice(RUSH_SLOTS), self.roll_number),
            name="/api/v1/bookings/ [duplicate]",
            catch_response=True
        ) as resp:
            if resp.status_code == 201:
                self.successes += 1
                if self.successes > 1:
                    resp.failure(f"Roll number {self.roll_number} booked twice")
                else:
                    resp.success()
            elif resp.status_code == 409:
                resp.success()  # AlreadyRegistered or SlotFull
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 3: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false, run again

    Compare:
      - Avg response time
      - Requests/sec
      - P95/P99 latency
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_events_cached(self):
        """Hammer the cached endpoint."""
        kind = random.choice(["", "?kind=workshop", "?kind=game"])
        self.client.get(f"/api/v1/events/{kind}",
            name="/api/v1/events/ [cached]")

    @tag("throughput", "read")
    @task(3)
    def get_event_detail(self):
        """Read individual events (never cached)."""
        event_id = random.choice(EVENT_IDS or [RUSH_EVENT_ID])
        self.client.get(f"/api/v1/events/{event_id}",
            name="/api/v1/events/{id}")

    @tag("throughput")
    @task(1)
    def health_check(self):
        """Monitor system health."""
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 4: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash; every failure must be a typed 4xx body.
    """
    wait_time = between(0.5, 1.5)

    def _expect(self, resp, codes, kind=None):
        if resp.status_code not in codes:
            resp.failure(f"Expected {codes}, got {resp.status_code}")
        elif kind and resp.json().get("errorKind") != kind:
            resp.failure(f"Expected {kind}, got {resp.json().get('errorKind')}")
        else:
            resp.success()

    @tag("edge")
    @task
    def invalid_event_id(self):
        """Book non-existent event."""
        with self.client.post("/api/v1/bookings/",
            json=booking_payload("NO-SUCH-EVENT", "s1"),
            catch_response=True
        ) as resp:
            self._expect(resp, [404], "NotFound")

    @tag("edge")
    @task
    def numeric_roll_number(self):
        """Roll numbers need at least one letter."""
        with self.client.post("/api/v1/bookings/",
            json=booking_payload(RUSH_EVENT_ID, "s1", roll_number="12345"),
            catch_response=True
        ) as resp:
            self._expect(resp, [400], "InvalidArgument")

    @tag("edge")
    @task
    def bad_phone(self):
        with self.client.post("/api/v1/bookings/",
            json=booking_payload(RUSH_EVENT_ID, "s1", phone="12-34"),
            catch_response=True
        ) as resp:
            self._expect(resp, [400], "InvalidArgument")

    @tag("edge")
    @task
    def reused_payment(self):
        """The second booking with one payment reference must fail."""
        payment_ref = f"pay_{uuid.uuid4().hex}"
        self.client.post("/api/v1/bookings/",
            json=booking_payload(RUSH_EVENT_ID, random.choice(RUSH_SLOTS), payment_ref=payment_ref),
            name="/api/v1/bookings/ [payment first]")
        with self.client.post("/api/v1/bookings/",
            json=booking_payload(RUSH_EVENT_ID, random.choice(RUSH_SLOTS), payment_ref=payment_ref),
            name="/api/v1/bookings/ [payment reuse]",
            catch_response=True
        ) as resp:
            self._expect(resp, [409])

    @tag("edge")
    @task
    def malformed_json(self):
        """Send garbage data."""
        with self.client.post("/api/v1/bookings/",
            data="not json at all",
            headers={"Content-Type": "application/json"},
            catch_response=True
        ) as resp:
            self._expect(resp, [400], "InvalidArgument")


class RealisticUser(HttpUser):
    """
    TEST 5: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Simulates festival traffic:
      - Mostly browsing
      - Some bookings
      - Occasional verify-booking lookups
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.roll_number = random_roll_number()

    @task(50)
    def browse_events(self):
        """Most common: browsing."""
        resp = self.client.get("/api/v1/events/")
        if resp.status_code == 200:
            for event in resp.json().get("events", []):
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @task(20)
    def view_event(self):
        """View details."""
        if EVENT_IDS:
            self.client.get(f"/api/v1/events/{random.choice(EVENT_IDS)}",
                name="/api/v1/events/{id}")

    @task(10)
    def book_slot(self):
        """Occasional booking into any open slot."""
        if not EVENT_IDS:
            return
        event_id = random.choice(EVENT_IDS)
        resp = self.client.get(f"/api/v1/events/{event_id}", name="/api/v1/events/{id}")
        if resp.status_code != 200:
            return
        open_slots = [s["slotId"] for s in resp.json()["slots"]
                      if s["remainingSeats"] > 0 and not s["isClosed"]]
        if open_slots:
            self.client.post("/api/v1/bookings/",
                json=booking_payload(event_id, random.choice(open_slots), self.roll_number))

    @task(3)
    def verify_booking(self):
        if not EVENT_IDS:
            return
        with self.client.get(
            f"/api/v1/events/{random.choice(EVENT_IDS)}/bookings/{self.roll_number}",
            name="/api/v1/events/{id}/bookings/{roll}",
            catch_response=True
        ) as resp:
            if resp.status_code in [200, 404]:
                resp.success()  # 404: not booked in that event
            else:
                resp.failure(f"Unexpected: {resp.status_code}")
