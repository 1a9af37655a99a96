"""
Load scenarios for the hotel booking API.

Accounts are not created through the API; seed users and a hotel first and
pass them in:

  LOCUST_USER_IDS=1-200 LOCUST_HOTEL_ID=1 LOCUST_OWNER_ID=1 locust -f locustfile.py

Tokens are minted locally with the service's SECRET_KEY.

Run scenarios:
  locust -f locustfile.py --tags concurrency  # many guests, one night
  locust -f locustfile.py --tags throughput   # owner analytics, cached reads
  locust -f locustfile.py --tags edge         # rejected requests
  locust -f locustfile.py                     # everything
"""

import os
import random
from datetime import datetime, timezone, timedelta

from locust import HttpUser, task, between, tag

from hotel_booking.core.security import create_access_token

HOTEL_ID = int(os.environ.get("LOCUST_HOTEL_ID", "1"))
OWNER_ID = int(os.environ.get("LOCUST_OWNER_ID", "1"))


def _user_ids():
    low, _, high = os.environ.get("LOCUST_USER_IDS", "2-101").partition("-")
    return list(range(int(low), int(high or low) + 1))


USER_IDS = _user_ids()

# Every concurrency user fights for this one night
CONTESTED_CHECK_IN = (datetime.now(timezone.utc) + timedelta(days=60)).replace(
    hour=14, minute=0, second=0, microsecond=0
)


def bearer(user_id: int) -> dict:
    token = create_access_token(data={"sub": str(user_id)}, expires_delta=timedelta(hours=2))
    return {"Authorization": f"Bearer {token}"}


def stay(check_in: datetime, nights: int = 1) -> dict:
    return {
        "check_in": check_in.isoformat(),
        "check_out": (check_in + timedelta(days=nights)).isoformat(),
        "adult_count": 1,
        "child_count": 0,
        "booking_type": "nightly",
    }


class ConcurrencyUser(HttpUser):
    """
    Many guests race for the same night at one hotel.

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT COUNT(*) FROM bookings
      WHERE hotel_id = X AND status NOT IN ('CANCELLED', 'REJECTED', 'REFUNDED');
    Should be 1
    """
    wait_time = between(0, 0.05)

    def on_start(self):
        self.headers = bearer(random.choice(USER_IDS))

    @tag("concurrency")
    @task
    def book_contested_night(self):
        with self.client.post(f"/api/v1/hotels/{HOTEL_ID}/bookings",
            json=stay(CONTESTED_CHECK_IN),
            headers=self.headers,
            name="/api/v1/hotels/{id}/bookings [contested]",
            catch_response=True
        ) as resp:
            if resp.status_code in (201, 409):
                resp.success()  # 409: dates already taken
            else:
                resp.failure(f"status {resp.status_code} on contested night")


class ThroughputUser(HttpUser):
    """
    Owner dashboard and forecast reads, with and without the Redis cache.

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 50 -r 10 --run-time 60s
      2. Without Redis: REDIS_ENABLED=false on the API, run again
    """
    wait_time = between(0.1, 0.5)

    def on_start(self):
        self.headers = bearer(OWNER_ID)

    @tag("throughput", "read")
    @task(10)
    def dashboard(self):
        self.client.get("/api/v1/business-insights/dashboard", headers=self.headers)

    @tag("throughput", "read")
    @task(5)
    def forecast(self):
        self.client.get("/api/v1/business-insights/forecast", headers=self.headers)

    @tag("throughput", "read")
    @task(5)
    def availability(self):
        self.client.get(f"/api/v1/hotels/{HOTEL_ID}/availability", name="/api/v1/hotels/{id}/availability")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    Malformed or invalid booking requests.

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    Every request must come back as a 4xx, never a 5xx.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = bearer(random.choice(USER_IDS))

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_hotel(self):
        with self.client.post("/api/v1/hotels/999999/bookings",
            json=stay(CONTESTED_CHECK_IN + timedelta(days=30)),
            headers=self.headers,
            name="/api/v1/hotels/{id}/bookings [unknown]",
            catch_response=True
        ) as resp:
            self._expect(resp, (404,))

    @tag("edge")
    @task
    def reversed_interval(self):
        body = stay(CONTESTED_CHECK_IN)
        body["check_in"], body["check_out"] = body["check_out"], body["check_in"]
        with self.client.post(f"/api/v1/hotels/{HOTEL_ID}/bookings",
            json=body,
            headers=self.headers,
            name="/api/v1/hotels/{id}/bookings [reversed]",
            catch_response=True
        ) as resp:
            self._expect(resp, (422,))

    @tag("edge")
    @task
    def short_hourly_stay(self):
        check_in = CONTESTED_CHECK_IN + timedelta(days=10)
        body = stay(check_in)
        body.update(booking_type="hourly", check_out=(check_in + timedelta(minutes=30)).isoformat())
        with self.client.post(f"/api/v1/hotels/{HOTEL_ID}/bookings",
            json=body,
            headers=self.headers,
            name="/api/v1/hotels/{id}/bookings [30min]",
            catch_response=True
        ) as resp:
            self._expect(resp, (422,))

    @tag("edge")
    @task
    def zero_adults(self):
        body = stay(CONTESTED_CHECK_IN)
        body["adult_count"] = 0
        with self.client.post(f"/api/v1/hotels/{HOTEL_ID}/bookings",
            json=body,
            headers=self.headers,
            name="/api/v1/hotels/{id}/bookings [0 adults]",
            catch_response=True
        ) as resp:
            self._expect(resp, (422,))

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post(f"/api/v1/hotels/{HOTEL_ID}/bookings",
            data="{check_in: tomorrow",
            headers=self.headers,
            name="/api/v1/hotels/{id}/bookings [garbage]",
            catch_response=True
        ) as resp:
            self._expect(resp, (400, 422))

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.post(f"/api/v1/hotels/{HOTEL_ID}/bookings",
            json=stay(CONTESTED_CHECK_IN),
            name="/api/v1/hotels/{id}/bookings [no auth]",
            catch_response=True
        ) as resp:
            self._expect(resp, (401,))


class RealisticUser(HttpUser):
    """
    Mixed guest traffic.

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Mostly calendar browsing, some bookings spread over the next year,
    occasional cancellations.
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = bearer(random.choice(USER_IDS))
        self.booking_ids = []

    @task(50)
    def browse_calendar(self):
        self.client.get(f"/api/v1/hotels/{HOTEL_ID}/availability", name="/api/v1/hotels/{id}/availability")

    @task(20)
    def my_bookings(self):
        self.client.get("/api/v1/my-bookings/", headers=self.headers)

    @task(10)
    def book_random_stay(self):
        check_in = datetime.now(timezone.utc).replace(hour=14, minute=0, second=0, microsecond=0)
        check_in += timedelta(days=random.randint(1, 365))
        with self.client.post(f"/api/v1/hotels/{HOTEL_ID}/bookings",
            json=stay(check_in, nights=random.randint(1, 3)),
            headers=self.headers,
            name="/api/v1/hotels/{id}/bookings",
            catch_response=True
        ) as resp:
            if resp.status_code == 201:
                self.booking_ids.append(resp.json()["id"])
                resp.success()
            elif resp.status_code == 409:
                resp.success()

    @task(2)
    def cancel_one(self):
        if self.booking_ids:
            booking_id = self.booking_ids.pop()
            self.client.post(f"/api/v1/my-bookings/{booking_id}/cancel",
                json={"reason": "Plans changed"},
                headers=self.headers,
                name="/api/v1/my-bookings/{id}/cancel")
