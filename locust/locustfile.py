"""
Locust Load Test Suite

Expects a seeded catalog (shows and customers are not created over the API).
Point it at existing rows with LOAD_SHOW_ID, LOAD_CUSTOMER_IDS and
LOAD_MOVIE_ID.

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Test double booking
  locust -f locustfile.py --tags read         # Test listing/summary load
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests
"""

import os
import random
from locust import HttpUser, task, between, tag, events

SHOW_ID = int(os.environ.get("LOAD_SHOW_ID", "1"))
MOVIE_ID = int(os.environ.get("LOAD_MOVIE_ID", "1"))
CUSTOMER_IDS = [int(c) for c in os.environ.get("LOAD_CUSTOMER_IDS", "1").split(",")]

# Ten contested seats
HOT_SEATS = [f"A{n}" for n in range(1, 11)]

# Shared state
BOOKING_IDS = []


def booking_payload(seats, show_id=SHOW_ID, total_cost=250.0):
    return {
        "customer_id": random.choice(CUSTOMER_IDS),
        "show_id": show_id,
        "seat_numbers": seats,
        "total_cost": total_cost,
    }


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"Booking show {SHOW_ID} as customers {CUSTOMER_IDS}")
    print("=" * 60)


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    print("\nVerify no seat was sold twice:")
    print("  SELECT show_id, seat_label, COUNT(*) FROM ticket_seats")
    print("  WHERE active GROUP BY show_id, seat_label HAVING COUNT(*) > 1;")
    print("Should return no rows\n")


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - 100 users -> 10 seats

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    Every seat in HOT_SEATS must end up in at most one active booking.
    """
    wait_time = between(0, 0.1)

    @tag("concurrency")
    @task
    def book_hot_seat(self):
        """All users fight for the same 10 seats."""
        seats = random.sample(HOT_SEATS, k=random.randint(1, 2))
        with self.client.post("/api/v1/bookings/",
            json=booking_payload(seats),
            catch_response=True
        ) as resp:
            if resp.status_code == 201:
                BOOKING_IDS.append(resp.json()["id"])
                resp.success()
            elif resp.status_code in (409, 400):
                resp.success()  # Expected: seat taken or lost at commit
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ReadUser(HttpUser):
    """
    TEST 2: Read throughput

    Run: locust -f locustfile.py --tags read -u 100 -r 20 --run-time 60s

    Compare avg response time and P95/P99 for the seat map and summaries
    while bookings are being written.
    """
    wait_time = between(0.1, 0.5)

    @tag("read")
    @task(10)
    def reserved_seats(self):
        self.client.get(f"/api/v1/shows/{SHOW_ID}/reserved-seats",
            name="/api/v1/shows/{id}/reserved-seats")

    @tag("read")
    @task(3)
    def movie_summary(self):
        self.client.get("/api/v1/bookings/summary/movies")

    @tag("read")
    @task(3)
    def customer_history(self):
        self.client.get(f"/api/v1/bookings/customer/{random.choice(CUSTOMER_IDS)}",
            name="/api/v1/bookings/customer/{id}")

    @tag("read")
    @task(2)
    def bookings_for_movie(self):
        self.client.get(f"/api/v1/bookings/movie/{MOVIE_ID}",
            name="/api/v1/bookings/movie/{id}")

    @tag("read")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_show(self):
        with self.client.post("/api/v1/bookings/",
            json=booking_payload(["A1"], show_id=999999),
            catch_response=True
        ) as resp:
            self.expect(resp, [404])

    @tag("edge")
    @task
    def no_seats(self):
        with self.client.post("/api/v1/bookings/",
            json=booking_payload([" ", ""]),
            catch_response=True
        ) as resp:
            self.expect(resp, [400])

    @tag("edge")
    @task
    def duplicate_seats(self):
        with self.client.post("/api/v1/bookings/",
            json=booking_payload(["Z9", "z9"]),
            catch_response=True
        ) as resp:
            self.expect(resp, [400])

    @tag("edge")
    @task
    def negative_cost(self):
        with self.client.post("/api/v1/bookings/",
            json=booking_payload([f"Q{random.randint(1, 999)}"], total_cost=-5),
            catch_response=True
        ) as resp:
            self.expect(resp, [400, 409])

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post("/api/v1/bookings/",
            data="not json at all",
            catch_response=True
        ) as resp:
            self.expect(resp, [400, 422])


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Mostly seat-map reads, some bookings on a wide seat range,
    occasional cancellations.
    """
    wait_time = between(1, 3)

    @task(50)
    def view_seat_map(self):
        self.client.get(f"/api/v1/shows/{SHOW_ID}/reserved-seats",
            name="/api/v1/shows/{id}/reserved-seats")

    @task(10)
    def book_seats(self):
        row = random.choice("BCDEFGHJ")
        seats = [f"{row}{random.randint(1, 20)}"]
        with self.client.post("/api/v1/bookings/",
            json=booking_payload(seats),
            catch_response=True
        ) as resp:
            if resp.status_code == 201:
                BOOKING_IDS.append(resp.json()["id"])
                resp.success()
            elif resp.status_code == 409:
                resp.success()

    @task(3)
    def cancel_booking(self):
        if BOOKING_IDS:
            booking_id = BOOKING_IDS.pop(random.randrange(len(BOOKING_IDS)))
            self.client.delete(f"/api/v1/bookings/{booking_id}",
                name="/api/v1/bookings/{id}")
