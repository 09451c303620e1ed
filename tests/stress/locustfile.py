"""
POS Backend Load Testing with Locust

Hammers order placement against a small, shared stock pool so concurrent
orders compete for the same item rows.

Prereqs:
    cd backend && python -m flask system init
    (creates the default admin; set STRESS_USERNAME/STRESS_PASSWORD to
    use another account). Disable rate limiting for the run:
    RATE_LIMIT_ENABLED=false

Run with:
    locust -f tests/stress/locustfile.py --host http://127.0.0.1:5000

Or headless:
    locust -f tests/stress/locustfile.py --host http://127.0.0.1:5000 \
           --users 20 --spawn-rate 5 --run-time 60s --headless

Pass thresholds:
- p95 response time < 500ms for reads
- p95 response time < 1000ms for writes
- Error rate < 1% (a 400 "Insufficient stock" is an expected outcome)
- Stock never goes negative (checked on test stop)
"""

import os
import time
import random
from typing import Optional, Dict, List

import requests
from locust import HttpUser, task, between, events


# =============================================================================
# CONFIGURATION
# =============================================================================

USERNAME = os.environ.get("STRESS_USERNAME", "admin")
PASSWORD = os.environ.get("STRESS_PASSWORD", "admin123")

# Items created by on_test_start: (name, price, stock)
STRESS_ITEMS = [
    ("Stress Coffee", "3.50", 200),
    ("Stress Muffin", "2.25", 100),
    ("Stress Bagel", "1.75", 50),
]

stress_item_ids: List[int] = []


# =============================================================================
# METRICS TRACKING
# =============================================================================

class MetricsCollector:
    """Collect and report metrics."""

    def __init__(self):
        self.request_counts: Dict[str, int] = {}
        self.error_counts: Dict[str, int] = {}
        self.response_times: Dict[str, List[float]] = {}
        self.stock_rejections = 0

    def record(self, name: str, response_time: float, success: bool):
        if name not in self.request_counts:
            self.request_counts[name] = 0
            self.error_counts[name] = 0
            self.response_times[name] = []

        self.request_counts[name] += 1
        if not success:
            self.error_counts[name] += 1
        self.response_times[name].append(response_time)

    def get_summary(self) -> Dict:
        summary = {}
        for name in self.request_counts:
            times = sorted(self.response_times[name])
            count = len(times)
            if count == 0:
                continue

            p95_idx = int(count * 0.95)

            summary[name] = {
                "count": self.request_counts[name],
                "errors": self.error_counts[name],
                "error_rate": self.error_counts[name] / self.request_counts[name] * 100,
                "avg_ms": sum(times) / count,
                "p95_ms": times[p95_idx] if p95_idx < count else times[-1],
            }
        return summary


metrics = MetricsCollector()


def _login(base_url: str) -> str:
    response = requests.post(
        f"{base_url}/api/auth/login",
        json={"username": USERNAME, "password": PASSWORD},
        timeout=10,
    )
    response.raise_for_status()
    return response.json()["data"]["token"]


# =============================================================================
# USER BEHAVIORS
# =============================================================================

class POSUser(HttpUser):
    """
    Base POS user that authenticates on start.
    """
    wait_time = between(0.1, 0.5)
    abstract = True

    token: Optional[str] = None

    def on_start(self):
        """Login when user starts."""
        response = self.client.post(
            "/api/auth/login",
            json={"username": USERNAME, "password": PASSWORD},
            name="auth/login"
        )
        if response.status_code == 200:
            self.token = response.json()["data"]["token"]

    def get_headers(self) -> Dict:
        """Get headers with auth token."""
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers


class BrowsingUser(POSUser):
    """
    Reads inventory and orders while orders are being placed.
    """
    weight = 1

    @task(5)
    def list_items(self):
        start = time.time()
        response = self.client.get("/api/items", headers=self.get_headers(), name="items/list")
        metrics.record("items/list", (time.time() - start) * 1000, response.status_code == 200)

    @task(2)
    def list_orders(self):
        start = time.time()
        response = self.client.get("/api/orders", headers=self.get_headers(), name="orders/list")
        metrics.record("orders/list", (time.time() - start) * 1000, response.status_code == 200)

    @task(1)
    def health_check(self):
        start = time.time()
        response = self.client.get("/health", name="system/health")
        metrics.record("system/health", (time.time() - start) * 1000, response.status_code == 200)


class OrderingUser(POSUser):
    """
    Places orders for random quantities of the shared stress items.
    """
    weight = 3

    @task
    def create_order(self):
        if not stress_item_ids:
            return

        chosen = random.sample(stress_item_ids, k=random.randint(1, len(stress_item_ids)))
        lines = [{"itemid": itemid, "quantity": random.randint(1, 3)} for itemid in chosen]

        start = time.time()
        with self.client.post(
            "/api/orders",
            json={"items": lines},
            headers=self.get_headers(),
            name="orders/create",
            catch_response=True,
        ) as response:
            elapsed = (time.time() - start) * 1000
            if response.status_code == 201:
                metrics.record("orders/create", elapsed, True)
                response.success()
            elif response.status_code == 400 and "Insufficient stock" in response.text:
                metrics.stock_rejections += 1
                metrics.record("orders/create", elapsed, True)
                response.success()
            else:
                metrics.record("orders/create", elapsed, False)
                response.failure(f"Unexpected status {response.status_code}")


# =============================================================================
# EVENT HANDLERS
# =============================================================================

@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Create the shared stress items."""
    base_url = environment.host
    token = _login(base_url)
    headers = {"Authorization": f"Bearer {token}"}

    stress_item_ids.clear()
    for name, price, stock in STRESS_ITEMS:
        response = requests.post(
            f"{base_url}/api/items",
            json={"name": name, "price": price, "category": "Stress", "stock_quantity": stock},
            headers=headers,
            timeout=10,
        )
        response.raise_for_status()
        stress_item_ids.append(response.json()["data"]["itemid"])


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    """Print summary and verify the stock ledger when test stops."""
    print("\n" + "=" * 80)
    print("LOAD TEST SUMMARY")
    print("=" * 80)

    summary = metrics.get_summary()

    print(f"\n{'Endpoint':<30} {'Count':>8} {'Errors':>8} {'Err%':>8} {'Avg(ms)':>10} {'P95(ms)':>10}")
    print("-" * 80)

    all_pass = True

    for name, stats in sorted(summary.items()):
        p95_threshold = 1000 if "create" in name else 500
        passed = stats["p95_ms"] < p95_threshold and stats["error_rate"] < 1

        status = "PASS" if passed else "FAIL"
        if not passed:
            all_pass = False

        print(f"{name:<30} {stats['count']:>8} {stats['errors']:>8} {stats['error_rate']:>7.2f}% {stats['avg_ms']:>9.1f} {stats['p95_ms']:>9.1f} [{status}]")

    print("-" * 80)
    print(f"Orders rejected for insufficient stock: {metrics.stock_rejections}")

    # Stock ledger check: every stress item must be non-negative and equal
    # to initial stock minus the units sold across all orders
    base_url = environment.host
    headers = {"Authorization": f"Bearer {_login(base_url)}"}
    orders = requests.get(f"{base_url}/api/orders", headers=headers, timeout=30).json()["data"]

    sold: Dict[int, int] = {}
    for order in orders:
        for line in order["items"]:
            sold[line["itemid"]] = sold.get(line["itemid"], 0) + line["quantity"]

    for (name, _price, initial), itemid in zip(STRESS_ITEMS, stress_item_ids):
        item = requests.get(f"{base_url}/api/items/{itemid}", headers=headers, timeout=10).json()["data"]
        expected = initial - sold.get(itemid, 0)
        ok = item["stock_quantity"] == expected and item["stock_quantity"] >= 0
        if not ok:
            all_pass = False
        print(f"{name:<30} stock={item['stock_quantity']:>5} expected={expected:>5} [{'PASS' if ok else 'FAIL'}]")

    print("=" * 80)
    print("\n[PASS] All checks passed" if all_pass else "\n[FAIL] Some checks failed")
    print("=" * 80)
