"""
Locust load tests for the Setor 7 donations API.

Install: pip install locust
Run: locust -f locustfile.py --host=http://127.0.0.1:5050

For headless: locust -f locustfile.py --host=http://127.0.0.1:5050 \
    --users 10 --spawn-rate 2 --run-time 1m --headless

create-pix-payment hits Mercado Pago for real; it only runs when
LOCUST_CREATE_PIX=1 (point MERCADO_PAGO_ACCESS_TOKEN at a test account).
Keep RATE_LIMIT_ENABLED=0 on the target or most of those calls get 429.
"""

import os
from locust import HttpUser, task, between


class DonationsAPIUser(HttpUser):
    wait_time = between(1, 3)

    def on_start(self):
        """Optional: login to get token for authenticated endpoints."""
        self.token = None
        if os.getenv("LOCUST_AUTH_EMAIL") and os.getenv("LOCUST_AUTH_PASSWORD"):
            r = self.client.post(
                "/api/auth/login",
                json={
                    "email": os.getenv("LOCUST_AUTH_EMAIL"),
                    "password": os.getenv("LOCUST_AUTH_PASSWORD"),
                },
            )
            if r.status_code == 200 and "access_token" in r.json():
                self.token = r.json()["access_token"]

    def _headers(self):
        h = {"Content-Type": "application/json"}
        if self.token:
            h["Authorization"] = f"Bearer {self.token}"
        return h

    @task(10)
    def root(self):
        self.client.get("/")

    @task(8)
    def vip_packages(self):
        self.client.get("/api/vip-packages")

    @task(5)
    def poll_order(self):
        # Placeholder payment id; set LOCUST_ORDER_ID to a real one for meaningful numbers
        order_id = os.getenv("LOCUST_ORDER_ID", "1")
        self.client.post(
            "/functions/v1/get-mercadopago-order",
            json={"orderId": order_id},
            headers=self._headers(),
            name="/functions/v1/get-mercadopago-order",
        )

    @task(2)
    def summary(self):
        if self.token:
            self.client.get("/api/admin/summary", headers=self._headers())

    @task(1)
    def create_pix(self):
        if os.getenv("LOCUST_CREATE_PIX", "0") != "1":
            return
        self.client.post(
            "/functions/v1/create-pix-payment",
            json={
                "name": "Load Test",
                "email": "loadtest@example.com",
                "phone": "11999999999",
                "steamId": "76561198000000000",
                "amount": 5,
            },
            headers=self._headers(),
        )
