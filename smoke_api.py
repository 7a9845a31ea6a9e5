#!/usr/bin/env python3
"""
Live smoke test for a running PulseRide dispatch server.

Walks the main user journey against ``BASE_URL``: login, nearest
hospitals, available ambulances, booking, history, then completes the
booking as an administrator and checks the ambulance is free again.

Prepare the server with ``manage.py ensure_test_users`` and
``manage.py populate_data --bookings 0`` first.
"""
import os
import sys
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

BASE_URL = os.getenv("SMOKE_BASE_URL", "http://127.0.0.1:8000")
PASSWORD = os.getenv("SMOKE_PASSWORD", "P@ssw0rd1")

TEST_USERS = {
    "admin": "admin@pulseride.test",
    "user": "user@pulseride.test",
}


@dataclass
class StepResult:
    success: bool
    endpoint: str
    method: str
    status_code: int
    response_time: float
    error_message: str = ""
    description: str = ""


class SmokeTester:
    def __init__(self):
        self.session = requests.Session()
        self.tokens: Dict[str, str] = {}
        self.results = []

    @property
    def errors(self):
        return [r for r in self.results if not r.success]

    def call(self, role: Optional[str], method: str, endpoint: str, *, json: Any = None,
             expected_status: int = 200, description: str = ""):
        headers = {"Content-Type": "application/json"}
        if role:
            headers["Authorization"] = f"Bearer {self.tokens[role]}"
        start = time.time()
        try:
            resp = self.session.request(method, f"{BASE_URL}{endpoint}", json=json, headers=headers, timeout=10)
        except requests.RequestException as e:
            self.results.append(StepResult(False, endpoint, method, 0, time.time() - start, str(e), description))
            print(f"ERR  {method} {endpoint} - {e}")
            return None
        elapsed = time.time() - start
        ok = resp.status_code == expected_status
        self.results.append(StepResult(ok, endpoint, method, resp.status_code, elapsed,
                                       "" if ok else resp.text[:200], description))
        print(f"{'OK  ' if ok else 'FAIL'} {method} {endpoint} -> {resp.status_code} ({elapsed:.2f}s) {description}")
        try:
            return resp.json()
        except ValueError:
            return None

    def login(self, role: str) -> bool:
        data = self.call(None, "POST", "/api/auth/login",
                         json={"email": TEST_USERS[role], "password": PASSWORD},
                         description=f"login as {role}")
        if not data or not data.get("token"):
            return False
        self.tokens[role] = data["token"]
        return True

    def run(self) -> bool:
        self.call(None, "GET", "/healthz", description="health check")
        if not (self.login("admin") and self.login("user")):
            return False

        self.call("user", "GET", "/api/user/profile", description="own profile")
        self.call("user", "GET", "/api/admin/bookings/all", expected_status=403, description="admin-only rejected")

        hospitals = self.call("user", "GET", "/api/hospitals/nearest?lat=12.97&lng=77.59",
                              description="nearest hospitals") or []
        self.call("user", "GET", "/api/hospitals/all?page=0&size=5", description="hospital page")
        if not hospitals:
            print("no hospitals; run populate_data first")
            return False

        hospital_id = hospitals[0]["id"]
        ambulances = self.call("user", "GET", f"/api/ambulances/available?hospitalId={hospital_id}",
                               description="available ambulances") or []
        if not ambulances:
            print(f"no free ambulance at hospital {hospital_id}")
            return False

        ambulance_id = ambulances[0]["id"]
        body = {
            "hospitalId": hospital_id,
            "ambulanceId": ambulance_id,
            "bookingType": "EMERGENCY",
            "patient": {"name": "Smoke Test", "age": 40, "gender": "Female", "condition": "Chest pain"},
        }
        booking = self.call("user", "POST", "/api/booking/book", json=body, expected_status=201,
                            description="book ambulance")
        self.call("user", "POST", "/api/booking/book", json=body, expected_status=409,
                  description="second booking of the same ambulance rejected")
        self.call("user", "GET", "/api/booking/history", description="booking history")
        if booking:
            self.call("admin", "PATCH", f"/api/admin/bookings/status?bookingId={booking['id']}&status=COMPLETED",
                      description="complete booking")
            free = self.call("user", "GET", f"/api/ambulances/available?hospitalId={hospital_id}",
                             description="ambulance released") or []
            if ambulance_id not in [a["id"] for a in free]:
                self.results.append(StepResult(False, "/api/ambulances/available", "GET", 200, 0,
                                               "ambulance not released", "ambulance released"))
        self.call("user", "POST", "/api/auth/logout", description="logout")
        return not self.errors

    def report(self):
        total = len(self.results)
        passed = total - len(self.errors)
        print(f"\n{passed}/{total} steps passed")
        for i, r in enumerate(self.errors, 1):
            print(f"{i}. {r.method} {r.endpoint} [{r.status_code}] {r.description}: {r.error_message}")


def main():
    tester = SmokeTester()
    ok = tester.run()
    tester.report()
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
