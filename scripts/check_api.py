"""
Smoke test against a running server: adds a headquarters and a branch,
checks the link, then removes the branch again.
"""
import json
import sys

import requests

BASE_URL = "http://localhost:8000/v1/swift-codes"

HEADQUARTER = {
    "address": "383 Madison Ave, New York, NY 10017",
    "bankName": "JPMorgan Chase Bank",
    "countryISO2": "US",
    "countryName": "United States",
    "isHeadquarter": True,
    "swiftCode": "CHASUS33XXX",
}
BRANCH = {
    "address": "50 Rowes Wharf, Boston, MA 02110",
    "bankName": "JPMorgan Chase Bank - Boston Branch",
    "countryISO2": "US",
    "countryName": "United States",
    "isHeadquarter": False,
    "swiftCode": "CHASUS33BRN",
}

def check_api(base_url=BASE_URL):
    for payload in (HEADQUARTER, BRANCH):
        resp = requests.post(f"{base_url}/", json=payload)
        print(f"POST {payload['swiftCode']}: {resp.status_code} - {resp.json()['message']}")
        if resp.status_code not in (201, 409):
            return False

    resp = requests.get(f"{base_url}/{HEADQUARTER['swiftCode']}")
    data = resp.json()
    print(json.dumps(data, indent=2))
    if BRANCH["swiftCode"] not in [b["swiftCode"] for b in data.get("branches", [])]:
        print("Branch not linked to headquarters.")
        return False
    print("Branch linked to headquarters. OK.")

    resp = requests.delete(f"{base_url}/{BRANCH['swiftCode']}")
    print(f"DELETE {BRANCH['swiftCode']}: {resp.status_code} - {resp.json()['message']}")

    data = requests.get(f"{base_url}/{HEADQUARTER['swiftCode']}").json()
    if BRANCH["swiftCode"] in [b["swiftCode"] for b in data.get("branches", [])]:
        print("Deleted branch still listed.")
        return False
    print("Branch unlinked after delete. OK.")
    return True

if __name__ == "__main__":
    sys.exit(0 if check_api() else 1)
