#!/usr/bin/env python3
"""
Demo script — issues one wallet pass per card type against a running server.

!! NOT FOR PRODUCTION !!
The records below are fake. The script is intended ONLY for local demos
and for checking a signing setup end to end.

Usage:
    # With the API server running on localhost:8080:
    python demo/issue_cards.py

    # Custom server URL and output directory:
    python demo/issue_cards.py --base-url http://localhost:9000 --output passes/

Each pass is written as <type>-<serial>.pkpass, then fetched again by its
serial number to check that retrieval answers the same bytes.
"""

import argparse
import asyncio
import sys
from pathlib import Path

import httpx

BASE_URL = "http://localhost:8080"

# ---------------------------------------------------------------------------
# Demo records
# ---------------------------------------------------------------------------

RECIPIENT = {
    "recipientName": "Alice Chen",
    "recipientPhoneNumber": "+5581999990000",
}

RECORDS = [
    {
        "type": "boleto",
        "message": "Mensalidade de março",
        "value": "189.90",
        "boletoDigitableLine": "23790.50400 41990.901-3 10.004/57 9 00000000018990",
        "cpf": "000.000.000-00",
        **RECIPIENT,
    },
    {
        "type": "picpay",
        "message": "Me paga um café?",
        "picpayUser": "alice.chen",
        "value": "7",
        "backgroundColor": "rgb(17, 199, 111)",
        **RECIPIENT,
    },
    {
        "type": "nubank",
        "message": "Divisão do aluguel",
        "nubankUrl": "https://nubank.com.br/pagar/1a2b3c/XyZ0987",
        "backgroundColor": "rgb(130, 10, 209)",
        **RECIPIENT,
    },
    {
        "type": "febraban",
        "message": "Transferência do churrasco",
        "bankCode": "001",
        "bankName": "Banco do Brasil",
        "agencyNumber": "1234-5",
        "accountNumber": "98765-4",
        "accountType": "Corrente",
        "cnpj": "00.000.000/0001-00",
        **RECIPIENT,
    },
]


async def issue(client: httpx.AsyncClient, record: dict, output: Path) -> bool:
    """Issue one pass, save it and check retrieval. Returns True on success."""
    response = await client.post("/card/", json=record)
    if response.status_code != 200:
        print(f"  ✗ {record['type']}: {response.status_code} {response.json()}")
        return False

    serial_number = response.headers["x-pass-serial-number"]
    path = output / f"{record['type']}-{serial_number}.pkpass"
    path.write_bytes(response.content)

    again = await client.get(f"/card/{serial_number}")
    same = again.status_code == 200 and again.content == response.content
    print(f"  ✓ {record['type']}: {path} ({len(response.content)} bytes, retrieval {'ok' if same else 'MISMATCH'})")
    return same


async def main(base_url: str, output: Path) -> int:
    output.mkdir(parents=True, exist_ok=True)
    print(f"Issuing demo passes against {base_url}")

    async with httpx.AsyncClient(base_url=base_url, timeout=10.0) as client:
        try:
            health = await client.get("/health")
        except httpx.ConnectError:
            print(f"Cannot reach {base_url}. Is the server running?")
            return 1
        print(f"Server version {health.json()['version']}")

        results = [await issue(client, record, output) for record in RECORDS]

    print(f"{sum(results)}/{len(results)} passes issued")
    return 0 if all(results) else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Issue demo wallet passes")
    parser.add_argument("--base-url", default=BASE_URL, help="API base URL")
    parser.add_argument("--output", default="passes", type=Path, help="Where to write .pkpass files")
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.base_url, args.output)))
