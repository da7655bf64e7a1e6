"""
Relay ERC-20 Transfer and Approval events to a callback contract.

Loads transfer_relay.json, prints the generated reactive contract and, when a
solc binary can be resolved through py-solc-x, compiles it and lists the
resulting ABI entry points.

Usage:
  python3 examples/transfer_relay.py
"""
import json
import logging
from pathlib import Path

from reactforge import Pipeline

CONFIG_PATH = Path(__file__).resolve().parent / "transfer_relay.json"


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    raw = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    pipeline = Pipeline()

    print("=" * 70)
    print("STEP 1: generate")
    print("=" * 70)
    generated = pipeline.generate(raw)
    print(f"template: {generated.template_id}\n")
    print(generated.text)

    print("=" * 70)
    print("STEP 2: check and compile")
    print("=" * 70)
    result = pipeline.run(raw)
    for warning in result.warnings:
        print(f"warning: {warning}")
    if not result.ok:
        print(f"{result.stage.value} failed: {result.detail}")
        return

    entry_points = sorted(item["name"] for item in result.abi if item.get("type") == "function")
    print(f"{result.contract_name}: {len(result.bytecode) // 2} bytes of bytecode")
    print("functions: " + ", ".join(entry_points))


if __name__ == "__main__":
    main()
