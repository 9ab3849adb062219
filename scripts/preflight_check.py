#!/usr/bin/env python3
import sys
import os

print("Running preflight import check...")
try:
    # Keep the check independent of a local .env
    os.environ.setdefault("VERIFICATION_BACKEND", "local")
    os.environ.setdefault("RATE_LIMIT_BACKEND", "memory")

    import idverify.main
    print("Import idverify.main: OK")

    from idverify.core.verification import get_flow_provider
    print(f"Flow provider: {type(get_flow_provider()).__name__}")

    print("Preflight check passed.")
    sys.exit(0)
except Exception as e:
    print(f"Preflight check FAILED: {e}")
    import traceback
    traceback.print_exc()
    sys.exit(1)
