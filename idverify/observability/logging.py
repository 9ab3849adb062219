import json
import time
from idverify.settings import settings

# Draft fields never leave the process in clear text when redaction is on
SENSITIVE_KEYS = {"identityNumber", "mobileNumber", "otp", "taxId", "fullName", "dateOfBirth"}
# Identifiers keep a short suffix so log lines stay correlatable
SUFFIX_KEYS = {"identityNumber", "mobileNumber", "taxId"}


def _redact_value(k, v):
    if isinstance(v, str) and len(v) > 0:
        if k in SUFFIX_KEYS and len(v) > 4:
            return "*" * (len(v) - 4) + v[-4:]
        return f"[REDACTED:{len(v)}chars]"
    if isinstance(v, dict):
        return {sk: _redact_value(sk, sv) if sk in SENSITIVE_KEYS else sv for sk, sv in v.items()}
    return v


def redact(fields: dict) -> dict:
    clean = {}
    for k, v in fields.items():
        if k in SENSITIVE_KEYS:
            clean[k] = _redact_value(k, v)
        elif isinstance(v, dict):
            # nested draft snapshots
            clean[k] = {sk: (_redact_value(sk, sv) if sk in SENSITIVE_KEYS else sv) for sk, sv in v.items()}
        else:
            clean[k] = v
    return clean


def log(event: str, **fields):
    payload = {"ts": int(time.time()), "event": event}

    if settings.ENABLE_PII_REDACTION:
        payload.update(redact(fields))
    else:
        payload.update(fields)

    print(json.dumps(payload, ensure_ascii=False, default=str))
