from typing import Any, Dict

# Older clients post the first-generation form field names
LEGACY_ALIASES = {
    "aadhaar": "identityNumber",
    "mobile": "mobileNumber",
    "pan": "taxId",
    "name": "fullName",
    "dob": "dateOfBirth",
}


def _to_str(v: Any):
    # Only JSON strings carry field values; numbers and booleans count as missing
    return v if isinstance(v, str) else None


def normalize_body(payload: Any) -> Dict[str, Any]:
    """
    Accept ANY payload and map it onto the canonical camelCase field names.
    Non-dict bodies become {}, non-string values count as missing, canonical
    keys win over legacy aliases when both are present.
    """
    if not isinstance(payload, dict):
        return {}

    out: Dict[str, Any] = {}
    for k, v in payload.items():
        if not isinstance(k, str):
            continue
        canonical = LEGACY_ALIASES.get(k)
        if canonical:
            out.setdefault(canonical, _to_str(v))
        else:
            out[k] = _to_str(v)
    return out
