"""ID generation helpers."""

import uuid


def generate_request_id() -> str:
    """Generate a request ID for log correlation."""
    return f"req_{uuid.uuid4().hex[:16]}"


def generate_job_id() -> str:
    """Generate an ID for a single render job."""
    return f"job_{uuid.uuid4().hex[:12]}"
