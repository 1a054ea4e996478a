"""
Remote API access for Ball Knowledge.

- `pipeline` is the single point every outbound request passes through;
  it attaches the bearer credential and enforces local expiry.
- `client` exposes one function per backend endpoint.
- `models` holds the pydantic payload and response models.
"""
