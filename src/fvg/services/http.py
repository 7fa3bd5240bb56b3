"""Shared HTTP helpers for the service adapters."""

import base64
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from ..exceptions import CollaboratorError

logger = logging.getLogger(__name__)


def new_client(timeout: float) -> httpx.AsyncClient:
    """Create the async HTTP client used when none is injected."""
    return httpx.AsyncClient(timeout=timeout, follow_redirects=True)


def raise_for_status(response: httpx.Response, service: str, action: str) -> None:
    """Turn a non-success response into a ``CollaboratorError``."""
    if response.is_success:
        return
    raise CollaboratorError(
        f"{service} {action} failed {response.status_code}",
        status_code=response.status_code,
        body=response.text[:500],
    )


def json_body(response: httpx.Response, service: str) -> Dict[str, Any]:
    """Decode a JSON object body or fail with a descriptive error."""
    try:
        data = response.json()
    except ValueError as e:
        raise CollaboratorError(f"{service} returned invalid JSON: {e}", status_code=response.status_code)
    if not isinstance(data, dict):
        raise CollaboratorError(f"{service} returned an unexpected payload", status_code=response.status_code)
    return data


def data_uri(mime_type: str, data: bytes) -> str:
    """Encode bytes as a base64 data URI."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def write_atomically(path: Path, content: bytes) -> Path:
    """Write bytes next to ``path`` and move them into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(path.suffix + ".tmp")
    with open(temp_path, "wb") as f:
        f.write(content)
    os.replace(temp_path, path)
    return path


async def download(
    client: httpx.AsyncClient,
    url: str,
    output_path: Path,
    service: str = "download",
    headers: Optional[Dict[str, str]] = None,
) -> Path:
    """Fetch ``url`` and save the body to ``output_path``."""
    response = await client.get(url, headers=headers)
    raise_for_status(response, service, "download")
    write_atomically(output_path, response.content)
    logger.debug(f"Downloaded {url} to {output_path}")
    return output_path
