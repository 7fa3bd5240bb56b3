"""GoEnhance video effects API client."""

import logging
from typing import Any, Dict, Optional

from ..exceptions import NoOutputError
from .base import ServiceClient
from .http import data_uri, json_body, raise_for_status

logger = logging.getLogger(__name__)


class GoEnhanceClient(ServiceClient):
    """Client applying GoEnhance effects to an existing clip."""

    service_name = "GoEnhance"
    required_settings = ("goenhance_api_key",)

    @property
    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._config.goenhance_api_key}"}

    @property
    def _base_url(self) -> str:
        return self._config.goenhance_base_url.rstrip("/")

    async def apply_effect(self, effect: str, beat_id: str, video: bytes) -> str:
        """Submit a clip for an effect and return the URL of the result.

        Raises:
            CollaboratorError: If a request is rejected.
            TaskFailedError: If the task fails remotely.
            NoOutputError: If no task URL or download URL is returned.
        """
        response = await self._client.post(
            f"{self._base_url}/video-effects/generate",
            headers=self._headers,
            json={
                "effect": effect,
                "metadata": {"beatId": beat_id},
                "input_video": data_uri("video/mp4", video),
            },
        )
        raise_for_status(response, self.service_name, "generate")

        task_url = self._task_url(json_body(response, self.service_name))
        if not task_url:
            raise NoOutputError("GoEnhance response missing task URL")

        logger.info(f"Started GoEnhance '{effect}' task for {beat_id}")
        result = await self._poller.poll(lambda: self._fetch_task(task_url), f"GoEnhance task for {beat_id}")

        url = self._download_url(result)
        if not url:
            raise NoOutputError(f"GoEnhance completed without download URL for beat {beat_id}")
        return url

    def _task_url(self, body: Dict[str, Any]) -> Optional[str]:
        url = body.get("task_url") or body.get("taskUrl")
        if url:
            return url
        task_id = body.get("task_id") or body.get("taskId")
        if task_id:
            return f"{self._base_url}/tasks/{task_id}"
        return None

    @staticmethod
    def _download_url(payload: Dict[str, Any]) -> Optional[str]:
        result = payload.get("result") or {}
        output = payload.get("output") or {}
        return result.get("download_url") or result.get("video_url") or output.get("video_url")

    async def _fetch_task(self, url: str) -> Dict[str, Any]:
        response = await self._client.get(url, headers=self._headers)
        raise_for_status(response, self.service_name, "task poll")
        return json_body(response, self.service_name)
