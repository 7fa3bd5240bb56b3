"""Replicate Wav2Lip lip-sync client."""

import logging
from typing import Any, Dict

from ..exceptions import NoOutputError
from .base import ServiceClient
from .http import data_uri, json_body, raise_for_status

logger = logging.getLogger(__name__)


class ReplicateClient(ServiceClient):
    """Client running Wav2Lip predictions on Replicate."""

    service_name = "Replicate"
    required_settings = ("replicate_api_token",)

    @property
    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Token {self._config.replicate_api_token}"}

    @property
    def _base_url(self) -> str:
        return self._config.replicate_base_url.rstrip("/")

    async def lip_sync(self, video: bytes, audio: bytes) -> str:
        """Sync ``video`` to ``audio`` and return the URL of the result.

        Raises:
            CollaboratorError: If a request is rejected.
            TaskFailedError: If the prediction fails remotely.
            NoOutputError: If the prediction succeeds without output.
        """
        response = await self._client.post(
            f"{self._base_url}/v1/predictions",
            headers=self._headers,
            json={
                "version": self._config.wav2lip_version,
                "input": {
                    "face": data_uri("video/mp4", video),
                    "audio": data_uri("audio/mpeg", audio),
                    "pads": 0,
                    "nosmooth": False,
                },
            },
        )
        raise_for_status(response, self.service_name, "prediction")
        prediction_id = json_body(response, self.service_name).get("id")
        if not prediction_id:
            raise NoOutputError("Replicate response missing prediction id")

        logger.info(f"Started Wav2Lip prediction {prediction_id}")
        result = await self._poller.poll(
            lambda: self._fetch_prediction(prediction_id),
            f"Wav2Lip prediction {prediction_id}",
        )

        output = result.get("output")
        if isinstance(output, list):
            output = output[0] if output else None
        if not output:
            raise NoOutputError("No output URL in Wav2Lip response")
        return output

    async def _fetch_prediction(self, prediction_id: str) -> Dict[str, Any]:
        response = await self._client.get(
            f"{self._base_url}/v1/predictions/{prediction_id}",
            headers=self._headers,
        )
        raise_for_status(response, self.service_name, "prediction poll")
        return json_body(response, self.service_name)
