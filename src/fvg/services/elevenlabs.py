"""ElevenLabs text-to-speech API client."""

import logging

from .base import ServiceClient
from .http import raise_for_status

logger = logging.getLogger(__name__)

VOICE_SETTINGS = {"stability": 0.4, "similarity_boost": 0.7}


class ElevenLabsClient(ServiceClient):
    """Client synthesizing dialogue lines to MP3 audio."""

    service_name = "ElevenLabs"
    required_settings = ("elevenlabs_api_key",)

    async def synthesize(self, text: str, voice_id: str) -> bytes:
        """Return MP3 bytes for ``text`` spoken by ``voice_id``.

        Raises:
            CollaboratorError: If the request is rejected.
        """
        base_url = self._config.elevenlabs_base_url.rstrip("/")
        response = await self._client.post(
            f"{base_url}/v1/text-to-speech/{voice_id}",
            headers={
                "xi-api-key": self._config.elevenlabs_api_key,
                "Accept": "audio/mpeg",
            },
            json={
                "text": text,
                "model_id": self._config.elevenlabs_model_id,
                "voice_settings": VOICE_SETTINGS,
            },
        )
        raise_for_status(response, self.service_name, "speech synthesis")
        logger.debug(f"Synthesized {len(response.content)} bytes with voice {voice_id}")
        return response.content
