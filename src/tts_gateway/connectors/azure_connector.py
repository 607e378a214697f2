"""
Azure Speech connector.

Uses the Azure Cognitive Services Speech SDK to synthesize SSML in memory
(no audio device) and to fetch the neural voice catalog.

Settings:
    connector:
      type: azure
      azure:
        key: "..."                          # or AZURE_SPEECH_KEY
        region: westeurope                  # or AZURE_SPEECH_REGION
        output_format: Audio24Khz48KBitRateMonoMp3

Install:
    pip install tts-gateway[azure]
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from tts_gateway.connectors.base import BaseConnector, ConnectorError, SpeechAudio
from tts_gateway.core.config import Defaults
from tts_gateway.core.logging import error, info, verbose

# SpeechSynthesisOutputFormat name prefix -> MIME type
_CONTENT_TYPES = {
    "Audio": "audio/mpeg",
    "Riff": "audio/wav",
    "Ogg": "audio/ogg",
    "Webm": "audio/webm",
    "Raw": "application/octet-stream",
}


def content_type_for(output_format: str) -> str:
    for prefix, content_type in _CONTENT_TYPES.items():
        if output_format.startswith(prefix):
            return content_type
    return "application/octet-stream"


class AzureSpeechConnector(BaseConnector):
    """Connector for Azure neural text-to-speech."""

    name = "azure"

    def __init__(self, settings):
        super().__init__(settings)
        self.key: Optional[str] = self.options.get("key")
        self.region: str = str(self.options.get("region", Defaults.CONNECTOR_AZURE_REGION))
        self.output_format: str = str(self.options.get("output_format", Defaults.CONNECTOR_AZURE_OUTPUT_FORMAT))
        self._speechsdk: Any = None
        self._speech_config: Any = None

    def load(self) -> None:
        if not self.key:
            raise ConnectorError("Azure Speech key not configured (connector.azure.key or AZURE_SPEECH_KEY)")

        try:
            import azure.cognitiveservices.speech as speechsdk
        except ImportError as e:
            raise ConnectorError(
                "azure-cognitiveservices-speech is not installed: pip install tts-gateway[azure]"
            ) from e

        fmt = getattr(speechsdk.SpeechSynthesisOutputFormat, self.output_format, None)
        if fmt is None:
            raise ConnectorError(f"Unknown Azure output format: {self.output_format}")

        speech_config = speechsdk.SpeechConfig(subscription=self.key, region=self.region)
        speech_config.set_speech_synthesis_output_format(fmt)

        self._speechsdk = speechsdk
        self._speech_config = speech_config
        self._loaded = True
        info(self.logger, "connector_loaded", connector=self.name, region=self.region,
             output_format=self.output_format)

    def _synthesizer(self):
        self.ensure_loaded()
        # audio_config=None keeps audio in memory
        return self._speechsdk.SpeechSynthesizer(speech_config=self._speech_config, audio_config=None)

    def synthesize_ssml(self, ssml: str) -> SpeechAudio:
        synthesizer = self._synthesizer()
        result = synthesizer.speak_ssml_async(ssml).get()

        if result.reason != self._speechsdk.ResultReason.SynthesizingAudioCompleted:
            details = getattr(result, "cancellation_details", None)
            message = getattr(details, "error_details", None) or str(result.reason)
            error(self.logger, "synthesis_failed", connector=self.name, reason=str(result.reason),
                  error=message)
            raise ConnectorError(f"Azure synthesis failed: {message}")

        audio = bytes(result.audio_data)
        verbose(self.logger, "synthesized", connector=self.name, bytes=len(audio))
        return SpeechAudio(audio=audio, content_type=content_type_for(self.output_format))

    def list_voices(self) -> List[Dict[str, Any]]:
        synthesizer = self._synthesizer()
        result = synthesizer.get_voices_async("").get()

        if result.reason != self._speechsdk.ResultReason.VoicesListRetrieved:
            message = getattr(result, "error_details", None) or str(result.reason)
            error(self.logger, "voices_failed", connector=self.name, error=message)
            raise ConnectorError(f"Azure voice list failed: {message}")

        return [
            {
                "Name": v.name,
                "ShortName": v.short_name,
                "Gender": getattr(v.gender, "name", str(v.gender)),
                "Locale": v.locale,
                "LocalName": v.local_name,
                "StyleList": list(v.style_list or []),
            }
            for v in result.voices
        ]
