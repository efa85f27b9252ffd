"""
Speech capture for Besto.

Wraps SpeechRecognition's background listener: start() opens the
microphone, recognised phrases are appended to a live transcript,
stop() closes the microphone and returns the transcript.
"""

import logging
import threading
from typing import Any, Callable

import speech_recognition as sr

from besto.errors import SpeechUnavailableError

logger = logging.getLogger(__name__)


class SpeechCapture:
    """Microphone-to-text with start/stop controls and a live transcript."""

    def __init__(
        self,
        language: str = "en-US",
        energy_threshold: int = 300,
        phrase_time_limit: float | None = 10.0,
        recognizer: Any = None,
        microphone_factory: Callable[[], Any] | None = None,
    ):
        self.language = language
        self.phrase_time_limit = phrase_time_limit
        self.recognizer = recognizer or sr.Recognizer()
        self.recognizer.energy_threshold = max(0, energy_threshold)
        self._microphone_factory = microphone_factory or sr.Microphone
        self._supported: bool | None = None
        self._stopper: Callable[..., None] | None = None
        self._lock = threading.Lock()
        self._phrases: list[str] = []

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "SpeechCapture":
        speech = config.get("speech", {})
        return cls(
            language=speech.get("language", "en-US"),
            energy_threshold=speech.get("energy_threshold", 300),
            phrase_time_limit=speech.get("phrase_time_limit", 10.0),
        )

    @property
    def is_supported(self) -> bool:
        """True when a microphone can be opened (PyAudio present, input device found)."""
        if self._supported is None:
            try:
                self._microphone_factory()
                self._supported = True
            except (AttributeError, OSError, ImportError) as e:
                logger.info("Speech capture unavailable: %s", e)
                self._supported = False
        return self._supported

    @property
    def is_recording(self) -> bool:
        return self._stopper is not None

    @property
    def transcript(self) -> str:
        with self._lock:
            return " ".join(self._phrases)

    def start(self) -> None:
        """Reset the transcript and begin listening in the background."""
        if self.is_recording:
            return
        if not self.is_supported:
            raise SpeechUnavailableError("Speech recognition is not supported on this device")

        with self._lock:
            self._phrases = []

        source = self._microphone_factory()
        with source as calibration:
            self.recognizer.adjust_for_ambient_noise(calibration, duration=1)

        self._stopper = self.recognizer.listen_in_background(
            source, self._on_audio, phrase_time_limit=self.phrase_time_limit
        )
        logger.debug("Speech capture started")

    def stop(self) -> str:
        """Stop listening and return the final transcript."""
        if self._stopper is not None:
            stopper, self._stopper = self._stopper, None
            stopper(wait_for_stop=True)
            logger.debug("Speech capture stopped")
        return self.transcript

    def _on_audio(self, recognizer: Any, audio: Any) -> None:
        """Background listener callback: recognise one phrase."""
        try:
            text = recognizer.recognize_google(audio, language=self.language)
        except sr.UnknownValueError:
            return
        except sr.RequestError as e:
            logger.error("Speech recognition request failed: %s", e)
            return

        text = text.strip() if isinstance(text, str) else ""
        if text:
            with self._lock:
                self._phrases.append(text)
